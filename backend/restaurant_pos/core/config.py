"""Application configuration using pydantic-settings.

All environment variables should be accessed through the settings object
rather than using os.getenv() directly.
"""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str = "sqlite:///./restaurant_pos.db"

    # CORS - comma-separated origins or "*" for development only
    cors_origins: str = "http://localhost:3000,http://localhost:8000"

    # Public URL of the customer-facing bill page, used in email/SMS links
    base_url: str = "http://localhost:3000"

    # ==========================================================================
    # Email/SMTP
    # ==========================================================================
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_from_email: str = ""
    smtp_from_name: str = "Restaurant POS"
    smtp_use_tls: bool = True

    # ==========================================================================
    # SMS (Text.lk)
    # ==========================================================================
    textlk_api_url: str = "https://app.text.lk/api/v3/sms/send"
    textlk_api_token: Optional[str] = None
    textlk_sender_id: Optional[str] = None
    sms_country_code: str = "94"
    sms_timeout_seconds: float = 15.0

    # Branding used on bills and notifications
    restaurant_name: str = "Wokabulary"
    sms_signature: str = "Wokabulary Team"
    currency_label: str = "Rs."

    # Server
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # Rate limiting
    rate_limit_enabled: bool = True

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("sms_country_code")
    @classmethod
    def validate_country_code(cls, v: str) -> str:
        v = v.lstrip("+")
        if not v.isdigit():
            raise ValueError(f"sms_country_code must be numeric, got {v!r}")
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def email_configured(self) -> bool:
        return bool(self.smtp_user and self.smtp_password)

    @property
    def sms_configured(self) -> bool:
        return bool(self.textlk_api_token and self.textlk_sender_id)

    def bill_url(self, order_id: int) -> str:
        """Customer-facing URL for a bill."""
        return f"{self.base_url}/bill/{order_id}"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
