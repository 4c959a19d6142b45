"""Text.lk SMS gateway integration.

Messages go out over the Text.lk HTTP API with a bearer token and a
registered sender id. Phone numbers are normalised to the national
format the gateway expects (country code prefix, no ``+``).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from restaurant_pos.core.config import settings

logger = logging.getLogger(__name__)


def format_phone_number(phone: str, country_code: str = "94") -> str:
    """Normalise a phone number for the gateway.

    ``+94771234567`` -> ``94771234567``, ``0771234567`` -> ``94771234567``,
    ``771234567`` -> ``94771234567``.
    """
    phone = phone.replace(" ", "").replace("-", "").replace("(", "").replace(")", "")
    if phone.startswith("+"):
        return phone[1:]
    if phone.startswith("0"):
        return country_code + phone[1:]
    if not phone.startswith(country_code):
        return country_code + phone
    return phone


class SMSService:
    """Text.lk API client."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_token: Optional[str] = None,
        sender_id: Optional[str] = None,
        country_code: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._api_url = api_url or settings.textlk_api_url
        self._api_token = api_token if api_token is not None else settings.textlk_api_token
        self._sender_id = sender_id if sender_id is not None else settings.textlk_sender_id
        self._country_code = country_code or settings.sms_country_code
        self._timeout = timeout or settings.sms_timeout_seconds
        self._message_log: List[Dict[str, Any]] = []

    @property
    def is_configured(self) -> bool:
        return bool(self._api_token and self._sender_id)

    def configuration_error(self) -> Optional[str]:
        if not self._api_token and not self._sender_id:
            return "SMS configuration error: TEXTLK_API_TOKEN or TEXTLK_SENDER_ID is not configured"
        if not self._api_token:
            return "SMS configuration error: TEXTLK_API_TOKEN is not configured"
        if not self._sender_id:
            return "SMS configuration error: TEXTLK_SENDER_ID is not configured"
        return None

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def send(self, phone: str, message: str) -> Dict[str, Any]:
        """Send a plain text SMS. Never raises for gateway or network failures."""
        error = self.configuration_error()
        if error:
            logger.warning(f"SMS not sent to {phone}: {error}")
            return {"success": False, "error": error}

        recipient = format_phone_number(phone, self._country_code)
        body = {
            "recipient": recipient,
            "sender_id": self._sender_id,
            "type": "plain",
            "message": message,
        }
        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.post(self._api_url, json=body, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"SMS request to {recipient} failed: {e}")
            return {"success": False, "error": f"SMS service unreachable: {e}"}

        try:
            data = resp.json()
        except ValueError:
            data = {"message": resp.text}

        log_entry = {
            "to": recipient,
            "status_code": resp.status_code,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        self._message_log.append(log_entry)
        if len(self._message_log) > 1000:
            self._message_log = self._message_log[-500:]

        if resp.status_code >= 400 or data.get("status") != "success":
            error_message = data.get("message") or "SMS failed to send"
            logger.error(f"SMS send to {recipient} failed ({resp.status_code}): {error_message}")
            return {"success": False, "error": error_message}

        logger.info(f"SMS sent to {recipient}")
        return {"success": True, "message": data.get("message", "SMS sent successfully"), "data": data.get("data")}

    def get_message_log(self, limit: int = 50) -> List[Dict[str, Any]]:
        return self._message_log[-limit:]


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_service: Optional[SMSService] = None


def get_sms_service() -> SMSService:
    global _service
    if _service is None:
        _service = SMSService()
    return _service
