"""Pytest configuration and fixtures."""

import os

# Configure the app for tests before anything imports the settings
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASSWORD"] = ""
os.environ["TEXTLK_API_TOKEN"] = ""
os.environ["TEXTLK_SENDER_ID"] = ""
os.environ["BASE_URL"] = "https://pos.example.com"

import pytest
from decimal import Decimal
from typing import Generator

from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from restaurant_pos.core.security import get_password_hash
from restaurant_pos.db.base import Base
from restaurant_pos.db.session import enable_sqlite_foreign_keys, get_db
from restaurant_pos.main import app
# Import all models to ensure they're registered with Base.metadata
from restaurant_pos.models import *  # noqa: F401,F403
from restaurant_pos.models import (
    Admin,
    Category,
    FoodItem,
    FoodItemPortion,
    FoodItemPortionIngredient,
    Ingredient,
    Portion,
    Staff,
    StaffRole,
)
from restaurant_pos.services import notification_service

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_foreign_keys)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database override."""
    def override_get_db():
        try:
            yield db_session
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    # Disable the rate limiter during tests to avoid flaky failures
    from restaurant_pos.core.rate_limit import limiter
    limiter.enabled = False
    # Don't raise server exceptions so we can test error status codes
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# ============== People ==============

def _staff(db_session: Session, name: str, email: str, role: StaffRole) -> Staff:
    staff = Staff(name=name, email=email, role=role, is_active=True)
    db_session.add(staff)
    db_session.commit()
    db_session.refresh(staff)
    return staff


@pytest.fixture
def waiter(db_session: Session) -> Staff:
    return _staff(db_session, "Wendy Waiter", "wendy@example.com", StaffRole.WAITER)


@pytest.fixture
def cook(db_session: Session) -> Staff:
    return _staff(db_session, "Kevin Kitchen", "kevin@example.com", StaffRole.KITCHEN)


@pytest.fixture
def cashier(db_session: Session) -> Staff:
    return _staff(db_session, "Cara Cashier", "cara@example.com", StaffRole.CASHIER)


@pytest.fixture
def admin(db_session: Session) -> Admin:
    admin = Admin(
        email="Owner@Example.com",
        password_hash=get_password_hash("admin123"),
        name="Owner Admin",
        is_active=True,
    )
    db_session.add(admin)
    db_session.commit()
    db_session.refresh(admin)
    return admin


# ============== Menu ==============

@pytest.fixture
def burger_menu(db_session: Session) -> dict:
    """Burger in two portions sharing one beef stock of 450 g.

    Large uses 200 g beef and a bun, Regular uses 100 g beef and a bun.
    """
    category = Category(name="Burgers", is_active=True)
    regular = Portion(name="Regular", is_active=True)
    large = Portion(name="Large", is_active=True)
    beef = Ingredient(
        name="Beef",
        unit_of_measurement="g",
        current_stock_quantity=Decimal("450"),
        reorder_level=Decimal("100"),
    )
    bun = Ingredient(
        name="Bun",
        unit_of_measurement="pcs",
        current_stock_quantity=Decimal("20"),
        reorder_level=Decimal("5"),
    )
    db_session.add_all([category, regular, large, beef, bun])
    db_session.flush()

    burger = FoodItem(name="Burger", category_id=category.id, is_active=True)
    large_fip = FoodItemPortion(
        portion_id=large.id,
        price=Decimal("1800.00"),
        ingredients=[
            FoodItemPortionIngredient(ingredient_id=beef.id, quantity=Decimal("200")),
            FoodItemPortionIngredient(ingredient_id=bun.id, quantity=Decimal("1")),
        ],
    )
    regular_fip = FoodItemPortion(
        portion_id=regular.id,
        price=Decimal("1200.00"),
        ingredients=[
            FoodItemPortionIngredient(ingredient_id=beef.id, quantity=Decimal("100")),
            FoodItemPortionIngredient(ingredient_id=bun.id, quantity=Decimal("1")),
        ],
    )
    burger.portions.extend([large_fip, regular_fip])
    db_session.add(burger)
    db_session.commit()

    return {
        "category": category,
        "regular": regular,
        "large": large,
        "beef": beef,
        "bun": bun,
        "burger": burger,
        "db": db_session,
    }


# ============== Outbound notifications ==============

class FakeChannel:
    """Records sends and answers with a canned result."""

    def __init__(self, result: dict):
        self.result = result
        self.calls = []

    def send(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        return self.result


@pytest.fixture
def fake_notifications(monkeypatch) -> dict:
    """Replace the email and SMS services used for bill notifications."""
    email = FakeChannel({"success": True, "message": "Email sent successfully"})
    sms = FakeChannel({"success": True, "message": "SMS sent successfully"})
    monkeypatch.setattr(notification_service, "get_email_service", lambda: email)
    monkeypatch.setattr(notification_service, "get_sms_service", lambda: sms)
    return {"email": email, "sms": sms}
