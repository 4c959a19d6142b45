"""Tests for quick bills, payments, bill rendering and bill notifications."""

import re
import pytest
from datetime import datetime, timezone
from decimal import Decimal

from restaurant_pos.core import email as email_module
from restaurant_pos.core.email import EmailService
from restaurant_pos.models.order import Order, OrderStatus, OrderType
from restaurant_pos.models.settings import RestaurantSettings
from restaurant_pos.models.staff import Staff, StaffRole
from restaurant_pos.services.billing_service import compute_totals, generate_bill_number
from restaurant_pos.services.notification_service import bill_sms_text, bill_subject

API = "/api/v1"

BILL_NUMBER = re.compile(r"^BILL-\d{8}-\d{4}$")


def _quick_bill_payload(menu, **extra):
    payload = {
        "items": [
            {"food_item_id": menu["burger"].id, "portion_id": menu["large"].id, "quantity": 1},
        ],
        "customer_data": {"name": "Nadeesha", "phone": "0712345678", "email": "nadeesha@example.com"},
        "payment_data": {"received_amount": 2000, "balance": 200, "payment_mode": "CASH"},
    }
    payload.update(extra)
    return payload


@pytest.fixture
def service_charge(db_session):
    db_session.add(RestaurantSettings(service_charge_rate=Decimal("10"), theme="blue"))
    db_session.commit()


# ============== Pure helpers ==============

class TestBillHelpers:
    def test_bill_number_format(self, db_session):
        number = generate_bill_number(db_session, now=datetime(2026, 3, 7, tzinfo=timezone.utc))
        assert BILL_NUMBER.match(number)
        assert number.startswith("BILL-20260307-")

    def test_compute_totals(self):
        order = Order(total_amount=Decimal("3000.00"))
        totals = compute_totals(order, Decimal("10"))
        assert totals["subtotal"] == Decimal("3000.00")
        assert totals["service_charge"] == Decimal("300.00")
        assert totals["total"] == Decimal("3300.00")

    def test_compute_totals_rounds_half_up(self):
        order = Order(total_amount=Decimal("10.05"))
        totals = compute_totals(order, Decimal("10"))
        assert totals["service_charge"] == Decimal("1.01")

    def test_zero_rate(self):
        totals = compute_totals(Order(total_amount=Decimal("500")), Decimal("0"))
        assert totals["service_charge"] == Decimal("0.00")
        assert totals["total"] == Decimal("500.00")

    def test_message_texts(self):
        order = Order(id=12, bill_number="BILL-20260307-0042", total_amount=Decimal("1800"),
                      order_type=OrderType.TAKEAWAY)
        assert bill_subject(order) == "Your Bill - Order #12 (Bill #BILL-20260307-0042)"
        sms = bill_sms_text(order, "Nadeesha")
        assert sms.startswith("Dear Nadeesha,")
        assert "https://pos.example.com/bill/12" in sms


# ============== Quick bill ==============

class TestQuickBill:
    def test_quick_bill_completed_and_notified(self, client, burger_menu, cashier, fake_notifications, db_session):
        res = client.post(f"{API}/cashier/quick-bill", json=_quick_bill_payload(burger_menu, staff_id=cashier.id))

        assert res.status_code == 201
        body = res.json()
        order = body["order"]
        assert order["status"] == "COMPLETED"
        assert order["order_type"] == "TAKEAWAY"
        assert order["table_number"] is None
        assert BILL_NUMBER.match(body["bill_number"])
        assert order["bill_number"] == body["bill_number"]
        assert order["payments"][0]["received_amount"] == 2000.0
        assert body["email_result"]["success"] is True
        assert body["sms_result"]["success"] is True

        (email_args, email_kwargs), = fake_notifications["email"].calls
        assert email_kwargs["to"] == "nadeesha@example.com"
        (sms_args, _), = fake_notifications["sms"].calls
        assert sms_args[0] == "0712345678"

        db_session.expire_all()
        assert burger_menu["beef"].current_stock_quantity == Decimal("250")

    def test_admin_rings_up_as_cashier(self, client, burger_menu, admin, fake_notifications, db_session):
        res = client.post(f"{API}/cashier/quick-bill", json=_quick_bill_payload(burger_menu, admin_id=admin.id))

        assert res.status_code == 201
        staff = db_session.query(Staff).filter(Staff.external_id == f"admin_{admin.id}").one()
        assert staff.role == StaffRole.CASHIER
        assert staff.email == "owner@example.com"
        assert res.json()["order"]["staff_id"] == staff.id

        # Second bill reuses the same staff record
        client.post(f"{API}/cashier/quick-bill", json=_quick_bill_payload(burger_menu, admin_id=admin.id))
        assert db_session.query(Staff).filter(Staff.external_id == f"admin_{admin.id}").count() == 1

    def test_requires_staff_or_admin(self, client, burger_menu, fake_notifications):
        res = client.post(f"{API}/cashier/quick-bill", json=_quick_bill_payload(burger_menu))
        assert res.status_code == 400
        assert res.json()["error"] == "Staff ID or admin ID is required"

    def test_requires_customer_phone(self, client, burger_menu, cashier, fake_notifications, db_session):
        payload = _quick_bill_payload(burger_menu, staff_id=cashier.id)
        payload["customer_data"] = {"name": "Nadeesha"}

        res = client.post(f"{API}/cashier/quick-bill", json=payload)

        assert res.status_code == 400
        assert res.json()["error"] == "Customer name and phone are required"
        assert db_session.query(Order).count() == 0

    def test_notification_failure_keeps_sale(self, client, burger_menu, cashier, fake_notifications, db_session):
        fake_notifications["email"].result = {"success": False, "error": "SMTP down"}
        fake_notifications["sms"].result = {"success": False, "error": "Gateway timeout"}

        res = client.post(f"{API}/cashier/quick-bill", json=_quick_bill_payload(burger_menu, staff_id=cashier.id))

        assert res.status_code == 201
        body = res.json()
        assert body["email_result"] == {"success": False, "error": "SMTP down"}
        assert body["sms_result"]["error"] == "Gateway timeout"
        order = db_session.query(Order).one()
        assert order.status == OrderStatus.COMPLETED

    def test_no_email_skips_email_channel(self, client, burger_menu, cashier, fake_notifications):
        payload = _quick_bill_payload(burger_menu, staff_id=cashier.id)
        del payload["customer_data"]["email"]

        res = client.post(f"{API}/cashier/quick-bill", json=payload)

        assert res.status_code == 201
        assert res.json()["email_result"] is None
        assert fake_notifications["email"].calls == []

    def test_insufficient_stock(self, client, burger_menu, cashier, fake_notifications, db_session):
        payload = _quick_bill_payload(burger_menu, staff_id=cashier.id)
        payload["items"][0]["quantity"] = 3  # 600 g beef

        res = client.post(f"{API}/cashier/quick-bill", json=payload)

        assert res.status_code == 400
        assert res.json()["error"].startswith('Insufficient inventory for ingredient "Beef"')
        assert fake_notifications["email"].calls == []
        assert db_session.query(Order).count() == 0


# ============== Payments ==============

class TestPayments:
    def test_record_payment(self, client, burger_menu, cashier, fake_notifications):
        bill = client.post(f"{API}/cashier/quick-bill", json=_quick_bill_payload(burger_menu, staff_id=cashier.id))
        order = bill.json()["order"]

        res = client.post(f"{API}/cashier/payments", json={
            "order_id": order["id"],
            "customer_id": order["customer_id"],
            "amount": 100,
            "received_amount": 100,
            "payment_mode": "CARD",
            "reference_number": "TXN-991",
        })

        assert res.status_code == 201
        assert res.json()["payment_mode"] == "CARD"
        assert res.json()["reference_number"] == "TXN-991"

    def test_unknown_order(self, client, db_session):
        res = client.post(f"{API}/cashier/payments", json={
            "order_id": 9999, "customer_id": 1, "amount": 10, "received_amount": 10, "payment_mode": "CASH",
        })
        assert res.status_code == 404


# ============== Bill views and sending ==============

class TestBills:
    @pytest.fixture
    def order(self, client, burger_menu, waiter):
        res = client.post(f"{API}/waiter/orders", json={
            "table_number": 5,
            "staff_id": waiter.id,
            "items": [
                {"food_item_id": burger_menu["burger"].id, "portion_id": burger_menu["regular"].id, "quantity": 1},
                {"food_item_id": burger_menu["burger"].id, "portion_id": burger_menu["large"].id, "quantity": 1},
            ],
        })
        return res.json()["order"]

    def test_bill_includes_service_charge(self, client, order, service_charge):
        res = client.get(f"{API}/bill/{order['id']}")

        assert res.status_code == 200
        body = res.json()
        assert body["subtotal"] == 3000.0
        assert body["service_charge_rate"] == 10.0
        assert body["service_charge"] == 300.0
        assert body["total"] == 3300.0
        assert body["staff"]["name"] == "Wendy Waiter"
        assert len(body["items"]) == 2

    def test_bill_not_found(self, client):
        res = client.get(f"{API}/bill/9999")
        assert res.status_code == 404
        assert res.json() == {"error": "Order not found"}

    def test_bill_pdf(self, client, order, service_charge):
        res = client.get(f"{API}/bill/{order['id']}/pdf")

        assert res.status_code == 200
        assert res.headers["content-type"] == "application/pdf"
        assert res.headers["content-disposition"] == f'attachment; filename="bill-{order["id"]}.pdf"'
        assert res.content.startswith(b"%PDF")

    def test_send_bill_completes_order(self, client, order, fake_notifications):
        res = client.post(f"{API}/orders/{order['id']}/bill", json={
            "customer_name": "Nadeesha",
            "customer_email": "nadeesha@example.com",
            "customer_phone": "0712345678",
        })

        assert res.status_code == 200
        body = res.json()
        assert body["order"]["status"] == "COMPLETED"
        assert body["order"]["customer_email"] == "nadeesha@example.com"
        assert body["email_result"]["success"] is True
        assert body["sms_result"]["success"] is True

    def test_send_bill_without_phone(self, client, order, fake_notifications):
        res = client.post(f"{API}/orders/{order['id']}/bill", json={"customer_email": "nadeesha@example.com"})

        assert res.status_code == 200
        assert res.json()["sms_result"] is None
        assert fake_notifications["sms"].calls == []

    def test_send_bill_requires_valid_email(self, client, order, fake_notifications):
        res = client.post(f"{API}/orders/{order['id']}/bill", json={"customer_email": "not-an-email"})
        assert res.status_code == 422

    def test_send_bill_for_cancelled_order(self, client, order, fake_notifications):
        client.patch(f"{API}/orders/{order['id']}/cancel")
        res = client.post(f"{API}/orders/{order['id']}/bill", json={"customer_email": "nadeesha@example.com"})
        assert res.status_code == 400
        assert res.json()["error"] == "Cannot bill a cancelled order"


# ============== SMTP ==============

class FakeSMTP:
    sent = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        pass

    def login(self, user, password):
        pass

    def sendmail(self, from_addr, to_addrs, message):
        FakeSMTP.sent.append((from_addr, to_addrs, message))


class TestEmailService:
    def test_unconfigured_does_not_connect(self, monkeypatch):
        monkeypatch.setattr(email_module.smtplib, "SMTP", None)
        result = EmailService().send(to="a@example.com", subject="Hi", body="Body")
        assert result == {"success": False, "error": "Email service is not configured"}

    def test_send_multipart(self, monkeypatch):
        FakeSMTP.sent = []
        monkeypatch.setattr(email_module.smtplib, "SMTP", FakeSMTP)
        service = EmailService()
        service.configure("smtp.example.com", 587, "pos@example.com", "pw", from_name="Restaurant POS")

        result = service.send(to="guest@example.com", subject="Your Bill", body="Plain", html_body="<p>Rich</p>")

        assert result["success"] is True
        from_addr, to_addrs, message = FakeSMTP.sent[0]
        assert from_addr == "pos@example.com"
        assert to_addrs == ["guest@example.com"]
        assert "Subject: Your Bill" in message
        assert "text/html" in message

    def test_smtp_failure_reported(self, monkeypatch):
        def refuse(*args, **kwargs):
            raise OSError("Connection refused")

        monkeypatch.setattr(email_module.smtplib, "SMTP", refuse)
        service = EmailService()
        service.configure("smtp.example.com", 587, "pos@example.com", "pw")

        result = service.send(to="guest@example.com", subject="Your Bill", body="Plain")

        assert result == {"success": False, "error": "Connection refused"}
