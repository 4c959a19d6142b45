"""Tests for the order lifecycle: waiter placement, kitchen progression, cancellation."""

import pytest
from decimal import Decimal

from restaurant_pos.core.errors import BadRequestError, InvalidTransitionError
from restaurant_pos.models.customer import Customer
from restaurant_pos.models.ingredient import IngredientMovement, MovementReason
from restaurant_pos.models.order import Order, OrderStatus
from restaurant_pos.schemas.order import OrderItemIn
from restaurant_pos.services.order_service import OrderService
from restaurant_pos.services.order_status import StatusSurface, allowed_next, validate_transition

API = "/api/v1"


def _order_payload(menu, staff, **extra):
    payload = {
        "table_number": 3,
        "staff_id": staff.id,
        "items": [
            {"food_item_id": menu["burger"].id, "portion_id": menu["regular"].id, "quantity": 2},
        ],
    }
    payload.update(extra)
    return payload


@pytest.fixture
def placed_order(client, burger_menu, waiter):
    """A PENDING order for 2 x Regular burger (200 g beef, 2 buns)."""
    res = client.post(f"{API}/waiter/orders", json=_order_payload(burger_menu, waiter))
    assert res.status_code == 201
    return res.json()["order"]


def _set_status(db, order_id, status):
    order = db.query(Order).filter(Order.id == order_id).first()
    order.status = status
    db.commit()


# ============== Transition rules ==============

class TestTransitionRules:
    def test_kitchen_edges(self):
        assert allowed_next(StatusSurface.KITCHEN, OrderStatus.PENDING) == {OrderStatus.PREPARING}
        assert allowed_next(StatusSurface.KITCHEN, OrderStatus.PREPARING) == {OrderStatus.READY}
        assert allowed_next(StatusSurface.KITCHEN, OrderStatus.READY) == frozenset()

    def test_waiter_only_serves_ready_orders(self):
        validate_transition(StatusSurface.WAITER, OrderStatus.READY, OrderStatus.SERVED)
        with pytest.raises(InvalidTransitionError):
            validate_transition(StatusSurface.WAITER, OrderStatus.PREPARING, OrderStatus.SERVED)

    def test_kitchen_cannot_skip_preparing(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            validate_transition(StatusSurface.KITCHEN, OrderStatus.PENDING, OrderStatus.READY)
        assert exc_info.value.message == "Invalid status transition from PENDING to READY"

    def test_admin_unrestricted(self):
        validate_transition(StatusSurface.ADMIN, OrderStatus.SERVED, OrderStatus.PENDING)
        validate_transition(StatusSurface.ADMIN, OrderStatus.CANCELLED, OrderStatus.COMPLETED)


# ============== Waiter ==============

class TestWaiterOrders:
    def test_create_order(self, client, burger_menu, waiter, db_session):
        res = client.post(f"{API}/waiter/orders", json=_order_payload(burger_menu, waiter, notes="No onions"))

        assert res.status_code == 201
        body = res.json()
        assert body["message"] == "Order created successfully"
        order = body["order"]
        assert order["status"] == "PENDING"
        assert order["table_number"] == 3
        assert order["total_amount"] == 2400.0
        assert order["notes"] == "No onions"
        assert order["staff"]["name"] == "Wendy Waiter"
        assert order["items"][0]["portion"]["name"] == "Regular"

        db_session.expire_all()
        assert burger_menu["beef"].current_stock_quantity == Decimal("250")
        assert burger_menu["bun"].current_stock_quantity == Decimal("18")

    def test_unknown_staff_rejected(self, client, burger_menu, waiter):
        payload = _order_payload(burger_menu, waiter)
        payload["staff_id"] = 9999
        res = client.post(f"{API}/waiter/orders", json=payload)
        assert res.status_code == 400
        assert res.json()["error"] == "Staff member not found"

    def test_inactive_staff_rejected(self, client, burger_menu, waiter, db_session):
        waiter.is_active = False
        db_session.commit()
        res = client.post(f"{API}/waiter/orders", json=_order_payload(burger_menu, waiter))
        assert res.status_code == 400
        assert "inactive" in res.json()["error"]

    def test_new_customer_created_with_order(self, client, burger_menu, waiter, db_session):
        payload = _order_payload(burger_menu, waiter, customer_data={
            "name": "Dinesh", "phone": "0771234567", "is_new_customer": True,
        })
        res = client.post(f"{API}/waiter/orders", json=payload)

        assert res.status_code == 201
        customer = db_session.query(Customer).filter(Customer.phone == "0771234567").first()
        assert customer is not None
        assert res.json()["order"]["customer_id"] == customer.id

    def test_staged_customer_discarded_when_stock_short(self, client, burger_menu, waiter, db_session):
        payload = _order_payload(burger_menu, waiter, customer_data={
            "name": "Dinesh", "phone": "0771234567", "is_new_customer": True,
        })
        payload["items"][0]["quantity"] = 10  # 1000 g beef

        res = client.post(f"{API}/waiter/orders", json=payload)

        assert res.status_code == 400
        assert db_session.query(Customer).count() == 0

    def test_payment_requires_customer(self, client, burger_menu, waiter):
        payload = _order_payload(burger_menu, waiter, payment_data={
            "received_amount": 3000, "balance": 600, "payment_mode": "CASH",
        })
        res = client.post(f"{API}/waiter/orders", json=payload)
        assert res.status_code == 400
        assert res.json()["error"] == "Customer details are required to record a payment"

    def test_order_with_payment(self, client, burger_menu, waiter):
        payload = _order_payload(
            burger_menu, waiter,
            customer_data={"name": "Dinesh", "phone": "0771234567"},
            payment_data={"received_amount": 3000, "balance": 600, "payment_mode": "CASH"},
        )
        res = client.post(f"{API}/waiter/orders", json=payload)

        assert res.status_code == 201
        payments = res.json()["order"]["payments"]
        assert len(payments) == 1
        assert payments[0]["amount"] == 2400.0
        assert payments[0]["payment_mode"] == "CASH"

    def test_list_orders_for_staff(self, client, placed_order, waiter, cook):
        res = client.get(f"{API}/waiter/orders", params={"staff_id": waiter.id})
        assert res.status_code == 200
        assert [o["id"] for o in res.json()["items"]] == [placed_order["id"]]

        res = client.get(f"{API}/waiter/orders", params={"staff_id": cook.id})
        assert res.json()["total"] == 0

    def test_list_orders_status_filter(self, client, placed_order, waiter):
        res = client.get(f"{API}/waiter/orders", params={"staff_id": waiter.id, "status": "ready"})
        assert res.json()["items"] == []

        res = client.get(f"{API}/waiter/orders", params={"staff_id": waiter.id, "status": "BOGUS"})
        assert res.status_code == 400
        assert res.json()["error"] == "Invalid status"

    def test_waiter_menu_groups_by_category(self, client, burger_menu, db_session):
        burger_menu["large"].is_active = False
        db_session.commit()

        res = client.get(f"{API}/waiter/food-items")

        assert res.status_code == 200
        body = res.json()
        assert body["total"] == 1
        burgers = body["categories"]["Burgers"]
        assert [p["portion"]["name"] for p in burgers[0]["portions"]] == ["Regular"]

    def test_mark_served(self, client, placed_order, db_session):
        order_id = placed_order["id"]

        res = client.patch(f"{API}/waiter/orders/{order_id}/status", json={"status": "SERVED"})
        assert res.status_code == 400
        assert res.json()["current_status"] == "PENDING"

        _set_status(db_session, order_id, OrderStatus.READY)
        res = client.patch(f"{API}/waiter/orders/{order_id}/status", json={"status": "served"})
        assert res.status_code == 200
        assert res.json()["order"]["status"] == "SERVED"


# ============== Kitchen ==============

class TestKitchen:
    def test_progression(self, client, placed_order):
        order_id = placed_order["id"]

        res = client.patch(f"{API}/kitchen/orders/{order_id}/status", json={"status": "PREPARING"})
        assert res.status_code == 200
        assert res.json()["order"]["status"] == "PREPARING"

        res = client.patch(f"{API}/kitchen/orders/{order_id}/status", json={"status": "READY"})
        assert res.status_code == 200
        assert res.json()["order"]["status"] == "READY"

        res = client.patch(f"{API}/kitchen/orders/{order_id}/status", json={"status": "SERVED"})
        assert res.status_code == 400
        assert res.json()["error"] == "Invalid status transition from READY to SERVED"

    def test_unknown_order(self, client):
        res = client.patch(f"{API}/kitchen/orders/9999/status", json={"status": "PREPARING"})
        assert res.status_code == 404
        assert res.json()["error"] == "Order not found"

    def test_queue_orders_by_status_and_shows_recipes(self, client, burger_menu, waiter, db_session):
        burger_menu["beef"].current_stock_quantity = Decimal("5000")
        db_session.commit()
        first = client.post(f"{API}/waiter/orders", json=_order_payload(burger_menu, waiter)).json()["order"]
        second = client.post(f"{API}/waiter/orders", json=_order_payload(burger_menu, waiter)).json()["order"]
        served = client.post(f"{API}/waiter/orders", json=_order_payload(burger_menu, waiter)).json()["order"]
        _set_status(db_session, first["id"], OrderStatus.PREPARING)
        _set_status(db_session, served["id"], OrderStatus.SERVED)

        res = client.get(f"{API}/kitchen/orders")

        assert res.status_code == 200
        items = res.json()["items"]
        assert [o["id"] for o in items] == [second["id"], first["id"]]
        beef = next(i for i in items[0]["items"][0]["ingredients"] if i["ingredient_name"] == "Beef")
        assert beef["quantity"] == 100.0
        assert beef["total_quantity"] == 200.0

    def test_food_item_ingredients_stock_status(self, client, burger_menu, db_session):
        burger_menu["bun"].current_stock_quantity = Decimal("0")
        db_session.commit()

        res = client.get(f"{API}/kitchen/food-item-ingredients")

        assert res.status_code == 200
        burger = res.json()["items"][0]
        statuses = {
            i["ingredient_name"]: i["stock_status"]
            for p in burger["portions"] for i in p["ingredients"]
        }
        assert statuses == {"Beef": "IN_STOCK", "Bun": "OUT_OF_STOCK"}


# ============== Cancellation ==============

class TestCancel:
    def test_cancel_restores_stock(self, client, placed_order, burger_menu, db_session):
        res = client.patch(f"{API}/orders/{placed_order['id']}/cancel", json={"reason": "Customer left"})

        assert res.status_code == 200
        order = res.json()["order"]
        assert order["status"] == "CANCELLED"
        assert order["notes"] == "CANCELLED: Customer left"

        db_session.expire_all()
        assert burger_menu["beef"].current_stock_quantity == Decimal("450")
        assert burger_menu["bun"].current_stock_quantity == Decimal("20")
        restored = (
            db_session.query(IngredientMovement)
            .filter(IngredientMovement.reason == MovementReason.CANCELLATION.value)
            .count()
        )
        assert restored == 2

    def test_cancel_without_reason(self, client, placed_order):
        res = client.patch(f"{API}/orders/{placed_order['id']}/cancel")
        assert res.status_code == 200
        assert res.json()["order"]["notes"] == "CANCELLED: No reason provided"

    def test_cancel_uses_quantities_actually_consumed(self, client, placed_order, burger_menu, db_session):
        # Recipe change after the sale must not change what comes back
        regular_fip = next(p for p in burger_menu["burger"].portions if p.portion_id == burger_menu["regular"].id)
        beef_usage = next(u for u in regular_fip.ingredients if u.ingredient_id == burger_menu["beef"].id)
        beef_usage.quantity = Decimal("150")
        db_session.commit()

        client.patch(f"{API}/orders/{placed_order['id']}/cancel")

        db_session.expire_all()
        assert burger_menu["beef"].current_stock_quantity == Decimal("450")

    @pytest.mark.parametrize("status", [OrderStatus.PREPARING, OrderStatus.SERVED, OrderStatus.CANCELLED])
    def test_only_pending_can_be_cancelled(self, client, placed_order, db_session, status):
        _set_status(db_session, placed_order["id"], status)

        res = client.patch(f"{API}/orders/{placed_order['id']}/cancel")

        assert res.status_code == 400
        assert res.json()["error"] == (
            f"Only pending orders can be cancelled (current status: {status.value})"
        )

    def test_cancel_twice_restores_once(self, client, placed_order, burger_menu, db_session):
        client.patch(f"{API}/orders/{placed_order['id']}/cancel")
        res = client.patch(f"{API}/orders/{placed_order['id']}/cancel")

        assert res.status_code == 400
        db_session.expire_all()
        assert burger_menu["beef"].current_stock_quantity == Decimal("450")

    def test_recancel_after_reopen_restores_nothing_more(self, client, placed_order, burger_menu, db_session):
        order_id = placed_order["id"]
        assert client.patch(f"{API}/orders/{order_id}/cancel").status_code == 200
        res = client.patch(f"{API}/admin/orders/{order_id}/status", json={"status": "PENDING"})
        assert res.json()["order"]["status"] == "PENDING"

        res = client.patch(f"{API}/orders/{order_id}/cancel")

        assert res.status_code == 200
        assert res.json()["order"]["status"] == "CANCELLED"
        db_session.expire_all()
        assert burger_menu["beef"].current_stock_quantity == Decimal("450")
        assert burger_menu["bun"].current_stock_quantity == Decimal("20")
        restored = (
            db_session.query(IngredientMovement)
            .filter(IngredientMovement.reason == MovementReason.CANCELLATION.value)
            .count()
        )
        assert restored == 2


# ============== Admin ==============

class TestAdminOrders:
    def test_list_paginated_with_filters(self, client, burger_menu, waiter, db_session):
        burger_menu["beef"].current_stock_quantity = Decimal("5000")
        db_session.commit()
        for table in (1, 2, 2):
            client.post(f"{API}/waiter/orders", json=_order_payload(burger_menu, waiter, table_number=table))

        res = client.get(f"{API}/admin/orders", params={"table_number": 2})
        body = res.json()
        assert body["total"] == 2
        assert body["has_more"] is False

        res = client.get(f"{API}/admin/orders", params={"limit": 1})
        body = res.json()
        assert body["total"] == 3
        assert len(body["items"]) == 1
        assert body["has_more"] is True

    def test_admin_can_set_any_status(self, client, placed_order):
        res = client.patch(f"{API}/admin/orders/{placed_order['id']}/status", json={"status": "COMPLETED"})
        assert res.status_code == 200
        assert res.json()["order"]["status"] == "COMPLETED"

    def test_invalid_status_value(self, client, placed_order):
        res = client.patch(f"{API}/admin/orders/{placed_order['id']}/status", json={"status": "EATEN"})
        assert res.status_code == 400
        assert "PENDING" in res.json()["allowed"]


class TestServiceErrors:
    def test_complete_cancelled_order_rejected(self, burger_menu, waiter, db_session):
        service = OrderService(db_session)
        order = service.place_order(
            waiter,
            [OrderItemIn(food_item_id=burger_menu["burger"].id, portion_id=burger_menu["regular"].id, quantity=1)],
            table_number=1,
        )
        service.cancel(order.id)

        with pytest.raises(BadRequestError) as exc_info:
            service.complete(order.id)
        assert exc_info.value.message == "Cannot bill a cancelled order"
