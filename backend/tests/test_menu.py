"""Tests for menu administration: categories, portions and food items."""

import pytest
from decimal import Decimal

from restaurant_pos.models.menu import FoodItemPortion, FoodItemPortionIngredient

API = "/api/v1"


def _order(client, menu, staff):
    return client.post(f"{API}/waiter/orders", json={
        "table_number": 1,
        "staff_id": staff.id,
        "items": [{"food_item_id": menu["burger"].id, "portion_id": menu["regular"].id, "quantity": 1}],
    }).json()["order"]


# ============== Categories ==============

class TestCategories:
    def test_create_and_list(self, client):
        res = client.post(f"{API}/admin/categories", json={"name": "Desserts", "description": "Sweet things"})
        assert res.status_code == 201
        assert res.json()["name"] == "Desserts"

        res = client.get(f"{API}/admin/categories")
        assert [c["name"] for c in res.json()["items"]] == ["Desserts"]

    def test_duplicate_name_case_insensitive(self, client, burger_menu):
        res = client.post(f"{API}/admin/categories", json={"name": "BURGERS"})
        assert res.status_code == 409
        assert res.json()["error"] == "A category with this name already exists"

    def test_name_is_escaped(self, client):
        res = client.post(f"{API}/admin/categories", json={"name": "<b>Mains</b>"})
        assert res.json()["name"] == "&lt;b&gt;Mains&lt;/b&gt;"

    def test_cannot_deactivate_with_active_items(self, client, burger_menu):
        res = client.put(f"{API}/admin/categories/{burger_menu['category'].id}", json={"is_active": False})
        assert res.status_code == 400
        assert res.json()["error"] == "Cannot deactivate category with 1 active food item(s)"
        assert res.json()["active_food_items"] == 1

    def test_deactivate_after_items_disabled(self, client, burger_menu, db_session):
        burger_menu["burger"].is_active = False
        db_session.commit()

        res = client.put(f"{API}/admin/categories/{burger_menu['category'].id}", json={"is_active": False})

        assert res.status_code == 200
        assert res.json()["is_active"] is False
        res = client.get(f"{API}/admin/categories", params={"active_only": True})
        assert res.json()["total"] == 0

    def test_cannot_delete_with_food_items(self, client, burger_menu):
        res = client.delete(f"{API}/admin/categories/{burger_menu['category'].id}")
        assert res.status_code == 400
        assert res.json() == {"error": "Cannot delete category with existing food items", "food_item_count": 1}

    def test_delete_empty_category(self, client):
        category_id = client.post(f"{API}/admin/categories", json={"name": "Drinks"}).json()["id"]

        res = client.delete(f"{API}/admin/categories/{category_id}")

        assert res.json() == {"status": "deleted", "id": category_id}
        assert client.delete(f"{API}/admin/categories/{category_id}").status_code == 404


# ============== Portions ==============

class TestPortions:
    def test_create_and_conflict(self, client):
        assert client.post(f"{API}/admin/portions", json={"name": "Family"}).status_code == 201
        res = client.post(f"{API}/admin/portions", json={"name": "family"})
        assert res.status_code == 409

    def test_name_too_short(self, client):
        res = client.post(f"{API}/admin/portions", json={"name": "X"})
        assert res.status_code == 422

    def test_cannot_deactivate_used_portion(self, client, burger_menu):
        res = client.put(f"{API}/admin/portions/{burger_menu['large'].id}", json={"is_active": False})
        assert res.status_code == 400
        assert res.json()["error"] == "Cannot deactivate portion used by 1 active food item(s)"

    def test_cannot_delete_used_portion(self, client, burger_menu):
        res = client.delete(f"{API}/admin/portions/{burger_menu['regular'].id}")
        assert res.status_code == 400
        assert res.json()["error"] == "Cannot delete portion as it is used by food items"

    def test_list_sorted(self, client, burger_menu):
        res = client.get(f"{API}/admin/portions")
        assert [p["name"] for p in res.json()["items"]] == ["Large", "Regular"]


# ============== Food items ==============

class TestFoodItems:
    def test_create_with_portions_and_recipes(self, client, burger_menu):
        res = client.post(f"{API}/admin/food-items", json={
            "name": "Cheese Burger",
            "category_id": burger_menu["category"].id,
            "portions": [
                {
                    "portion_id": burger_menu["regular"].id,
                    "price": "1400.00",
                    "ingredients": [
                        {"ingredient_id": burger_menu["beef"].id, "quantity": "120"},
                        {"ingredient_id": burger_menu["bun"].id, "quantity": "1"},
                    ],
                },
            ],
        })

        assert res.status_code == 201
        body = res.json()
        assert body["category"]["name"] == "Burgers"
        portion = body["portions"][0]
        assert portion["price"] == 1400.0
        assert {i["ingredient_name"]: i["quantity"] for i in portion["ingredients"]} == {"Beef": 120.0, "Bun": 1.0}

    def test_unknown_category(self, client, burger_menu):
        res = client.post(f"{API}/admin/food-items", json={
            "name": "Ghost",
            "category_id": 9999,
            "portions": [{"portion_id": burger_menu["regular"].id, "price": "10"}],
        })
        assert res.status_code == 404
        assert res.json()["error"] == "Category not found"

    def test_unknown_ingredient(self, client, burger_menu):
        res = client.post(f"{API}/admin/food-items", json={
            "name": "Ghost",
            "category_id": burger_menu["category"].id,
            "portions": [{
                "portion_id": burger_menu["regular"].id,
                "price": "10",
                "ingredients": [{"ingredient_id": 9999, "quantity": "1"}],
            }],
        })
        assert res.status_code == 400
        assert res.json()["error"] == "Ingredient not found: 9999"

    @pytest.mark.parametrize("portions", [
        [],
        [{"portion_id": 1, "price": "0"}],
        [{"portion_id": 1, "price": "5"}, {"portion_id": 1, "price": "6"}],
    ])
    def test_invalid_portions_rejected(self, client, burger_menu, portions):
        res = client.post(f"{API}/admin/food-items", json={
            "name": "Bad", "category_id": burger_menu["category"].id, "portions": portions,
        })
        assert res.status_code == 422

    def test_update_replaces_portions(self, client, burger_menu, db_session):
        burger_id = burger_menu["burger"].id
        res = client.put(f"{API}/admin/food-items/{burger_id}", json={
            "name": "Smash Burger",
            "portions": [{
                "portion_id": burger_menu["regular"].id,
                "price": "1300",
                "ingredients": [{"ingredient_id": burger_menu["beef"].id, "quantity": "90"}],
            }],
        })

        assert res.status_code == 200
        body = res.json()
        assert body["name"] == "Smash Burger"
        assert len(body["portions"]) == 1
        assert body["portions"][0]["price"] == 1300.0
        assert db_session.query(FoodItemPortion).filter(FoodItemPortion.food_item_id == burger_id).count() == 1
        assert db_session.query(FoodItemPortionIngredient).count() == 1

    def test_cannot_deactivate_with_open_orders(self, client, burger_menu, waiter):
        _order(client, burger_menu, waiter)

        res = client.put(f"{API}/admin/food-items/{burger_menu['burger'].id}", json={"is_active": False})

        assert res.status_code == 400
        assert res.json()["error"] == "Cannot deactivate food item while it is part of 1 open order(s)"

    def test_deactivate_once_orders_closed(self, client, burger_menu, waiter):
        order = _order(client, burger_menu, waiter)
        client.patch(f"{API}/orders/{order['id']}/cancel")

        res = client.put(f"{API}/admin/food-items/{burger_menu['burger'].id}", json={"is_active": False})

        assert res.status_code == 200
        assert res.json()["is_active"] is False

    def test_cannot_delete_ordered_item(self, client, burger_menu, waiter):
        _order(client, burger_menu, waiter)

        res = client.delete(f"{API}/admin/food-items/{burger_menu['burger'].id}")

        assert res.status_code == 400
        assert res.json()["order_item_count"] == 1

    def test_delete_cascades_recipes(self, client, burger_menu, db_session):
        res = client.delete(f"{API}/admin/food-items/{burger_menu['burger'].id}")

        assert res.status_code == 200
        assert db_session.query(FoodItemPortion).count() == 0
        assert db_session.query(FoodItemPortionIngredient).count() == 0

    def test_filter_by_category(self, client, burger_menu):
        res = client.get(f"{API}/admin/food-items", params={"category_id": burger_menu["category"].id})
        assert res.json()["total"] == 1
        res = client.get(f"{API}/admin/food-items", params={"category_id": 9999})
        assert res.json()["total"] == 0

    def test_get_missing(self, client):
        res = client.get(f"{API}/admin/food-items/9999")
        assert res.status_code == 404
        assert res.json()["error"] == "Food item not found"


class TestRecipeQuantities:
    def test_recipe_quantity_must_be_positive(self, burger_menu, db_session):
        usage = db_session.query(FoodItemPortionIngredient).first()
        with pytest.raises(ValueError):
            usage.quantity = Decimal("0")
