"""Ingredient inventory routes: catalogue, stock in/out and the movement ledger."""

from fastapi import APIRouter, Query, Request, status

from restaurant_pos.api.serializers import ingredient_to_dict, movement_to_dict
from restaurant_pos.core.rate_limit import limiter
from restaurant_pos.core.responses import list_response
from restaurant_pos.db.session import DbSession
from restaurant_pos.schemas.ingredient import IngredientCreate, IngredientUpdate, StockChange
from restaurant_pos.services.inventory_service import InventoryService
from restaurant_pos.services.units import format_quantity

router = APIRouter()


def _stock_result(result: dict, action: str) -> dict:
    ingredient = result["ingredient"]
    unit = ingredient.unit_of_measurement
    return {
        "message": f"{action} {format_quantity(result['quantity'], unit)} for {ingredient.name}",
        "ingredient": ingredient_to_dict(ingredient),
        "quantity": float(result["quantity"]),
        "previous_stock": float(result["previous_stock"]),
        "new_stock": float(ingredient.current_stock_quantity),
    }


@router.get("")
@limiter.limit("60/minute")
def list_ingredients(request: Request, db: DbSession):
    """List active ingredients sorted by name."""
    ingredients = InventoryService(db).list_active()
    return list_response([ingredient_to_dict(i) for i in ingredients])


@router.get("/low-stock")
@limiter.limit("60/minute")
def low_stock_ingredients(request: Request, db: DbSession):
    """Active ingredients at or below their reorder level."""
    ingredients = InventoryService(db).low_stock()
    return list_response([ingredient_to_dict(i) for i in ingredients])


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_ingredient(request: Request, db: DbSession, data: IngredientCreate):
    return ingredient_to_dict(InventoryService(db).create(data))


@router.put("/{ingredient_id}")
@limiter.limit("30/minute")
def update_ingredient(request: Request, db: DbSession, ingredient_id: int, data: IngredientUpdate):
    return ingredient_to_dict(InventoryService(db).update(ingredient_id, data))


@router.delete("/{ingredient_id}")
@limiter.limit("30/minute")
def delete_ingredient(request: Request, db: DbSession, ingredient_id: int):
    """Delete an ingredient no food item portion uses.

    Refused with the list of affected "Food (Portion)" names otherwise.
    """
    InventoryService(db).delete(ingredient_id)
    return {"status": "deleted", "id": ingredient_id}


@router.post("/{ingredient_id}/add-stock")
@limiter.limit("30/minute")
def add_stock(request: Request, db: DbSession, ingredient_id: int, data: StockChange):
    result = InventoryService(db).add_stock(ingredient_id, data)
    return _stock_result(result, "Added")


@router.post("/{ingredient_id}/stock-out")
@limiter.limit("30/minute")
def stock_out(request: Request, db: DbSession, ingredient_id: int, data: StockChange):
    result = InventoryService(db).stock_out(ingredient_id, data)
    return _stock_result(result, "Removed")


@router.get("/{ingredient_id}/movements")
@limiter.limit("60/minute")
def list_movements(
    request: Request,
    db: DbSession,
    ingredient_id: int,
    limit: int = Query(100, ge=1, le=500),
):
    """Stock ledger for one ingredient, newest first."""
    movements = InventoryService(db).movements(ingredient_id, limit=limit)
    return list_response([movement_to_dict(m) for m in movements])
