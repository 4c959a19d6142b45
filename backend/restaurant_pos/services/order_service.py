"""Order Service - places orders and keeps ingredient stock in step with them.

Flow for a new order (waiter order or cashier quick bill):
1. Resolve every line to its FoodItemPortion (price + ingredient recipe)
2. Aggregate ingredient requirements across all lines
3. Lock the ingredient rows and verify stock covers every requirement
4. Decrement stock with conditional updates (stock >= required)
5. Create Order, OrderItems, optional Payment and the ledger rows

Steps 3-5 run in one transaction: any failure rolls everything back, so an
order is never created without its stock deduction and stock is never
deducted without its order.
"""

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload, selectinload

from restaurant_pos.core.errors import BadRequestError, InsufficientStockError, NotFoundError
from restaurant_pos.models.customer import Customer
from restaurant_pos.models.ingredient import Ingredient, IngredientMovement, MovementReason
from restaurant_pos.models.menu import FoodItemPortion, FoodItemPortionIngredient
from restaurant_pos.models.order import Order, OrderItem, OrderStatus, OrderType, Payment
from restaurant_pos.models.staff import Staff
from restaurant_pos.schemas.order import OrderItemIn, PaymentData
from restaurant_pos.services.inventory_service import InventoryService
from restaurant_pos.services.order_status import StatusSurface, validate_transition

logger = logging.getLogger(__name__)

ORDER_REF = "order"


def aggregate_requirements(lines: List[Dict[str, Any]]) -> Dict[int, Decimal]:
    """Sum per-ingredient consumption over resolved order lines.

    Each line carries ``portion`` (a FoodItemPortion with its ingredients
    loaded) and ``quantity``. Lines sharing an ingredient accumulate.
    """
    requirements: Dict[int, Decimal] = defaultdict(lambda: Decimal("0"))
    for line in lines:
        quantity = Decimal(line["quantity"])
        for portion_ingredient in line["portion"].ingredients:
            requirements[portion_ingredient.ingredient_id] += portion_ingredient.quantity * quantity
    return dict(requirements)


def order_query(db: Session):
    """Order query with everything the API serializes eagerly loaded."""
    return db.query(Order).options(
        joinedload(Order.staff),
        joinedload(Order.customer),
        selectinload(Order.items).joinedload(OrderItem.food_item),
        selectinload(Order.items).joinedload(OrderItem.portion),
        selectinload(Order.payments),
    )


class OrderService:
    """Service for order placement, cancellation and status changes."""

    def __init__(self, db: Session):
        self.db = db
        self.inventory = InventoryService(db)

    def get(self, order_id: int) -> Order:
        order = order_query(self.db).filter(Order.id == order_id).first()
        if not order:
            raise NotFoundError("Order not found")
        return order

    # ===== PLACEMENT =====

    def resolve_lines(self, items: List[OrderItemIn]) -> List[Dict[str, Any]]:
        """Look up price and recipe for every requested line, validating availability."""
        lines = []
        for item in items:
            portion = (
                self.db.query(FoodItemPortion)
                .options(
                    joinedload(FoodItemPortion.food_item),
                    joinedload(FoodItemPortion.portion),
                    selectinload(FoodItemPortion.ingredients).joinedload(FoodItemPortionIngredient.ingredient),
                )
                .filter(
                    FoodItemPortion.food_item_id == item.food_item_id,
                    FoodItemPortion.portion_id == item.portion_id,
                )
                .first()
            )
            if not portion:
                raise BadRequestError(
                    f"Invalid food item and portion combination: {item.food_item_id}, {item.portion_id}"
                )
            if not portion.food_item.is_active:
                raise BadRequestError(f'Food item "{portion.food_item.name}" is currently disabled')
            if not portion.portion.is_active:
                raise BadRequestError(
                    f'Portion "{portion.portion.name}" for "{portion.food_item.name}" is currently disabled'
                )

            unit_price = Decimal(portion.price)
            lines.append({
                "item": item,
                "portion": portion,
                "quantity": item.quantity,
                "unit_price": unit_price,
                "total_price": unit_price * item.quantity,
            })
        return lines

    def check_stock(self, requirements: Dict[int, Decimal]) -> Dict[int, Ingredient]:
        """Lock the required ingredient rows and verify each covers its requirement.

        Rows are locked in id order so concurrent orders cannot deadlock.
        """
        if not requirements:
            return {}
        ingredients = (
            self.db.query(Ingredient)
            .filter(Ingredient.id.in_(sorted(requirements)))
            .order_by(Ingredient.id)
            .with_for_update()
            .populate_existing()
            .all()
        )
        by_id = {ingredient.id: ingredient for ingredient in ingredients}

        for ingredient_id in sorted(requirements):
            ingredient = by_id.get(ingredient_id)
            if ingredient is None:
                raise BadRequestError(f"Ingredient not found: {ingredient_id}")
            needed = requirements[ingredient_id]
            if ingredient.current_stock_quantity < needed:
                raise InsufficientStockError(
                    ingredient.name, ingredient.id,
                    ingredient.current_stock_quantity, needed, ingredient.unit_of_measurement,
                )
        return by_id

    def deduct_stock(self, requirements: Dict[int, Decimal], ingredients: Dict[int, Ingredient]) -> None:
        """Apply the decrements; each one only succeeds if stock still covers it."""
        for ingredient_id in sorted(requirements):
            needed = requirements[ingredient_id]
            result = self.db.execute(
                update(Ingredient)
                .where(Ingredient.id == ingredient_id, Ingredient.current_stock_quantity >= needed)
                .values(current_stock_quantity=Ingredient.current_stock_quantity - needed)
                .execution_options(synchronize_session="fetch")
            )
            if result.rowcount != 1:
                ingredient = ingredients[ingredient_id]
                self.db.refresh(ingredient)
                raise InsufficientStockError(
                    ingredient.name, ingredient.id,
                    ingredient.current_stock_quantity, needed, ingredient.unit_of_measurement,
                )

    def place_order(
        self,
        staff: Staff,
        items: List[OrderItemIn],
        *,
        status: OrderStatus = OrderStatus.PENDING,
        order_type: OrderType = OrderType.DINE_IN,
        table_number: Optional[int] = None,
        notes: Optional[str] = None,
        customer: Optional[Customer] = None,
        customer_name: Optional[str] = None,
        customer_email: Optional[str] = None,
        customer_phone: Optional[str] = None,
        bill_number: Optional[str] = None,
        payment: Optional[PaymentData] = None,
    ) -> Order:
        """Create an order and consume its ingredients atomically.

        Raises BadRequestError (or InsufficientStockError) with nothing
        written when any line or ingredient fails validation.
        """
        try:
            lines = self.resolve_lines(items)
            requirements = aggregate_requirements(lines)
            ingredients = self.check_stock(requirements)
            self.deduct_stock(requirements, ingredients)

            order = Order(
                table_number=table_number,
                staff_id=staff.id,
                customer_id=customer.id if customer else None,
                total_amount=sum((line["total_price"] for line in lines), Decimal("0")),
                notes=notes,
                status=status,
                order_type=order_type,
                bill_number=bill_number,
                customer_name=customer_name or (customer.name if customer else None),
                customer_email=customer_email or (customer.email if customer else None),
                customer_phone=customer_phone or (customer.phone if customer else None),
            )
            for line in lines:
                order.items.append(OrderItem(
                    food_item_id=line["item"].food_item_id,
                    portion_id=line["item"].portion_id,
                    quantity=line["quantity"],
                    unit_price=line["unit_price"],
                    total_price=line["total_price"],
                    special_requests=line["item"].special_requests,
                ))
            self.db.add(order)
            self.db.flush()

            for ingredient_id in sorted(requirements):
                self.inventory.record_movement(
                    ingredient_id, -requirements[ingredient_id], MovementReason.SALE,
                    ref_type=ORDER_REF, ref_id=order.id,
                )

            if payment is not None and customer is not None:
                self.db.add(Payment(
                    order_id=order.id,
                    customer_id=customer.id,
                    amount=order.total_amount,
                    received_amount=payment.received_amount,
                    balance=payment.balance,
                    payment_mode=payment.payment_mode,
                    reference_number=payment.reference_number,
                ))

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"Order {order.id} placed by staff {staff.id}: {len(lines)} line(s), "
            f"total {order.total_amount}, {len(requirements)} ingredient(s) deducted"
        )
        return self.get(order.id)

    # ===== STATUS =====

    def change_status(self, order_id: int, new_status: OrderStatus, surface: StatusSurface) -> Order:
        order = self.get(order_id)
        validate_transition(surface, order.status, new_status)
        previous = order.status
        order.status = new_status
        self.db.commit()
        logger.info(f"Order {order_id} status {previous.value} -> {new_status.value} ({surface.value})")
        return self.get(order_id)

    def cancel(self, order_id: int, reason: Optional[str] = None) -> Order:
        """Cancel a pending order and give back every ingredient it still holds."""
        order = (
            self.db.query(Order)
            .filter(Order.id == order_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if not order:
            raise NotFoundError("Order not found")
        if order.status != OrderStatus.PENDING:
            raise BadRequestError(
                f"Only pending orders can be cancelled (current status: {order.status.value})"
            )

        consumed = self._consumed_by(order)
        try:
            for ingredient_id in sorted(consumed):
                quantity = consumed[ingredient_id]
                self.db.execute(
                    update(Ingredient)
                    .where(Ingredient.id == ingredient_id)
                    .values(current_stock_quantity=Ingredient.current_stock_quantity + quantity)
                    .execution_options(synchronize_session="fetch")
                )
                self.inventory.record_movement(
                    ingredient_id, quantity, MovementReason.CANCELLATION,
                    ref_type=ORDER_REF, ref_id=order.id, notes=reason,
                )
            order.status = OrderStatus.CANCELLED
            order.notes = f"CANCELLED: {reason or 'No reason provided'}"
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Order {order_id} cancelled, restored {len(consumed)} ingredient(s)")
        return self.get(order_id)

    def _consumed_by(self, order: Order) -> Dict[int, Decimal]:
        """Ingredient quantities an order still holds out of stock.

        Net of every ledger row referencing the order, so sales minus earlier
        cancellations; only positive balances are returned. Read from the
        ledger so later recipe edits do not change what a cancellation gives
        back. Orders without ledger rows fall back to the current recipes.
        """
        rows = (
            self.db.query(IngredientMovement)
            .filter(
                IngredientMovement.ref_type == ORDER_REF,
                IngredientMovement.ref_id == order.id,
            )
            .all()
        )
        if rows:
            net: Dict[int, Decimal] = defaultdict(lambda: Decimal("0"))
            for row in rows:
                net[row.ingredient_id] -= row.qty_delta
            return {ingredient_id: qty for ingredient_id, qty in net.items() if qty > 0}

        lines = []
        for item in order.items:
            portion = (
                self.db.query(FoodItemPortion)
                .options(selectinload(FoodItemPortion.ingredients))
                .filter(
                    FoodItemPortion.food_item_id == item.food_item_id,
                    FoodItemPortion.portion_id == item.portion_id,
                )
                .first()
            )
            if portion:
                lines.append({"portion": portion, "quantity": item.quantity})
        return aggregate_requirements(lines)

    # ===== BILLING =====

    def update_customer_snapshot(
        self,
        order: Order,
        name: Optional[str],
        email: Optional[str],
        phone: Optional[str],
    ) -> None:
        if name:
            order.customer_name = name
        if email:
            order.customer_email = email
        if phone:
            order.customer_phone = phone

    def complete(self, order_id: int) -> Order:
        order = self.get(order_id)
        if order.status == OrderStatus.CANCELLED:
            raise BadRequestError("Cannot bill a cancelled order")
        order.status = OrderStatus.COMPLETED
        self.db.commit()
        return self.get(order_id)
