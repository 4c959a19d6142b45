"""Customer lookup, maintenance and order-time resolution."""

import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from restaurant_pos.core.errors import BadRequestError, ConflictError, NotFoundError
from restaurant_pos.models.customer import Customer
from restaurant_pos.models.order import Order, OrderStatus
from restaurant_pos.schemas.customer import CustomerCreate, CustomerUpdate
from restaurant_pos.schemas.order import CustomerData

logger = logging.getLogger(__name__)


class CustomerService:
    """Service for customer records."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, customer_id: int) -> Customer:
        customer = self.db.query(Customer).filter(Customer.id == customer_id).first()
        if not customer:
            raise NotFoundError("Customer not found")
        return customer

    def find_by_phone(self, phone: str) -> Optional[Customer]:
        """The unique customer with exactly this phone number, or None."""
        return self.db.query(Customer).filter(Customer.phone == phone.strip()).first()

    def _phone_taken(self, phone: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Customer.id).filter(Customer.phone == phone)
        if exclude_id is not None:
            query = query.filter(Customer.id != exclude_id)
        return query.first() is not None

    def list_with_stats(
        self, search: Optional[str] = None, skip: int = 0, limit: int = 50
    ) -> Tuple[List[Dict], int]:
        """Page of customers with order count, total spent and last order date."""
        query = self.db.query(Customer)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Customer.name.ilike(pattern),
                    Customer.phone.ilike(pattern),
                    Customer.email.ilike(pattern),
                )
            )
        total = query.count()
        customers = query.order_by(Customer.created_at.desc(), Customer.id.desc()).offset(skip).limit(limit).all()

        stats = {}
        if customers:
            rows = (
                self.db.query(
                    Order.customer_id,
                    func.count(Order.id),
                    func.coalesce(func.sum(Order.total_amount), 0),
                    func.max(Order.created_at),
                )
                .filter(
                    Order.customer_id.in_([c.id for c in customers]),
                    Order.status != OrderStatus.CANCELLED,
                )
                .group_by(Order.customer_id)
                .all()
            )
            stats = {row[0]: row[1:] for row in rows}

        results = []
        for customer in customers:
            order_count, total_spent, last_order = stats.get(customer.id, (0, Decimal("0"), None))
            results.append({
                "customer": customer,
                "order_count": order_count,
                "total_spent": Decimal(str(total_spent)),
                "last_order_date": last_order,
            })
        return results, total

    def create(self, data: CustomerCreate) -> Customer:
        if self._phone_taken(data.phone):
            raise ConflictError("A customer with this phone number already exists")
        customer = Customer(name=data.name, phone=data.phone, email=data.email)
        self.db.add(customer)
        self.db.commit()
        self.db.refresh(customer)
        logger.info(f"Customer created: {customer.name} (ID: {customer.id})")
        return customer

    def update(self, customer_id: int, data: CustomerUpdate) -> Customer:
        customer = self.get(customer_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("phone") and self._phone_taken(changes["phone"], exclude_id=customer_id):
            raise ConflictError("A customer with this phone number already exists")
        for field, value in changes.items():
            if value is not None or field == "email":
                setattr(customer, field, value)
        self.db.commit()
        self.db.refresh(customer)
        return customer

    def delete(self, customer_id: int) -> None:
        customer = self.get(customer_id)
        order_count = self.db.query(func.count(Order.id)).filter(Order.customer_id == customer_id).scalar()
        if order_count:
            raise BadRequestError(
                "Cannot delete customer with existing orders",
                extra={"order_count": order_count},
            )
        self.db.delete(customer)
        self.db.commit()
        logger.info(f"Customer deleted: ID {customer_id}")

    def resolve_for_order(self, data: Optional[CustomerData], require_contact: bool = False) -> Optional[Customer]:
        """Find or stage the customer an order belongs to.

        New customers are flushed, not committed, so a failed order placement
        rolls them back together with the order.
        """
        if data is None:
            return None

        if require_contact and (not data.name or not data.phone):
            raise BadRequestError("Customer name and phone are required")

        if data.customer_id is not None and not data.is_new_customer:
            return self.get(data.customer_id)

        if not data.phone:
            if data.is_new_customer:
                raise BadRequestError("Customer phone is required")
            return None

        existing = self.find_by_phone(data.phone)
        if existing:
            if data.is_new_customer:
                raise ConflictError("A customer with this phone number already exists")
            if data.email and not existing.email:
                existing.email = data.email
            return existing

        if not data.name:
            raise BadRequestError("Customer name is required")
        customer = Customer(name=data.name, phone=data.phone, email=data.email)
        self.db.add(customer)
        self.db.flush()
        logger.info(f"Customer staged for order: {customer.name} ({customer.phone})")
        return customer
