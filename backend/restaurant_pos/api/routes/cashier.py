"""Cashier routes: quick bills and payments."""

import logging

from fastapi import APIRouter, Request, status

from restaurant_pos.api.serializers import order_to_dict, payment_to_dict
from restaurant_pos.core.errors import BadRequestError
from restaurant_pos.core.rate_limit import limiter
from restaurant_pos.db.session import DbSession
from restaurant_pos.models.order import OrderStatus, Payment
from restaurant_pos.schemas.order import PaymentCreate, QuickBillCreate
from restaurant_pos.services.billing_service import generate_bill_number
from restaurant_pos.services.customer_service import CustomerService
from restaurant_pos.services.notification_service import notify_bill
from restaurant_pos.services.order_service import OrderService
from restaurant_pos.services.staff_service import StaffService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/quick-bill", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_quick_bill(request: Request, db: DbSession, data: QuickBillCreate):
    """Ring up a takeaway/walk-in sale and send the bill.

    The order is created COMPLETED with a bill number and its payment.
    Email and SMS delivery are attempted afterwards and reported
    separately; a failed notification does not undo the sale.
    """
    staff = StaffService(db).resolve_for_order(staff_id=data.staff_id, admin_id=data.admin_id)
    customer = CustomerService(db).resolve_for_order(data.customer_data, require_contact=True)

    order = OrderService(db).place_order(
        staff,
        data.items,
        status=OrderStatus.COMPLETED,
        order_type=data.order_type,
        notes=data.notes,
        customer=customer,
        customer_name=data.customer_data.name,
        customer_email=data.customer_data.email,
        customer_phone=data.customer_data.phone,
        bill_number=generate_bill_number(db),
        payment=data.payment_data,
    )
    logger.info(f"Quick bill {order.bill_number} created for order {order.id}")

    results = notify_bill(
        order,
        email=order.customer_email,
        phone=order.customer_phone,
        customer_name=order.customer_name,
    )
    return {
        "message": "Quick bill created successfully",
        "order": order_to_dict(order),
        "bill_number": order.bill_number,
        **results,
    }


@router.post("/payments", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_payment(request: Request, db: DbSession, data: PaymentCreate):
    """Record a payment against an existing order."""
    order = OrderService(db).get(data.order_id)
    customer = CustomerService(db).get(data.customer_id)
    if order.status == OrderStatus.CANCELLED:
        raise BadRequestError("Cannot record a payment for a cancelled order")

    payment = Payment(
        order_id=order.id,
        customer_id=customer.id,
        amount=data.amount,
        received_amount=data.received_amount,
        balance=data.balance,
        payment_mode=data.payment_mode,
        reference_number=data.reference_number,
    )
    db.add(payment)
    db.commit()
    db.refresh(payment)
    logger.info(f"Payment {payment.id} of {payment.amount} recorded for order {order.id}")
    return payment_to_dict(payment)
