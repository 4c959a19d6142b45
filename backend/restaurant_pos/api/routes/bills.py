"""Customer-facing bill routes (JSON and PDF)."""

from fastapi import APIRouter, Request
from fastapi.responses import Response

from restaurant_pos.api.serializers import order_to_dict, totals_to_dict
from restaurant_pos.core.rate_limit import limiter
from restaurant_pos.db.session import DbSession
from restaurant_pos.services.billing_service import compute_totals, generate_bill_pdf, get_restaurant_settings
from restaurant_pos.services.order_service import OrderService

router = APIRouter()


@router.get("/{order_id}")
@limiter.limit("60/minute")
def get_bill(request: Request, db: DbSession, order_id: int):
    """Order with staff, items and payments plus the service-charge totals."""
    order = OrderService(db).get(order_id)
    rate = get_restaurant_settings(db).service_charge_rate
    return {**order_to_dict(order), **totals_to_dict(compute_totals(order, rate))}


@router.get("/{order_id}/pdf")
@limiter.limit("20/minute")
def get_bill_pdf(request: Request, db: DbSession, order_id: int):
    order = OrderService(db).get(order_id)
    rate = get_restaurant_settings(db).service_charge_rate
    pdf = generate_bill_pdf(order, rate)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="bill-{order.id}.pdf"'},
    )
