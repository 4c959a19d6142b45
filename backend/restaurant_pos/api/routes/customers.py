"""Customer management routes."""

from typing import Optional

from fastapi import APIRouter, Query, Request, status

from restaurant_pos.api.serializers import customer_to_dict
from restaurant_pos.core.rate_limit import limiter
from restaurant_pos.core.responses import paginated_response
from restaurant_pos.db.session import DbSession
from restaurant_pos.schemas.customer import CustomerCreate, CustomerUpdate
from restaurant_pos.services.customer_service import CustomerService

router = APIRouter()


@router.get("")
@limiter.limit("60/minute")
def list_customers(
    request: Request,
    db: DbSession,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0, description="Number of items to skip"),
    limit: int = Query(50, ge=1, le=500, description="Maximum items to return"),
):
    """List customers with order count, total spent and last order date."""
    rows, total = CustomerService(db).list_with_stats(search=search, skip=skip, limit=limit)
    items = [customer_to_dict(row["customer"], stats=row) for row in rows]
    return paginated_response(items, total, skip, limit)


@router.get("/search")
@limiter.limit("60/minute")
def search_customer_by_phone(request: Request, db: DbSession, phone: str = Query(..., min_length=1)):
    """Exact phone lookup: the matching customer, or null."""
    customer = CustomerService(db).find_by_phone(phone)
    return {"customer": customer_to_dict(customer) if customer else None}


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_customer(request: Request, db: DbSession, data: CustomerCreate):
    return customer_to_dict(CustomerService(db).create(data))


@router.put("/{customer_id}")
@limiter.limit("30/minute")
def update_customer(request: Request, db: DbSession, customer_id: int, data: CustomerUpdate):
    return customer_to_dict(CustomerService(db).update(customer_id, data))


@router.delete("/{customer_id}")
@limiter.limit("30/minute")
def delete_customer(request: Request, db: DbSession, customer_id: int):
    CustomerService(db).delete(customer_id)
    return {"status": "deleted", "id": customer_id}
