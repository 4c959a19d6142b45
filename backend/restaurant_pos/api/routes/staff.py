"""Staff administration routes."""

from typing import Optional

from fastapi import APIRouter, Request, status

from restaurant_pos.api.serializers import staff_to_dict
from restaurant_pos.core.rate_limit import limiter
from restaurant_pos.core.responses import list_response
from restaurant_pos.db.session import DbSession
from restaurant_pos.models.staff import StaffRole
from restaurant_pos.schemas.staff import StaffCreate, StaffUpdate
from restaurant_pos.services.staff_service import StaffService

router = APIRouter()


@router.get("")
@limiter.limit("60/minute")
def list_staff(
    request: Request,
    db: DbSession,
    role: Optional[StaffRole] = None,
    active_only: bool = False,
):
    staff = StaffService(db).list_staff(role=role, active_only=active_only)
    return list_response([staff_to_dict(s) for s in staff])


@router.post("", status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_staff(request: Request, db: DbSession, data: StaffCreate):
    return staff_to_dict(StaffService(db).create(data))


@router.put("/{staff_id}")
@limiter.limit("30/minute")
def update_staff(request: Request, db: DbSession, staff_id: int, data: StaffUpdate):
    return staff_to_dict(StaffService(db).update(staff_id, data))


@router.patch("/{staff_id}/toggle-status")
@limiter.limit("30/minute")
def toggle_staff_status(request: Request, db: DbSession, staff_id: int):
    """Flip is_active. Deactivation is refused while the staff member has active orders."""
    staff = StaffService(db).toggle_status(staff_id)
    return {
        "message": f"Staff member {'activated' if staff.is_active else 'deactivated'} successfully",
        "staff": staff_to_dict(staff),
    }


@router.delete("/{staff_id}")
@limiter.limit("30/minute")
def delete_staff(request: Request, db: DbSession, staff_id: int):
    StaffService(db).delete(staff_id)
    return {"status": "deleted", "id": staff_id}
