"""Staff management and order attribution."""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from restaurant_pos.core.errors import BadRequestError, ConflictError, NotFoundError
from restaurant_pos.models.order import ACTIVE_ORDER_STATUSES, Order
from restaurant_pos.models.staff import Admin, Staff, StaffRole
from restaurant_pos.schemas.staff import StaffCreate, StaffUpdate

logger = logging.getLogger(__name__)


class StaffService:
    """Service for staff records."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, staff_id: int) -> Staff:
        staff = self.db.query(Staff).filter(Staff.id == staff_id).first()
        if not staff:
            raise NotFoundError("Staff member not found")
        return staff

    def list_staff(self, role: Optional[StaffRole] = None, active_only: bool = False) -> List[Staff]:
        query = self.db.query(Staff)
        if role:
            query = query.filter(Staff.role == role)
        if active_only:
            query = query.filter(Staff.is_active.is_(True))
        return query.order_by(Staff.name).all()

    def _email_taken(self, email: str, exclude_id: Optional[int] = None) -> bool:
        query = self.db.query(Staff.id).filter(Staff.email == email.lower())
        if exclude_id is not None:
            query = query.filter(Staff.id != exclude_id)
        return query.first() is not None

    def _active_order_count(self, staff_id: int) -> int:
        return (
            self.db.query(func.count(Order.id))
            .filter(Order.staff_id == staff_id, Order.status.in_(ACTIVE_ORDER_STATUSES))
            .scalar()
        )

    def _ensure_can_deactivate(self, staff: Staff) -> None:
        active = self._active_order_count(staff.id)
        if active:
            raise BadRequestError(
                f"Cannot deactivate {staff.name} while they have {active} active order(s)",
                extra={"active_orders": active},
            )

    def create(self, data: StaffCreate) -> Staff:
        if self._email_taken(data.email):
            raise ConflictError("A staff member with this email already exists")
        staff = Staff(
            name=data.name,
            email=data.email,
            phone=data.phone,
            role=data.role,
            is_active=data.is_active,
        )
        self.db.add(staff)
        self.db.commit()
        self.db.refresh(staff)
        logger.info(f"Staff created: {staff.name} ({staff.role.value})")
        return staff

    def update(self, staff_id: int, data: StaffUpdate) -> Staff:
        staff = self.get(staff_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("email") and self._email_taken(changes["email"], exclude_id=staff_id):
            raise ConflictError("A staff member with this email already exists")
        if changes.get("is_active") is False and staff.is_active:
            self._ensure_can_deactivate(staff)

        for field, value in changes.items():
            if value is not None or field == "phone":
                setattr(staff, field, value)
        self.db.commit()
        self.db.refresh(staff)
        return staff

    def toggle_status(self, staff_id: int) -> Staff:
        staff = self.get(staff_id)
        if staff.is_active:
            self._ensure_can_deactivate(staff)
        staff.is_active = not staff.is_active
        self.db.commit()
        self.db.refresh(staff)
        logger.info(f"Staff {staff.name} {'activated' if staff.is_active else 'deactivated'}")
        return staff

    def delete(self, staff_id: int) -> None:
        staff = self.get(staff_id)
        order_count = self.db.query(func.count(Order.id)).filter(Order.staff_id == staff_id).scalar()
        if order_count:
            raise BadRequestError(
                "Cannot delete staff member with existing orders. Deactivate them instead.",
                extra={"order_count": order_count},
            )
        self.db.delete(staff)
        self.db.commit()
        logger.info(f"Staff deleted: ID {staff_id}")

    def resolve_for_order(self, staff_id: Optional[int] = None, admin_id: Optional[int] = None) -> Staff:
        """Staff member an order is attributed to.

        An admin ringing up a sale is mapped onto a CASHIER staff record
        (matched by email or by external id ``admin_<id>``, created on first use).
        """
        if staff_id is not None:
            staff = self.db.query(Staff).filter(Staff.id == staff_id).first()
            if not staff:
                raise BadRequestError("Staff member not found")
            if not staff.is_active:
                raise BadRequestError(f"Staff member {staff.name} is inactive")
            return staff

        if admin_id is None:
            raise BadRequestError("Staff ID or admin ID is required")

        admin = self.db.query(Admin).filter(Admin.id == admin_id, Admin.is_active.is_(True)).first()
        if not admin:
            raise BadRequestError("Staff member or admin not found")

        external_id = f"admin_{admin.id}"
        staff = (
            self.db.query(Staff)
            .filter((Staff.email == admin.email) | (Staff.external_id == external_id))
            .first()
        )
        if staff:
            return staff

        staff = Staff(
            name=admin.name,
            email=admin.email,
            role=StaffRole.CASHIER,
            external_id=external_id,
            is_active=True,
        )
        self.db.add(staff)
        self.db.flush()
        logger.info(f"Created cashier staff record for admin {admin.email}")
        return staff
