"""Order status transition rules.

Each API surface may only move an order along its own edges:

    kitchen: PENDING -> PREPARING -> READY
    waiter:  READY -> SERVED
    admin:   any status
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional

from restaurant_pos.core.errors import BadRequestError, InvalidTransitionError
from restaurant_pos.models.order import OrderStatus


class StatusSurface(str, Enum):
    KITCHEN = "kitchen"
    WAITER = "waiter"
    ADMIN = "admin"


KITCHEN_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PREPARING}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY}),
}

WAITER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.READY: frozenset({OrderStatus.SERVED}),
}

# Admin may set anything; None means unrestricted
_RULES: Dict[StatusSurface, Optional[Dict[OrderStatus, FrozenSet[OrderStatus]]]] = {
    StatusSurface.KITCHEN: KITCHEN_TRANSITIONS,
    StatusSurface.WAITER: WAITER_TRANSITIONS,
    StatusSurface.ADMIN: None,
}

# Statuses the kitchen queue shows, in display order
KITCHEN_QUEUE = (OrderStatus.PENDING, OrderStatus.PREPARING, OrderStatus.READY)


def parse_status(value: str) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise BadRequestError(
            "Invalid status",
            extra={"allowed": [s.value for s in OrderStatus]},
        ) from None


def allowed_next(surface: StatusSurface, current: OrderStatus) -> FrozenSet[OrderStatus]:
    rules = _RULES[surface]
    if rules is None:
        return frozenset(OrderStatus)
    return rules.get(current, frozenset())


def validate_transition(surface: StatusSurface, current: OrderStatus, requested: OrderStatus) -> None:
    """Raise InvalidTransitionError unless ``surface`` may move ``current`` to ``requested``."""
    if requested not in allowed_next(surface, current):
        raise InvalidTransitionError(current.value, requested.value)
