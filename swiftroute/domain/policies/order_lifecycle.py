"""OrderLifecyclePolicy — which status changes an order may go through."""

from __future__ import annotations

from swiftroute.domain.errors import ValidationError
from swiftroute.domain.value_objects.enums import OrderStatus

ALLOWED_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.ASSIGNED, OrderStatus.CANCELLED}),
    OrderStatus.ASSIGNED: frozenset(
        {OrderStatus.PICKED, OrderStatus.DELIVERED, OrderStatus.PENDING, OrderStatus.CANCELLED}
    ),
    OrderStatus.PICKED: frozenset(
        {OrderStatus.DELIVERED, OrderStatus.PENDING, OrderStatus.CANCELLED}
    ),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def ensure_transition(current: OrderStatus, target: OrderStatus) -> None:
    """Raise ValidationError unless *current* → *target* is allowed."""
    if not can_transition(current, target):
        raise ValidationError(
            f"Cannot change order status from '{current.value}' to '{target.value}'."
        )
