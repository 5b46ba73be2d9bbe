"""Order entity — a customer delivery request."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from swiftroute.domain.value_objects.enums import OrderStatus


@dataclass(frozen=True)
class OrderItem:
    name: str
    quantity: int = 1


@dataclass
class Order:
    id: str | None
    customer_name: str
    area: str
    delivery_address: str
    order_value: float
    items: list[OrderItem] = field(default_factory=list)
    customer_phone: str | None = None
    status: OrderStatus = OrderStatus.PENDING
    assigned_partner_id: str | None = None
    created_at: datetime | None = None

    def revert_to_pending(self) -> None:
        self.status = OrderStatus.PENDING
        self.assigned_partner_id = None

    def cancel(self) -> None:
        self.status = OrderStatus.CANCELLED
        self.assigned_partner_id = None

    def items_summary(self) -> str:
        return ", ".join(f"{i.name} (Qty: {i.quantity})" for i in self.items)
