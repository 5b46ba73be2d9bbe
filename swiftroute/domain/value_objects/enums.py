"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class OrderStatus(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    PICKED = "picked"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, raw: str) -> "OrderStatus":
        """Parse a status label, accepting the legacy "in-transit" alias for PICKED."""
        key = (raw or "").strip().lower()
        if key in ("in-transit", "in_transit"):
            return cls.PICKED
        return cls(key)

    @property
    def is_open(self) -> bool:
        """Statuses counted in a partner's current load."""
        return self in (OrderStatus.ASSIGNED, OrderStatus.PICKED)


class PartnerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_BREAK = "on-break"


class AssignmentStatus(str, Enum):
    ACTIVE = "active"
    SUCCESS = "success"
    FAILED = "failed"
