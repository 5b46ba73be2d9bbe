"""Partner entity — a delivery agent with area coverage, shift and capacity."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, time

from swiftroute.domain.value_objects.enums import PartnerStatus
from swiftroute.domain.value_objects.shift_window import ShiftWindow

MAX_CONCURRENT_ORDERS = 5
MAX_RATING = 5.0


def normalize_area(area: str | None) -> str:
    return " ".join((area or "").split()).lower()


@dataclass
class Partner:
    id: str | None
    name: str
    email: str
    phone: str
    shift: ShiftWindow
    status: PartnerStatus = PartnerStatus.ACTIVE
    assigned_areas: list[str] = field(default_factory=list)
    current_load: int = 0
    rating: float = 0.0
    completed_orders: int = 0
    cancelled_orders: int = 0
    created_at: datetime | None = None

    def is_active(self) -> bool:
        return self.status == PartnerStatus.ACTIVE

    def covers_area(self, area: str) -> bool:
        wanted = normalize_area(area)
        return bool(wanted) and any(normalize_area(a) == wanted for a in self.assigned_areas)

    def has_capacity(self, ceiling: int = MAX_CONCURRENT_ORDERS) -> bool:
        return self.current_load < ceiling

    def is_on_shift(self, moment: time) -> bool:
        return self.shift.covers(moment)
