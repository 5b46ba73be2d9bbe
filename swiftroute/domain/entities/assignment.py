"""Assignment entity — one attempt at delivering an order through a partner."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from swiftroute.domain.errors import ValidationError
from swiftroute.domain.value_objects.enums import AssignmentStatus

MIN_FAILURE_REASON_LENGTH = 10


def validate_failure_reason(reason: str | None) -> str:
    """Return the stripped reason or raise if it is too short to be useful."""
    cleaned = (reason or "").strip()
    if len(cleaned) < MIN_FAILURE_REASON_LENGTH:
        raise ValidationError(
            f"Reason must be at least {MIN_FAILURE_REASON_LENGTH} characters long."
        )
    return cleaned


@dataclass
class Assignment:
    id: str | None
    order_id: str
    partner_id: str | None
    status: AssignmentStatus = AssignmentStatus.ACTIVE
    reason: str | None = None
    created_at: datetime | None = None

    def mark_failed(self, reason: str) -> None:
        self.reason = validate_failure_reason(reason)
        self.status = AssignmentStatus.FAILED

    def mark_success(self) -> None:
        self.status = AssignmentStatus.SUCCESS


@dataclass(frozen=True)
class FailedAssignmentInfo:
    """Failed assignment joined with the order fields shown on the dashboard."""

    assignment_id: str
    order_id: str
    customer_name: str
    area: str
    failure_reason: str
    reported_at: datetime | None


@dataclass
class AssignmentMetrics:
    total_assignments: int = 0
    successful_assignments: int = 0
    failed_assignments: int = 0
    active_assignments: int = 0
    failure_reasons: list[tuple[str, int]] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        if not self.total_assignments:
            return 0.0
        return round(self.successful_assignments / self.total_assignments * 100, 1)


@dataclass
class LoadAdjustment:
    """A partner load change that could not be applied inline and awaits replay."""

    id: int | None
    partner_id: str
    delta: int
    reason: str
    created_at: datetime | None = None
    applied_at: datetime | None = None
