"""Domain entity → camelCase JSON dict converters."""

from __future__ import annotations

from datetime import datetime

from swiftroute.application.use_cases.assign_order import AssignmentOutcome
from swiftroute.domain.entities.assignment import AssignmentMetrics, FailedAssignmentInfo
from swiftroute.domain.entities.order import Order
from swiftroute.domain.entities.partner import Partner
from swiftroute.domain.entities.suggestion import Suggestion


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def serialize_order(o: Order) -> dict:
    return {
        "id": o.id,
        "customerName": o.customer_name,
        "customerPhone": o.customer_phone,
        "items": [{"name": i.name, "quantity": i.quantity} for i in o.items],
        "area": o.area,
        "deliveryAddress": o.delivery_address,
        "orderValue": o.order_value,
        "status": o.status.value,
        "assignedPartnerId": o.assigned_partner_id,
        "creationDate": _iso(o.created_at),
    }


def serialize_partner(p: Partner) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "email": p.email,
        "phone": p.phone,
        "status": p.status.value,
        "assignedAreas": list(p.assigned_areas),
        "shiftStart": f"{p.shift.start:%H:%M}",
        "shiftEnd": f"{p.shift.end:%H:%M}",
        "currentLoad": p.current_load,
        "rating": p.rating,
        "completedOrders": p.completed_orders,
        "cancelledOrders": p.cancelled_orders,
        "createdAt": _iso(p.created_at),
    }


def serialize_suggestion(s: Suggestion) -> dict:
    data = {"suggestionMade": s.suggestion_made, "reason": s.reason}
    if s.suggestion_made:
        data["suggestedPartnerId"] = s.suggested_partner_id
    return data


def serialize_outcome(outcome: AssignmentOutcome) -> dict:
    return {
        "orderId": outcome.order_id,
        "committed": outcome.committed,
        "partnerId": outcome.partner_id,
        "assignmentId": outcome.assignment_id,
        "suggestion": serialize_suggestion(outcome.suggestion) if outcome.suggestion else None,
    }


def serialize_failed_assignment(f: FailedAssignmentInfo) -> dict:
    return {
        "assignmentId": f.assignment_id,
        "orderId": f.order_id,
        "customerName": f.customer_name,
        "area": f.area,
        "failureReason": f.failure_reason,
        "reportedAt": _iso(f.reported_at),
    }


def serialize_metrics(m: AssignmentMetrics) -> dict:
    return {
        "totalAssignments": m.total_assignments,
        "successfulAssignments": m.successful_assignments,
        "failedAssignments": m.failed_assignments,
        "activeAssignments": m.active_assignments,
        "successRate": m.success_rate,
        "failureReasons": [{"reason": r, "count": c} for r, c in m.failure_reasons],
    }
