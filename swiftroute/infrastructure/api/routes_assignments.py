"""Assignment endpoints — failed list, metrics, failure reports, load reconciliation."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from swiftroute.application.use_cases.reconcile_loads import ReconcileLoadsUseCase
from swiftroute.application.use_cases.report_failure import ReportFailureUseCase
from swiftroute.domain.errors import ValidationError
from swiftroute.domain.value_objects.enums import AssignmentStatus
from swiftroute.infrastructure.api.dependencies import (
    Storage,
    get_reconcile_loads_uc,
    get_report_failure_uc,
    get_storage,
)
from swiftroute.infrastructure.api.schemas import ReportFailureRequest
from swiftroute.infrastructure.api.serializers import (
    serialize_failed_assignment,
    serialize_metrics,
)

router = APIRouter(prefix="/assignments", tags=["assignments"])


@router.get("")
async def list_assignments(status: str | None = None, storage: Storage = Depends(get_storage)):
    """Failed assignments joined with their order, newest first. Only ?status=failed is supported."""
    if status != AssignmentStatus.FAILED.value:
        raise ValidationError("Invalid query. Only status=failed is supported.")
    return [serialize_failed_assignment(f) for f in await storage.assignments.list_failed()]


@router.get("/metrics")
async def assignment_metrics(storage: Storage = Depends(get_storage)):
    return serialize_metrics(await storage.assignments.get_metrics())


@router.post("/report-failure")
async def report_failure(
    body: ReportFailureRequest,
    uc: ReportFailureUseCase = Depends(get_report_failure_uc),
):
    report = await uc.execute(body.order_id, body.reason)
    response = {
        "message": (
            f"Failure reported successfully for order {report.order_id}. "
            "Order status reverted to pending."
        )
    }
    if report.warning:
        response["warning"] = report.warning
    return response


@router.post("/reconcile-loads")
async def reconcile_loads(uc: ReconcileLoadsUseCase = Depends(get_reconcile_loads_uc)):
    result = await uc.execute()
    return {"applied": result.applied, "failed": result.failed, "skipped": result.skipped}
