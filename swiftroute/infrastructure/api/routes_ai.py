"""AI endpoint — suggest a partner for an order without committing anything."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from swiftroute.application.use_cases.suggest_assignment import SuggestAssignmentUseCase
from swiftroute.domain.entities.order import Order, OrderItem
from swiftroute.domain.entities.partner import Partner
from swiftroute.domain.errors import ValidationError
from swiftroute.domain.value_objects.enums import PartnerStatus
from swiftroute.domain.value_objects.shift_window import ShiftWindow
from swiftroute.infrastructure.api.dependencies import get_suggest_uc
from swiftroute.infrastructure.api.schemas import (
    SuggestAssignmentRequest,
    SuggestOrderIn,
    SuggestPartnerIn,
)
from swiftroute.infrastructure.api.serializers import serialize_suggestion

router = APIRouter(prefix="/ai", tags=["ai"])


def _to_order(body: SuggestOrderIn) -> Order:
    return Order(
        id=body.id,
        customer_name=body.customer_name,
        area=body.area,
        delivery_address=body.delivery_address,
        order_value=body.order_value,
        items=[OrderItem(name=i.name, quantity=i.quantity) for i in body.items],
    )


def _to_partner(body: SuggestPartnerIn) -> Partner:
    try:
        shift = ShiftWindow.parse(body.shift_start, body.shift_end)
        status = PartnerStatus(body.status.strip().lower())
    except ValueError as e:
        raise ValidationError(f"Invalid partner {body.id}: {e}") from None
    return Partner(
        id=body.id,
        name=body.name,
        email="",
        phone="",
        shift=shift,
        status=status,
        assigned_areas=body.assigned_areas,
        current_load=body.current_load,
        rating=body.rating,
    )


@router.post("/suggest-assignment")
async def suggest_assignment(
    body: SuggestAssignmentRequest,
    uc: SuggestAssignmentUseCase = Depends(get_suggest_uc),
):
    """Run the configured scorer over the supplied order and partners."""
    suggestion = await uc.execute(_to_order(body.order), [_to_partner(p) for p in body.partners])
    return serialize_suggestion(suggestion)
