"""Order endpoints — list, create, detail, assign, status changes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from swiftroute.application.use_cases.assign_order import AssignOrderUseCase
from swiftroute.application.use_cases.update_order_status import UpdateOrderStatusUseCase
from swiftroute.domain.entities.order import Order, OrderItem
from swiftroute.domain.errors import (
    NotFoundError,
    UpstreamServiceError,
    UpstreamTimeoutError,
    ValidationError,
)
from swiftroute.domain.value_objects.enums import OrderStatus
from swiftroute.infrastructure.api.dependencies import (
    Storage,
    get_assign_order_uc,
    get_storage,
    get_update_order_status_uc,
)
from swiftroute.infrastructure.api.schemas import (
    AssignOrderRequest,
    OrderCreate,
    OrderStatusUpdate,
)
from swiftroute.infrastructure.api.serializers import serialize_order, serialize_outcome

router = APIRouter(prefix="/orders", tags=["orders"])


def _parse_status(raw: str) -> OrderStatus:
    try:
        return OrderStatus.parse(raw)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationError(f"Invalid status '{raw}'. Allowed: {allowed}.") from None


@router.get("")
async def list_orders(status: str | None = None, storage: Storage = Depends(get_storage)):
    """List orders newest first, optionally filtered by ?status=."""
    wanted = _parse_status(status) if status else None
    orders = await storage.orders.list(status=wanted)
    return [serialize_order(o) for o in orders]


@router.post("", status_code=201)
async def create_order(body: OrderCreate, storage: Storage = Depends(get_storage)):
    order = Order(
        id=None,
        customer_name=body.customer_name.strip(),
        customer_phone=body.customer_phone,
        items=[OrderItem(name=i.name.strip(), quantity=i.quantity) for i in body.items],
        area=body.area.strip(),
        delivery_address=body.delivery_address.strip(),
        order_value=body.order_value,
    )
    try:
        await storage.orders.save(order)
        await storage.tx.commit()
    except TimeoutError as e:
        await storage.tx.rollback()
        raise UpstreamTimeoutError("Timed out trying to create order.", detail=str(e)) from e
    except Exception as e:
        await storage.tx.rollback()
        raise UpstreamServiceError("Failed to create order.", detail=str(e)) from e
    return serialize_order(order)


@router.post("/assign")
async def assign_order(
    body: AssignOrderRequest,
    uc: AssignOrderUseCase = Depends(get_assign_order_uc),
):
    """Commit an order to a partner, or to the suggested one when partnerId is omitted."""
    outcome = await uc.execute(body.order_id, body.partner_id)
    if outcome.committed:
        message = f"Order {body.order_id} assigned to partner {outcome.partner_id}."
    else:
        message = "No suitable partner found; the order remains pending."
    return {"message": message, "details": serialize_outcome(outcome)}


@router.get("/{order_id}")
async def get_order(order_id: str, storage: Storage = Depends(get_storage)):
    order = await storage.orders.get_by_id(order_id)
    if order is None:
        raise NotFoundError(f"Order with ID {order_id} not found")
    return serialize_order(order)


@router.put("/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    uc: UpdateOrderStatusUseCase = Depends(get_update_order_status_uc),
):
    change = await uc.execute(order_id, _parse_status(body.status), body.assigned_partner_id)
    return {
        "message": "Order status updated successfully",
        "newStatus": change.order.status.value,
        "order": serialize_order(change.order),
    }
