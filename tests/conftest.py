"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from swiftroute.adapters.persistence.memory import (
    InMemoryAssignmentRepository,
    InMemoryLoadAdjustmentRepository,
    InMemoryOrderRepository,
    InMemoryPartnerRepository,
    InMemoryStore,
    InMemoryTransaction,
)
from swiftroute.domain.entities.order import Order, OrderItem
from swiftroute.domain.entities.partner import Partner
from swiftroute.domain.value_objects.enums import OrderStatus, PartnerStatus
from swiftroute.domain.value_objects.shift_window import ShiftWindow

# 12:00 UTC: inside a 09:00-17:00 shift, outside 18:00-02:00.
NOON = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    return lambda: NOON


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def repos(store):
    """In-memory repositories sharing one store."""
    return SimpleNamespace(
        store=store,
        orders=InMemoryOrderRepository(store),
        partners=InMemoryPartnerRepository(store),
        assignments=InMemoryAssignmentRepository(store),
        adjustments=InMemoryLoadAdjustmentRepository(store),
        tx=InMemoryTransaction(store),
    )


@pytest.fixture
def make_partner():
    def _make(
        partner_id="p1",
        name="Rajesh Kumar",
        areas=("Downtown",),
        load=0,
        status=PartnerStatus.ACTIVE,
        shift=("09:00", "17:00"),
        rating=4.5,
    ):
        return Partner(
            id=partner_id,
            name=name,
            email=f"{partner_id}@swiftroute.example",
            phone="555-0100",
            shift=ShiftWindow.parse(*shift),
            status=status,
            assigned_areas=list(areas),
            current_load=load,
            rating=rating,
        )

    return _make


@pytest.fixture
def make_order():
    def _make(
        order_id="o1",
        area="Downtown",
        status=OrderStatus.PENDING,
        partner_id=None,
        customer="Alice Smith",
    ):
        return Order(
            id=order_id,
            customer_name=customer,
            customer_phone="555-0101",
            items=[OrderItem("Pepperoni Pizza", 1), OrderItem("Coke", 4)],
            area=area,
            delivery_address="123 Main St, Downtown, XY 12345",
            order_value=22.5,
            status=status,
            assigned_partner_id=partner_id,
        )

    return _make
