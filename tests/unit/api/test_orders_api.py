"""Tests for /api/orders."""

from dataclasses import replace

import pytest

from swiftroute.adapters.persistence.memory import InMemoryOrderRepository
from swiftroute.infrastructure.api.dependencies import Storage, get_storage

ALICE_ORDER = "1d9c7c31-176a-4a40-9e0e-77a17dfc4b8f"
IVY_ORDER = "efcdab89-6745-2301-efcd-ab8967452301"


class TimingOutOrderRepository(InMemoryOrderRepository):
    async def save(self, order):
        raise TimeoutError("canceling statement due to statement timeout")

    async def assign_if_pending(self, order_id, partner_id):
        raise TimeoutError("canceling statement due to statement timeout")


@pytest.fixture
def timing_out_client(client, api_store):
    async def _storage():
        yield replace(Storage.in_memory(api_store), orders=TimingOutOrderRepository(api_store))

    client.app.dependency_overrides[get_storage] = _storage
    return client


def test_list_orders(client):
    response = client.get("/api/orders")
    assert response.status_code == 200
    orders = response.json()
    assert len(orders) == 9
    assert {"id", "customerName", "items", "area", "status", "assignedPartnerId", "creationDate"} <= set(orders[0])


def test_list_orders_by_status(client):
    assert len(client.get("/api/orders", params={"status": "pending"}).json()) == 9
    assert client.get("/api/orders", params={"status": "delivered"}).json() == []


def test_list_orders_invalid_status(client):
    response = client.get("/api/orders", params={"status": "lost"})
    assert response.status_code == 400
    assert "Invalid status" in response.json()["message"]


def test_create_order_is_listed_first(client):
    response = client.post(
        "/api/orders",
        json={
            "customerName": "Jack Black",
            "items": [{"name": "Ramen", "quantity": 2}],
            "area": "Downtown",
            "deliveryAddress": "9 Elm St",
            "orderValue": 14.0,
        },
    )
    assert response.status_code == 201
    created = response.json()
    assert created["status"] == "pending"
    assert created["assignedPartnerId"] is None
    assert client.get("/api/orders").json()[0]["id"] == created["id"]


def test_create_order_validation(client):
    response = client.post("/api/orders", json={"customerName": "Jack", "area": "Downtown"})
    assert response.status_code == 400
    assert response.json()["message"].startswith("Invalid request")


def test_get_order(client):
    assert client.get(f"/api/orders/{ALICE_ORDER}").json()["customerName"] == "Alice Smith"
    missing = client.get("/api/orders/does-not-exist")
    assert missing.status_code == 404
    assert missing.json() == {"message": "Order with ID does-not-exist not found"}


def test_assign_via_suggestion(client, partner_ids):
    response = client.post("/api/orders/assign", json={"orderId": ALICE_ORDER})

    assert response.status_code == 200
    details = response.json()["details"]
    assert details["committed"] is True
    assert details["partnerId"] == partner_ids["Arjun Mehta"]
    order = client.get(f"/api/orders/{ALICE_ORDER}").json()
    assert order["status"] == "assigned"
    partner = client.get(f"/api/partners/{partner_ids['Arjun Mehta']}").json()
    assert partner["currentLoad"] == 2


def test_assign_without_match_keeps_order_pending(client):
    response = client.post("/api/orders/assign", json={"orderId": IVY_ORDER})

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "No suitable partner found; the order remains pending."
    assert body["details"]["committed"] is False
    assert body["details"]["suggestion"]["suggestionMade"] is False
    assert client.get(f"/api/orders/{IVY_ORDER}").json()["status"] == "pending"


def test_assign_to_partner_at_capacity(client, partner_ids):
    response = client.post(
        "/api/orders/assign",
        json={"orderId": ALICE_ORDER, "partnerId": partner_ids["Hiro Tanaka"]},
    )
    assert response.status_code == 400
    assert "maximum load" in response.json()["message"]


def test_status_lifecycle(client, partner_ids):
    arjun = partner_ids["Arjun Mehta"]

    assigned = client.put(
        f"/api/orders/{ALICE_ORDER}/status",
        json={"status": "assigned", "assignedPartnerId": arjun},
    )
    assert assigned.status_code == 200
    assert assigned.json()["newStatus"] == "assigned"

    picked = client.put(f"/api/orders/{ALICE_ORDER}/status", json={"status": "in-transit"})
    assert picked.json()["newStatus"] == "picked"

    delivered = client.put(f"/api/orders/{ALICE_ORDER}/status", json={"status": "delivered"})
    assert delivered.json()["message"] == "Order status updated successfully"
    assert delivered.json()["order"]["assignedPartnerId"] == arjun

    partner = client.get(f"/api/partners/{arjun}").json()
    assert partner["currentLoad"] == 1
    assert partner["completedOrders"] == 1


def test_status_invalid_transition(client):
    response = client.put(f"/api/orders/{ALICE_ORDER}/status", json={"status": "delivered"})
    assert response.status_code == 400
    assert "Cannot change order status" in response.json()["message"]


def test_create_order_store_timeout_is_504(timing_out_client):
    response = timing_out_client.post(
        "/api/orders",
        json={"customerName": "Jack Black", "area": "Downtown", "deliveryAddress": "9 Elm St", "orderValue": 14.0},
    )
    assert response.status_code == 504
    assert response.json()["message"] == "Timed out trying to create order."


def test_assign_store_timeout_is_504_and_rolls_back(timing_out_client, partner_ids):
    arjun = partner_ids["Arjun Mehta"]
    response = timing_out_client.post("/api/orders/assign", json={"orderId": ALICE_ORDER, "partnerId": arjun})

    assert response.status_code == 504
    assert response.json()["message"] == "Timed out persisting the assignment."
    assert timing_out_client.get(f"/api/orders/{ALICE_ORDER}").json()["status"] == "pending"
    assert timing_out_client.get(f"/api/partners/{arjun}").json()["currentLoad"] == 1
