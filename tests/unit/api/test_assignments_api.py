"""Tests for /api/assignments."""

ALICE_ORDER = "1d9c7c31-176a-4a40-9e0e-77a17dfc4b8f"
BOB_ORDER = "3f2f7c70-8f98-40c7-96d9-83e9c817531a"
REASON = "Customer not reachable at the door"


def _assign(client, order_id, partner_id):
    response = client.post("/api/orders/assign", json={"orderId": order_id, "partnerId": partner_id})
    assert response.status_code == 200


def test_only_failed_filter_is_supported(client):
    for params in ({}, {"status": "active"}):
        response = client.get("/api/assignments", params=params)
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid query. Only status=failed is supported."


def test_failed_list_starts_empty_and_is_stable(client):
    first = client.get("/api/assignments", params={"status": "failed"})
    second = client.get("/api/assignments", params={"status": "failed"})
    assert first.status_code == 200
    assert first.json() == second.json() == []


def test_report_failure_flow(client, partner_ids):
    arjun = partner_ids["Arjun Mehta"]
    _assign(client, ALICE_ORDER, arjun)

    response = client.post(
        "/api/assignments/report-failure",
        json={"orderId": ALICE_ORDER, "reason": REASON},
    )

    assert response.status_code == 200
    assert response.json() == {
        "message": f"Failure reported successfully for order {ALICE_ORDER}. Order status reverted to pending."
    }
    order = client.get(f"/api/orders/{ALICE_ORDER}").json()
    assert order["status"] == "pending"
    assert order["assignedPartnerId"] is None
    assert client.get(f"/api/partners/{arjun}").json()["currentLoad"] == 1

    failed = client.get("/api/assignments", params={"status": "failed"}).json()
    assert len(failed) == 1
    assert failed[0]["orderId"] == ALICE_ORDER
    assert failed[0]["customerName"] == "Alice Smith"
    assert failed[0]["area"] == "Downtown"
    assert failed[0]["failureReason"] == REASON
    assert failed[0]["reportedAt"]


def test_failed_list_is_newest_first(client, partner_ids):
    _assign(client, ALICE_ORDER, partner_ids["Arjun Mehta"])
    _assign(client, BOB_ORDER, partner_ids["Bella Chen"])
    for order_id in (ALICE_ORDER, BOB_ORDER):
        client.post("/api/assignments/report-failure", json={"orderId": order_id, "reason": REASON})

    failed = client.get("/api/assignments", params={"status": "failed"}).json()

    assert [f["orderId"] for f in failed] == [BOB_ORDER, ALICE_ORDER]


def test_report_failure_errors(client, partner_ids):
    missing = client.post("/api/assignments/report-failure", json={"orderId": BOB_ORDER, "reason": REASON})
    assert missing.status_code == 404

    _assign(client, BOB_ORDER, partner_ids["Bella Chen"])
    short = client.post("/api/assignments/report-failure", json={"orderId": BOB_ORDER, "reason": "late"})
    assert short.status_code == 400
    assert "at least 10 characters" in short.json()["message"]

    no_order = client.post("/api/assignments/report-failure", json={"reason": REASON})
    assert no_order.status_code == 400


def test_metrics(client, partner_ids):
    empty = client.get("/api/assignments/metrics").json()
    assert empty["totalAssignments"] == 0
    assert empty["successRate"] == 0.0

    _assign(client, ALICE_ORDER, partner_ids["Arjun Mehta"])
    _assign(client, BOB_ORDER, partner_ids["Bella Chen"])
    client.post("/api/assignments/report-failure", json={"orderId": ALICE_ORDER, "reason": REASON})
    client.put(f"/api/orders/{BOB_ORDER}/status", json={"status": "delivered"})

    metrics = client.get("/api/assignments/metrics").json()

    assert metrics["totalAssignments"] == 2
    assert metrics["successfulAssignments"] == 1
    assert metrics["failedAssignments"] == 1
    assert metrics["activeAssignments"] == 0
    assert metrics["successRate"] == 50.0
    assert metrics["failureReasons"] == [{"reason": REASON, "count": 1}]


def test_reconcile_with_empty_queue(client):
    response = client.post("/api/assignments/reconcile-loads")
    assert response.json() == {"applied": 0, "failed": 0, "skipped": 0}
