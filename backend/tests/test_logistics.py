"""Tests for the orders and shipments API."""

import pytest

SHIPPED_AT = "2026-10-12T08:30:00Z"
DELIVERED_AT = "2026-10-15T14:00:00Z"


# ─── Orders ────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_order_v1(make_order):
    order = await make_order()
    assert order["status"] == "pending"
    assert order["shipment_id"] is None
    assert "priority" not in order


@pytest.mark.asyncio
async def test_create_order_v2_defaults(make_order):
    order = await make_order("2")
    assert order["priority"] == "normal"
    assert order["requested_delivery_date"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize("fields, field", [
    ({"quantity": 0}, "quantity"),
    ({"material_sku": "beam"}, "material_sku"),
    ({"order_number": "p"}, "order_number"),
    ({"status": "lost"}, "status"),
])
async def test_order_validation(client, fields, field):
    body = {"order_number": "PO-2026-0001", "material_sku": "STL-BEAM-200", "quantity": 10}
    body.update(fields)
    response = await client.post("/api/v1/orders", json=body)
    assert response.status_code == 400
    assert field in response.json()["errors"]


@pytest.mark.asyncio
async def test_order_must_start_pending(client):
    response = await client.post("/api/v1/orders", json={
        "order_number": "PO-2026-0001", "material_sku": "STL-BEAM-200", "quantity": 10,
        "status": "confirmed",
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_order_number_is_unique(client, make_order):
    await make_order()
    response = await client.post("/api/v2/orders", json={
        "order_number": "PO-2026-0001", "material_sku": "STL-1", "quantity": 1,
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_order_shipment_must_exist(client):
    response = await client.post("/api/v1/orders", json={
        "order_number": "PO-2026-0001", "material_sku": "STL-BEAM-200", "quantity": 10,
        "shipment_id": 999999,
    })
    assert response.status_code == 400
    assert "shipment_id" in response.json()["errors"]


@pytest.mark.asyncio
async def test_high_priority_needs_date(client, make_order):
    response = await client.post("/api/v2/orders", json={
        "order_number": "PO-2026-0001", "material_sku": "STL-BEAM-200", "quantity": 10,
        "priority": "high",
    })
    assert response.status_code == 409
    assert response.json()["detail"] == "High priority orders need a requested_delivery_date"

    order = await make_order("2", priority="high", requested_delivery_date="2026-10-20")
    assert order["priority"] == "high"


@pytest.mark.asyncio
async def test_order_lifecycle(client, make_order, make_shipment):
    order = await make_order("2")
    shipment = await make_shipment()
    url = f"/api/v2/orders/{order['id']}"

    assert (await client.patch(url, json={"status": "confirmed"})).status_code == 200

    response = await client.patch(url, json={"status": "shipped"})
    assert response.status_code == 409
    assert response.json()["detail"] == "An order cannot be shipped without a shipment"

    response = await client.patch(url, json={"status": "shipped", "shipment_id": shipment["id"]})
    assert response.status_code == 200

    response = await client.patch(url, json={"status": "cancelled"})
    assert response.status_code == 409

    response = await client.patch(url, json={"status": "delivered"})
    assert response.status_code == 200
    assert response.json()["status"] == "delivered"


@pytest.mark.asyncio
async def test_only_pending_or_cancelled_orders_can_be_deleted(client, make_order):
    order = await make_order()
    url = f"/api/v1/orders/{order['id']}"
    await client.patch(url, json={"status": "confirmed"})

    response = await client.delete(url)
    assert response.status_code == 409

    await client.patch(url, json={"status": "cancelled"})
    response = await client.delete(url)
    assert response.status_code == 204


@pytest.mark.asyncio
async def test_order_filters(client, make_order):
    await make_order("2", order_number="PO-1", priority="low")
    await make_order("2", order_number="PO-2", material_sku="CON-C30-37")

    response = await client.get("/api/v2/orders", params={"priority": "low"})
    assert [o["order_number"] for o in response.json()["items"]] == ["PO-1"]

    response = await client.get("/api/v1/orders", params={"material_sku": "con c30 37"})
    assert [o["order_number"] for o in response.json()["items"]] == ["PO-2"]

    response = await client.get("/api/v1/orders", params={"search": "po-2"})
    assert response.json()["total"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("path, params", [
    ("/api/v1/orders", {"status": "lost"}),
    ("/api/v2/orders", {"priority": "urgent"}),
    ("/api/v1/orders", {"shipment_id": str(2**31)}),
    ("/api/v1/shipments", {"status": "teleported"}),
])
async def test_list_rejects_unknown_filter_values(client, path, params):
    response = await client.get(path, params=params)
    assert response.status_code == 400
    assert set(response.json()["errors"]) == set(params)


@pytest.mark.asyncio
@pytest.mark.parametrize("field, value", [
    ("quantity", 2**64),
    ("quantity", 2**31),
    ("shipment_id", 2**63),
])
async def test_create_order_rejects_out_of_range_integers(client, field, value):
    body = {"order_number": "PO-2026-0001", "material_sku": "STL-BEAM-200", "quantity": 10}
    body[field] = value
    response = await client.post("/api/v1/orders", json=body)
    assert response.status_code == 400
    assert field in response.json()["errors"]


# ─── Shipments ─────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_shipment_lifecycle(client, make_shipment):
    shipment = await make_shipment()
    assert shipment["status"] == "preparing"
    url = f"/api/v1/shipments/{shipment['id']}"

    response = await client.patch(url, json={"status": "in_transit"})
    assert response.status_code == 409

    response = await client.patch(url, json={"status": "in_transit", "shipped_at": SHIPPED_AT})
    assert response.status_code == 200

    response = await client.patch(url, json={"status": "delivered"})
    assert response.status_code == 409

    response = await client.patch(url, json={"status": "delivered", "delivered_at": DELIVERED_AT})
    assert response.status_code == 200
    assert response.json()["status"] == "delivered"

    response = await client.patch(url, json={"status": "returned"})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_shipment_must_start_preparing(client):
    response = await client.post("/api/v1/shipments", json={
        "tracking_number": "NWS-1", "carrier": "Nordic Freight", "status": "in_transit",
        "shipped_at": SHIPPED_AT,
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_delivery_before_shipping(client):
    response = await client.post("/api/v1/shipments", json={
        "tracking_number": "NWS-1", "carrier": "Nordic Freight",
        "shipped_at": DELIVERED_AT, "delivered_at": SHIPPED_AT,
    })
    assert response.status_code == 400
    assert response.json()["errors"] == {"body": ["delivered_at must not be before shipped_at"]}


@pytest.mark.asyncio
async def test_tracking_number_is_unique(client, make_shipment):
    await make_shipment()
    response = await client.post("/api/v1/shipments", json={
        "tracking_number": "NWS-784512", "carrier": "Other",
    })
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_shipment_with_orders_cannot_be_deleted(client, make_order, make_shipment):
    shipment = await make_shipment()
    order = await make_order(shipment_id=shipment["id"])

    response = await client.delete(f"/api/v1/shipments/{shipment['id']}")
    assert response.status_code == 409

    await client.delete(f"/api/v1/orders/{order['id']}")
    response = await client.delete(f"/api/v1/shipments/{shipment['id']}")
    assert response.status_code == 204
