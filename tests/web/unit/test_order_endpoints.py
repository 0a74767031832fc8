"""
Order HTTP Endpoint Tests

Exercises /api/orders through the ASGI app with an in-memory database and
the fake payment gateway.
"""

from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

from services.order import OrderService


@pytest.fixture
def create_order(client, catalog, make_order_payload):
    async def _create(**kwargs):
        response = await client.post("/api/orders/create", json=make_order_payload(catalog["variant"].id, **kwargs))
        assert response.status_code == 201, response.text
        return response.json()["data"]
    return _create


class TestCreateOrderEndpoint:

    @pytest.mark.asyncio
    async def test_created_with_client_secret(self, create_order, payment_gateway):
        data = await create_order()

        order = data["order"]
        assert order["payment_status"] == "pending"
        assert order["production_status"] == "pending"
        assert order["total"] == "203.28"
        assert data["client_secret"] == f"{order['payment_intent_id']}_secret_abc123"
        assert payment_gateway.intents[order["payment_intent_id"]].amount == 20328

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["customer", "items", "shipping_address"])
    async def test_missing_required_field(self, client, catalog, make_order_payload, missing):
        payload = make_order_payload(catalog["variant"].id)
        del payload[missing]

        response = await client.post("/api/orders/create", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert missing in body["message"]

    @pytest.mark.asyncio
    async def test_empty_items(self, client, catalog, make_order_payload):
        payload = make_order_payload(catalog["variant"].id)
        payload["items"] = []

        response = await client.post("/api/orders/create", json=payload)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_variant(self, client, catalog, make_order_payload):
        response = await client.post("/api/orders/create", json=make_order_payload("no-such-variant"))

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Variant no-such-variant not found"}

    @pytest.mark.asyncio
    async def test_tampered_price(self, client, catalog, make_order_payload, make_placements):
        payload = make_order_payload(
            catalog["variant"].id,
            unit_price="0.01",
            customization={"method": "screen_print", "placements": make_placements()}
        )

        response = await client.post("/api/orders/create", json=payload)

        assert response.status_code == 400
        assert "does not match quote" in response.json()["message"]


class TestCapturePaymentEndpoint:

    @pytest.mark.asyncio
    async def test_capture_succeeded_payment(self, client, create_order, payment_gateway):
        order = (await create_order())["order"]
        payment_gateway.set_status(order["payment_intent_id"], "succeeded")

        response = await client.post(
            f"/api/orders/{order['id']}/capture-payment",
            json={"payment_intent_id": order["payment_intent_id"]}
        )

        assert response.status_code == 200
        assert response.json()["data"]["order"]["payment_status"] == "paid"

    @pytest.mark.asyncio
    async def test_requires_action_is_400_and_stays_pending(self, client, create_order, payment_gateway):
        order = (await create_order())["order"]
        payment_gateway.set_status(order["payment_intent_id"], "requires_action")

        response = await client.post(
            f"/api/orders/{order['id']}/capture-payment",
            json={"payment_intent_id": order["payment_intent_id"]}
        )

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Payment not completed"}
        lookup = await client.get(f"/api/orders/{order['id']}")
        assert lookup.json()["data"]["order"]["payment_status"] == "pending"

    @pytest.mark.asyncio
    async def test_missing_intent_id(self, client, create_order):
        order = (await create_order())["order"]

        response = await client.post(f"/api/orders/{order['id']}/capture-payment", json={})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_client_asserted_status_is_ignored(self, client, create_order):
        order = (await create_order())["order"]

        response = await client.post(
            f"/api/orders/{order['id']}/capture-payment",
            json={"payment_intent_id": order["payment_intent_id"], "status": "succeeded"}
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_order(self, client):
        response = await client.post("/api/orders/nope/capture-payment", json={"payment_intent_id": "pi_test1"})

        assert response.status_code == 404


class TestGetOrderEndpoint:

    @pytest.mark.asyncio
    async def test_by_id_and_order_number(self, client, create_order):
        order = (await create_order())["order"]

        by_id = await client.get(f"/api/orders/{order['id']}")
        by_number = await client.get(f"/api/orders/{order['order_number']}")

        assert by_id.status_code == by_number.status_code == 200
        assert by_id.json()["data"]["order"]["id"] == by_number.json()["data"]["order"]["id"] == order["id"]
        items = by_id.json()["data"]["items"]
        assert len(items) == 1
        assert items[0]["unit_price"] == "33.88"

    @pytest.mark.asyncio
    async def test_unknown_order_number(self, client, create_order):
        await create_order()

        response = await client.get("/api/orders/RB-1700000000-ABCDE")

        assert response.status_code == 404
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_history(self, client, create_order):
        order = (await create_order())["order"]

        response = await client.get(f"/api/orders/{order['order_number']}/history")

        history = response.json()["data"]["history"]
        assert [entry["notes"] for entry in history] == ["Order created"]


class TestErrorResponses:

    @pytest.mark.asyncio
    async def test_unexpected_error_is_generic_500(self, app, db, catalog):
        with patch.object(OrderService, "get_order", side_effect=RuntimeError("database file /var/lib/shop.db is locked")):
            async with AsyncClient(transport=ASGITransport(app=app, raise_app_exceptions=False),
                                   base_url="http://test") as client:
                response = await client.get("/api/orders/anything")

        assert response.status_code == 500
        assert response.json() == {"success": False, "message": "Internal server error"}

    @pytest.mark.asyncio
    async def test_payment_provider_down_is_500(self, client, catalog, make_order_payload, payment_gateway):
        payment_gateway.unreachable = True

        response = await client.post("/api/orders/create", json=make_order_payload(catalog["variant"].id))

        assert response.status_code == 500
        assert response.json()["message"] == "Internal server error"

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
