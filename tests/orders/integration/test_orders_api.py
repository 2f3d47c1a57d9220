"""Integration tests for the order store API via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from orders.api import order_router, register_exception_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(order_router)
    register_exception_handlers(app)
    return TestClient(app)


def _order_body(**overrides):
    body = {
        "customer_name": "Rahim Uddin",
        "phone": "01712345678",
        "district": "Dhaka",
        "thana": "ধানমন্ডি",
        "address": "House 12, Road 5",
        "items": [{"product_id": "P1", "name": "Photo Mug", "unit_price": 500, "quantity": 2, "line_total": 1000}],
        "subtotal": 1000,
        "delivery_fee": 60,
        "total": 1060,
        "remaining_on_delivery": 1060,
        "payment_info": {"method": "cash_on_delivery"},
    }
    body.update(overrides)
    return body


def _place(client, **overrides):
    response = client.post("/orders", json=_order_body(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


def _set_status(client, order_id, status):
    return client.patch(f"/orders/{order_id}/status", json={"status": status})


class TestPlaceOrderAPI:
    def test_returns_201_with_ids(self, client):
        body = _place(client)
        assert body["tracking_id"].startswith("TRK")
        assert body["order_id"]

    def test_validation_error_is_400(self, client):
        response = client.post("/orders", json=_order_body(phone="12345"))
        assert response.status_code == 400
        assert "phone" in response.json()["error"]

    def test_tampered_total_is_400(self, client):
        response = client.post("/orders", json=_order_body(total=10))
        assert response.status_code == 400
        assert "total" in response.json()["error"]

    def test_schema_error_is_422(self, client):
        response = client.post("/orders", json={"customer_name": "x"})
        assert response.status_code == 422


class TestTrackOrderAPI:
    def test_track_by_tracking_id(self, client):
        placed = _place(client)
        response = client.get(f"/orders/track/{placed['tracking_id']}")

        assert response.status_code == 200
        order = response.json()
        assert order["id"] == placed["order_id"]
        assert order["status"] == "pending"
        assert order["items"][0]["product_id"] == "P1"
        assert order["payment_info"]["method"] == "cash_on_delivery"
        assert order["remaining_on_delivery"] == 1060
        assert order["notes"] == []

    def test_unknown_tracking_id_is_404(self, client):
        response = client.get("/orders/track/TRK0000000000000ZZZZ")
        assert response.status_code == 404
        assert "error" in response.json()


class TestAdminAPI:
    def test_get_order(self, client):
        placed = _place(client)
        response = client.get(f"/orders/{placed['order_id']}")
        assert response.status_code == 200
        assert response.json()["tracking_id"] == placed["tracking_id"]

    def test_get_unknown_order_is_404(self, client):
        assert client.get("/orders/unknown-order").status_code == 404

    def test_status_change_echoes_order(self, client):
        placed = _place(client)
        response = _set_status(client, placed["order_id"], "confirmed")
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"

    def test_illegal_transition_is_409(self, client):
        placed = _place(client)
        for status in ("confirmed", "processing", "shipped"):
            assert _set_status(client, placed["order_id"], status).status_code == 200

        response = _set_status(client, placed["order_id"], "pending")
        assert response.status_code == 409
        body = response.json()
        assert body["current"] == "shipped"
        assert body["requested"] == "pending"
        assert client.get(f"/orders/{placed['order_id']}").json()["status"] == "shipped"

    def test_list_filtered_by_status(self, client):
        cancelled = _place(client)
        pending = _place(client)
        _set_status(client, cancelled["order_id"], "cancelled")

        response = client.get("/orders", params={"status": "cancelled"})
        assert response.status_code == 200
        ids = {order["id"] for order in response.json()}
        assert cancelled["order_id"] in ids
        assert pending["order_id"] not in ids

    def test_list_unknown_status_is_400(self, client):
        response = client.get("/orders", params={"status": "lost"})
        assert response.status_code == 400

    def test_append_note(self, client):
        placed = _place(client)
        response = client.post(f"/orders/{placed['order_id']}/notes", json={"note": "Courier booked"})
        assert response.status_code == 200
        assert response.json()["notes"][-1].endswith("Courier booked")
