"""Integration tests for Order API endpoints via TestClient."""

import asyncio
import base64
import inspect

from ordering.api.routes import checkout
from ordering.order.order import Order
from protean import current_domain


class TestPlaceOrder:
    def test_place_order(self, client, placed_order):
        assert placed_order["order_number"].startswith("ORD-")
        assert placed_order["total_amount"] == 210.0

        order = current_domain.repository_for(Order).get(placed_order["order_id"])
        assert order.status == "pending"
        assert order.ship_to.address == "12 Harbour Road, Busan"

    def test_empty_cart(self, client, customer_headers):
        response = client.post("/orders", json={}, headers=customer_headers)

        assert response.status_code == 400
        assert response.json() == {"errors": {"cart": ["Cart is empty."]}}

    def test_missing_new_address(self, client, customer_headers):
        client.post("/cart/items", json={"product_id": "A"}, headers=customer_headers)

        response = client.post("/orders", json={"address_type": "new", "ship_to": {"address": ""}}, headers=customer_headers)

        assert response.status_code == 400
        assert response.json()["errors"] == {"ship_to": ["Please enter the shipping address."]}

    def test_retry_with_same_order_number(self, client, customer_headers):
        client.post("/cart/items", json={"product_id": "A"}, headers=customer_headers)
        body = {"order_number": "ORD-260101-120000-ab"}

        first = client.post("/orders", json=body, headers=customer_headers).json()
        second = client.post("/orders", json=body, headers=customer_headers).json()

        assert first["order_id"] == second["order_id"]


class TestReadOrders:
    def test_get_own_order(self, client, customer_headers, placed_order):
        response = client.get(f"/orders/{placed_order['order_id']}", headers=customer_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["subtotal"] == 210.0
        assert body["shipping_cost"] == 0.0
        assert len(body["items"]) == 2
        assert body["tt_payment"] is None

    def test_other_customer_cannot_read(self, client, other_headers, placed_order):
        response = client.get(f"/orders/{placed_order['order_id']}", headers=other_headers)
        assert response.status_code == 403

    def test_unknown_order(self, client, customer_headers):
        assert client.get("/orders/does-not-exist", headers=customer_headers).status_code == 404

    def test_list_my_orders(self, client, customer_headers, placed_order):
        response = client.get("/orders", headers=customer_headers)

        assert [o["order_id"] for o in response.json()] == [placed_order["order_id"]]

    def test_shipping_estimate(self, client, customer_headers, placed_order):
        response = client.get(f"/orders/{placed_order['order_id']}/shipping-estimate", headers=customer_headers)
        assert response.json()["estimated_shipping_cost"] == 10.5

    def test_invoice(self, client, customer_headers, placed_order):
        response = client.get(f"/orders/{placed_order['order_id']}/invoice", headers=customer_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["invoice_number"].startswith("PI-")
        assert [g["category_name"] for g in body["groups"]] == ["Dashcam", "Cables"]
        assert body["total_amount"] == 210.0


class TestCancelOrder:
    def test_cancel(self, client, customer_headers, placed_order):
        response = client.post(f"/orders/{placed_order['order_id']}/cancel", headers=customer_headers)

        assert response.status_code == 200
        assert current_domain.repository_for(Order).get(placed_order["order_id"]).status == "cancelled"

    def test_cancel_twice(self, client, customer_headers, placed_order):
        client.post(f"/orders/{placed_order['order_id']}/cancel", headers=customer_headers)

        response = client.post(f"/orders/{placed_order['order_id']}/cancel", headers=customer_headers)
        assert response.status_code == 400


class TestPayment:
    def test_card_checkout(self, client, customer_headers, placed_order, checkout_provider):
        response = client.post(f"/orders/{placed_order['order_id']}/checkout", headers=customer_headers)

        assert response.status_code == 200
        assert response.json()["session_id"].startswith("cs_fake_")
        assert checkout_provider.calls[-1]["amount_minor_units"] == 21000

    def test_checkout_runs_off_the_event_loop(self, client, customer_headers, placed_order, checkout_provider):
        seen = {}
        create_session = checkout_provider.create_session

        def _create_session(*args, **kwargs):
            try:
                asyncio.get_running_loop()
                seen["on_event_loop"] = True
            except RuntimeError:
                seen["on_event_loop"] = False
            return create_session(*args, **kwargs)

        checkout_provider.create_session = _create_session
        response = client.post(f"/orders/{placed_order['order_id']}/checkout", headers=customer_headers)

        assert response.status_code == 200
        assert not inspect.iscoroutinefunction(checkout)
        assert seen["on_event_loop"] is False

    def test_checkout_provider_down(self, client, customer_headers, placed_order, checkout_provider):
        checkout_provider.configure(should_succeed=False, failure_reason="connection reset")

        response = client.post(f"/orders/{placed_order['order_id']}/checkout", headers=customer_headers)

        assert response.status_code == 503
        assert response.json() == {"detail": "Something went wrong. Please try again."}

    def test_tt_upload_and_delete(self, client, customer_headers, placed_order, blob_store):
        order_id = placed_order["order_id"]
        client.post(f"/orders/{order_id}/tt", headers=customer_headers)

        response = client.post(
            f"/orders/{order_id}/remittance",
            json={"name": "swift.pdf", "content": base64.b64encode(b"%PDF-1.4").decode(), "content_type": "application/pdf"},
            headers=customer_headers,
        )
        assert response.status_code == 201
        file_id = response.json()["file_id"]

        order = client.get(f"/orders/{order_id}", headers=customer_headers).json()
        assert order["tt_payment"]["status"] == "pending"
        assert [f["id"] for f in order["tt_payment"]["remittance_files"]] == [file_id]
        assert list(blob_store.blobs.values()) == [b"%PDF-1.4"]

        response = client.delete(f"/orders/{order_id}/remittance/{file_id}", headers=customer_headers)
        assert response.status_code == 200
        assert blob_store.blobs == {}

    def test_upload_without_tt(self, client, customer_headers, placed_order):
        response = client.post(
            f"/orders/{placed_order['order_id']}/remittance",
            json={"name": "swift.pdf", "content": base64.b64encode(b"data").decode()},
            headers=customer_headers,
        )
        assert response.status_code == 400
