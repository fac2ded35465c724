import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from ordering.api.errors import register_exception_handlers
from ordering.api.routes import admin_router, cart_router, order_router, price_router


@pytest.fixture()
def customer_headers():
    return {"X-User-Id": "cust-001", "X-User-Email": "buyer@acme.test", "X-Role-Level": "1"}


@pytest.fixture()
def other_headers():
    return {"X-User-Id": "cust-002", "X-User-Email": "other@globex.test", "X-Role-Level": "1"}


@pytest.fixture()
def admin_headers():
    return {"X-User-Id": "admin-001", "X-User-Email": "admin@portal.test", "X-Role-Level": "50"}


@pytest.fixture()
def client():
    app = FastAPI()
    register_exception_handlers(app)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(price_router)
    app.include_router(admin_router)
    return TestClient(app)


@pytest.fixture()
def placed_order(client, customer_headers):
    """An FOB order for 2 x A (100) and 1 x D (10), placed through the API."""
    client.post("/cart/items", json={"product_id": "A", "quantity": 2}, headers=customer_headers)
    client.post("/cart/items", json={"product_id": "D", "quantity": 1}, headers=customer_headers)
    response = client.post("/orders", json={"shipping_terms": "FOB"}, headers=customer_headers)
    assert response.status_code == 201
    return response.json()
