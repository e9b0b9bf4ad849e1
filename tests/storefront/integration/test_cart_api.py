"""Integration tests for the cart endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain
from storefront.api.errors import register_exception_handlers
from storefront.api.routes import cart_router
from storefront.inventory.product import Product


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(cart_router)
    register_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def signed_in(seed, client):
    customer = seed.customer()
    client.cookies.set("session", seed.session(customer).session_id)
    return customer


@pytest.fixture()
def rice(seed):
    return seed.product(seed.store(), product_name="Ofada Rice 5kg", price=4500.0, stock=5)


def _add(client, product_id, quantity=1):
    return client.post("/api/cart/add", json={"productId": product_id, "quantity": quantity})


class TestGetCart:
    def test_creates_empty_cart(self, client, signed_in):
        response = client.get("/api/cart")

        assert response.status_code == 200
        cart = response.json()["cart"]
        assert cart["customer"] == str(signed_in.id)
        assert cart["items"] == []
        assert cart["status"] == "active"

    def test_requires_session(self, client):
        assert client.get("/api/cart").status_code == 401


class TestAddToCartEndpoint:
    def test_add_item(self, client, signed_in, rice):
        response = _add(client, str(rice.id), 2)

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Item added to cart successfully"
        [item] = data["cart"]["items"]
        assert item["product"] == str(rice.id)
        assert item["quantity"] == 2
        assert item["subtotal"] == 9000.0
        assert item["storeSnapshot"] == {"storeName": "Mama Put Provisions", "storeSlug": "mama-put-provisions"}
        assert data["cart"]["itemCount"] == 2

    def test_product_id_required(self, client, signed_in):
        response = client.post("/api/cart/add", json={"quantity": 1})

        assert response.status_code == 400
        assert response.json()["message"] == "Product ID is required"

    def test_quantity_at_least_one(self, client, signed_in, rice):
        response = _add(client, str(rice.id), 0)

        assert response.status_code == 400
        assert response.json()["message"] == "Quantity must be at least 1"

    def test_unknown_product(self, client, signed_in):
        response = _add(client, "missing")

        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"

    def test_over_stock(self, client, signed_in, rice):
        response = _add(client, str(rice.id), 6)

        assert response.status_code == 400
        assert response.json()["message"] == "Insufficient stock. Only 5 available"


class TestChangeCartEndpoints:
    def test_update_item(self, client, signed_in, rice):
        _add(client, str(rice.id))
        response = client.patch(f"/api/cart/items/{rice.id}", json={"quantity": 3})

        assert response.status_code == 200
        assert response.json()["cart"]["itemCount"] == 3

    def test_remove_item(self, client, signed_in, rice):
        _add(client, str(rice.id))
        response = client.delete(f"/api/cart/items/{rice.id}")

        assert response.status_code == 200
        assert response.json()["cart"]["items"] == []

    def test_clear(self, client, signed_in, rice):
        _add(client, str(rice.id), 2)
        response = client.delete("/api/cart")

        assert response.status_code == 200
        cart = response.json()["cart"]
        assert cart["items"] == []
        assert cart["status"] == "abandoned"


class TestValidateCartEndpoint:
    def test_valid_cart(self, client, signed_in, rice):
        _add(client, str(rice.id), 2)
        data = client.post("/api/cart/validate").json()

        assert data["isValid"] is True
        assert data["unavailableItems"] == []

    def test_reports_unavailable_items(self, client, signed_in, rice):
        _add(client, str(rice.id), 2)
        repo = current_domain.repository_for(Product)
        product = repo.get(str(rice.id))
        product.web_visibility = False
        repo.add(product)

        data = client.post("/api/cart/validate").json()

        assert data["isValid"] is False
        assert data["unavailableItems"][0]["reason"] == "Product no longer available"

    def test_empty_cart(self, client, signed_in):
        client.get("/api/cart")
        response = client.post("/api/cart/validate")

        assert response.status_code == 400
        assert response.json()["message"] == "Cart is empty"
