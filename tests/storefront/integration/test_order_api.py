"""Integration tests for the order endpoints via TestClient."""

import re

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain
from storefront.api.errors import register_exception_handlers
from storefront.api.routes import cart_router, order_router
from storefront.cart.management import UpdateCartShipping
from storefront.customer.customer import Customer
from storefront.inventory.product import Product
from storefront.order.order import Order

SHIPPING = {"phone": "08031234567", "city": "Ikeja", "state": "Lagos"}


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(order_router)
    app.include_router(cart_router)
    register_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def shopper(seed, client):
    """A signed-in customer with two products from two stores in the cart."""
    customer = seed.customer()
    session = seed.session(customer)
    client.cookies.set("session", session.session_id)

    rice = seed.product(seed.store(), product_name="Ofada Rice 5kg", price=4500.0, stock=7)
    cloth = seed.product(
        seed.store(store_name="Aso Oke Fabrics", owner_id="owner-002"),
        product_name="Aso Oke Bundle",
        price=15000.0,
        stock=3,
    )
    seed.batch(rice, 2, days_ago=10, code="GRO-OLD-B001")
    seed.batch(rice, 5, days_ago=1, code="GRO-NEW-B002")
    cart_id = seed.cart_with(customer, (rice, 3), (cloth, 1))

    return {"customer": customer, "cart_id": cart_id, "rice": rice, "cloth": cloth}


def _create(client, cart_id, shipping=None, **extra):
    return client.post(
        "/api/orders/create",
        json={"cartId": cart_id, "shippingAddress": shipping or SHIPPING, **extra},
    )


class TestCreateOrderEndpoint:
    def test_create_order(self, client, shopper):
        response = _create(client, shopper["cart_id"], customerNotes="Call before delivery")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Order placed successfully"

        order = data["order"]
        assert re.fullmatch(r"ORD-\d{6}-\d{4}", order["orderNumber"])
        assert order["status"] == "pending"
        assert order["totalAmount"] == 28500.0
        assert order["itemCount"] == 4
        assert [s["storeName"] for s in order["stores"]] == ["Mama Put Provisions", "Aso Oke Fabrics"]
        assert [s["subtotal"] for s in order["stores"]] == [13500.0, 15000.0]

        stored = current_domain.repository_for(Order).get(order["_id"])
        assert stored.customer_notes == "Call before delivery"

    def test_cart_is_empty_afterwards(self, client, shopper):
        _create(client, shopper["cart_id"])

        cart = client.get("/api/cart").json()["cart"]
        assert cart["items"] == []
        assert cart["total"] == 0.0

    def test_requires_session(self, client, shopper):
        client.cookies.clear()
        response = _create(client, shopper["cart_id"])

        assert response.status_code == 401
        assert response.json() == {"success": False, "message": "Unauthorized. Please sign in."}

    def test_expired_session_is_rejected(self, seed, client, shopper):
        stale = seed.session(shopper["customer"], active=False)
        client.cookies.set("session", stale.session_id)

        assert _create(client, shopper["cart_id"]).status_code == 401

    def test_insufficient_stock(self, client, shopper):
        repo = current_domain.repository_for(Product)
        rice = repo.get(str(shopper["rice"].id))
        rice.quantity_in_stock = 1
        repo.add(rice)

        response = _create(client, shopper["cart_id"])

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["message"] == "Some items are no longer available"
        [item] = data["unavailableItems"]
        assert item["product"] == str(shopper["rice"].id)
        assert item["productName"] == "Ofada Rice 5kg"
        assert item["reason"] == "Insufficient stock"
        assert item["availableQuantity"] == 1
        assert item["quantity"] == 3

        assert current_domain.repository_for(Order).count() == 0

    def test_incomplete_address(self, client, shopper):
        response = _create(client, shopper["cart_id"], shipping={"phone": "08031234567", "city": "Ikeja"})

        assert response.status_code == 400
        assert response.json()["message"] == "Complete shipping address is required"

    def test_invalid_phone(self, client, shopper):
        response = _create(client, shopper["cart_id"], shipping={**SHIPPING, "phone": "555-0100"})

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid phone number format"

    def test_empty_cart(self, client, shopper):
        client.delete("/api/cart")
        response = _create(client, shopper["cart_id"])

        assert response.status_code == 400
        assert response.json()["message"] == "Cart is empty"

    def test_unknown_customer(self, seed, client, shopper):
        ghost = Customer.register(first_name="Tunde", last_name="Bello", email="tunde@example.com")
        client.cookies.set("session", seed.session(ghost).session_id)

        response = _create(client, shopper["cart_id"])

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Customer not found"}

    def test_shipping_fee_in_total(self, client, shopper):
        current_domain.process(
            UpdateCartShipping(customer_id=str(shopper["customer"].id), shipping=1000.0),
            asynchronous=False,
        )

        response = _create(client, shopper["cart_id"])

        assert response.status_code == 200
        assert response.json()["order"]["totalAmount"] == 29500.0


class TestGetOrderEndpoint:
    def test_get_order(self, client, shopper):
        order_id = _create(client, shopper["cart_id"]).json()["order"]["_id"]

        response = client.get(f"/api/orders/{order_id}")

        assert response.status_code == 200
        order = response.json()["order"]
        assert order["_id"] == order_id
        assert order["customer"] == str(shopper["customer"].id)
        assert order["shippingAddress"]["street"] == "Ikeja, Lagos"
        assert order["shippingAddress"]["country"] == "Nigeria"
        assert order["paymentInfo"]["method"] == "cash_to_vendor"
        assert order["isMultiVendor"] is True
        assert order["timeline"][0]["status"] == "pending"
        assert order["timeline"][0]["note"] == "Order created"
        assert {i["productSnapshot"]["productName"] for i in order["items"]} == {"Ofada Rice 5kg", "Aso Oke Bundle"}

    def test_reading_twice_returns_same_document(self, client, shopper):
        order_id = _create(client, shopper["cart_id"]).json()["order"]["_id"]

        first = client.get(f"/api/orders/{order_id}").json()
        second = client.get(f"/api/orders/{order_id}").json()
        assert first == second

    def test_unknown_order(self, client, shopper):
        response = client.get("/api/orders/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Order not found"}

    def test_other_customers_order_is_hidden(self, seed, client, shopper):
        order_id = _create(client, shopper["cart_id"]).json()["order"]["_id"]

        stranger = seed.customer(first_name="Tunde")
        client.cookies.set("session", seed.session(stranger).session_id)

        assert client.get(f"/api/orders/{order_id}").status_code == 404

    def test_cancelling_another_customers_order_is_not_found(self, seed, client, shopper):
        order_id = _create(client, shopper["cart_id"]).json()["order"]["_id"]

        stranger = seed.customer(first_name="Tunde")
        client.cookies.set("session", seed.session(stranger).session_id)
        response = client.post(f"/api/orders/{order_id}/cancel", json={"reason": "Not mine"})

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Order not found"}

    def test_requires_session(self, client):
        assert client.get("/api/orders/anything").status_code == 401


class TestOrderListAndLifecycleEndpoints:
    def test_list_orders_with_stats(self, client, shopper):
        _create(client, shopper["cart_id"])

        data = client.get("/api/orders").json()

        assert len(data["orders"]) == 1
        assert data["stats"]["totalOrders"] == 1
        assert data["stats"]["pendingOrders"] == 1
        assert data["pagination"] == {
            "currentPage": 1,
            "totalPages": 1,
            "totalItems": 1,
            "hasNextPage": False,
            "hasPrevPage": False,
        }

    def test_update_status(self, client, shopper):
        order_id = _create(client, shopper["cart_id"]).json()["order"]["_id"]

        response = client.patch(f"/api/orders/{order_id}/status", json={"status": "confirmed"})

        assert response.status_code == 200
        assert response.json()["order"]["status"] == "confirmed"

    def test_cancel(self, client, shopper):
        order_id = _create(client, shopper["cart_id"]).json()["order"]["_id"]

        response = client.post(f"/api/orders/{order_id}/cancel", json={"reason": "Ordered by mistake"})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Order cancelled successfully"}
        assert client.get(f"/api/orders/{order_id}").json()["order"]["status"] == "cancelled"
