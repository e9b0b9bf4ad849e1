"""FastAPI routes for the storefront: carts and orders.

Thin adapters that translate HTTP requests into domain commands and render
the results. Every route acts for the customer behind the session cookie.
"""

import math

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.api import presenters
from storefront.api.auth import current_customer_id
from storefront.api.errors import AuthenticationRequired
from storefront.api.schemas import (
    AddToCartRequest,
    CancelOrderRequest,
    CreateOrderRequest,
    StatusResponse,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
)
from storefront.cart.cart import Cart
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartItemQuantity
from storefront.cart.management import ClearCart, OpenCart
from storefront.cart.validation import validate_stock
from storefront.order.order import Order
from storefront.order.placement import PlaceOrder
from storefront.order.status import CancelOrder, UpdateOrderStatus

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/api/orders", tags=["orders"])


@order_router.post("/create")
async def create_order(body: CreateOrderRequest, customer_id: str = Depends(current_customer_id)):
    command = PlaceOrder(
        customer_id=customer_id,
        cart_id=body.cart_id,
        phone=body.shipping_address.phone,
        city=body.shipping_address.city,
        state=body.shipping_address.state,
        postal_code=body.shipping_address.postal_code,
        customer_notes=body.customer_notes,
    )
    try:
        order_id = current_domain.process(command, asynchronous=False)
    except (ValidationError, ObjectNotFoundError, AuthenticationRequired):
        raise
    except Exception:
        logger.exception("order_creation_failed", customer_id=customer_id, cart_id=body.cart_id)
        return JSONResponse(status_code=500, content={"success": False, "message": "Failed to create order"})

    order = current_domain.repository_for(Order).get(order_id)
    return {
        "success": True,
        "message": "Order placed successfully",
        "order": presenters.order_summary(order),
    }


@order_router.get("")
async def list_orders(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    status: list[str] | None = Query(default=None),
    customer_id: str = Depends(current_customer_id),
):
    repo = current_domain.repository_for(Order)
    orders = repo.for_customer(customer_id, statuses=status)

    total_items = len(orders)
    total_pages = math.ceil(total_items / limit) if total_items else 0
    start = (page - 1) * limit

    return {
        "success": True,
        "orders": [presenters.order_detail(o) for o in orders[start : start + limit]],
        "stats": repo.stats_for_customer(customer_id),
        "pagination": {
            "currentPage": page,
            "totalPages": total_pages,
            "totalItems": total_items,
            "hasNextPage": page < total_pages,
            "hasPrevPage": page > 1,
        },
    }


@order_router.get("/{order_id}")
async def get_order(order_id: str, customer_id: str = Depends(current_customer_id)):
    order = current_domain.repository_for(Order).owned_by(order_id, customer_id)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return {"success": True, "order": presenters.order_detail(order)}


@order_router.patch("/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    customer_id: str = Depends(current_customer_id),
):
    command = UpdateOrderStatus(
        order_id=order_id,
        customer_id=customer_id,
        status=body.status,
        note=body.note,
    )
    current_domain.process(command, asynchronous=False)

    order = current_domain.repository_for(Order).get(order_id)
    return {
        "success": True,
        "message": "Order status updated successfully",
        "order": {"_id": str(order.id), "orderNumber": order.order_number, "status": order.status},
    }


@order_router.post("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest,
    customer_id: str = Depends(current_customer_id),
) -> StatusResponse:
    command = CancelOrder(order_id=order_id, customer_id=customer_id, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(message="Order cancelled successfully")


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/api/cart", tags=["cart"])


def _cart_payload(customer_id, message=None):
    cart = current_domain.repository_for(Cart).for_customer(customer_id)
    payload = {"success": True, "cart": presenters.cart(cart)}
    if message:
        payload["message"] = message
    return payload


@cart_router.get("")
async def get_cart(customer_id: str = Depends(current_customer_id)):
    current_domain.process(OpenCart(customer_id=customer_id), asynchronous=False)
    return _cart_payload(customer_id)


@cart_router.post("/add")
async def add_to_cart(body: AddToCartRequest, customer_id: str = Depends(current_customer_id)):
    if not body.product_id:
        raise HTTPException(status_code=400, detail="Product ID is required")
    if body.quantity < 1:
        raise HTTPException(status_code=400, detail="Quantity must be at least 1")

    command = AddToCart(
        customer_id=customer_id,
        product_id=body.product_id,
        quantity=body.quantity,
        notes=body.notes,
    )
    current_domain.process(command, asynchronous=False)
    return _cart_payload(customer_id, "Item added to cart successfully")


@cart_router.patch("/items/{product_id}")
async def update_cart_item(
    product_id: str,
    body: UpdateCartItemRequest,
    customer_id: str = Depends(current_customer_id),
):
    command = UpdateCartItemQuantity(customer_id=customer_id, product_id=product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_payload(customer_id, "Cart updated successfully")


@cart_router.delete("/items/{product_id}")
async def remove_cart_item(product_id: str, customer_id: str = Depends(current_customer_id)):
    current_domain.process(RemoveFromCart(customer_id=customer_id, product_id=product_id), asynchronous=False)
    return _cart_payload(customer_id, "Item removed from cart")


@cart_router.delete("")
async def clear_cart(customer_id: str = Depends(current_customer_id)):
    current_domain.process(ClearCart(customer_id=customer_id), asynchronous=False)
    return _cart_payload(customer_id, "Cart cleared successfully")


@cart_router.post("/validate")
async def validate_cart(customer_id: str = Depends(current_customer_id)):
    cart = current_domain.repository_for(Cart).for_customer(customer_id)
    if cart is None or cart.is_empty:
        raise HTTPException(status_code=400, detail="Cart is empty")

    validation = validate_stock(cart)
    return {
        "success": True,
        "isValid": validation.is_valid,
        "unavailableItems": [item.to_dict() for item in validation.unavailable_items],
        "cart": presenters.cart(cart),
    }
