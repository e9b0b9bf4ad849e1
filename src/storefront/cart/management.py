"""Cart management: commands and handler for the cart as a whole.

Covers get-or-create, clearing, coupons, shipping, and the periodic sweep
that flags carts nobody has touched before their expiry.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.items import load_cart, load_or_open_cart
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class OpenCart:
    """Fetch the customer's cart, creating or reactivating it as needed."""

    customer_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    customer_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ApplyCartCoupon:
    customer_id = Identifier(required=True)
    coupon_code = String(required=True, max_length=50)
    discount_amount = Float(required=True, min_value=0.0)


@storefront.command(part_of="Cart")
class RemoveCartCoupon:
    customer_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class UpdateCartShipping:
    customer_id = Identifier(required=True)
    shipping = Float(required=True, min_value=0.0)


@storefront.command(part_of="Cart")
class ExpireStaleCarts:
    """Flag active carts whose expiry date has passed."""

    as_of = String(max_length=40)  # ISO timestamp; defaults to now


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(OpenCart)
    def open_cart(self, command):
        cart = load_or_open_cart(command.customer_id)
        cart.reactivate()
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = load_cart(command.customer_id)
        cart.clear()
        current_domain.repository_for(Cart).add(cart)

    @handle(ApplyCartCoupon)
    def apply_coupon(self, command):
        cart = load_cart(command.customer_id)
        cart.apply_coupon(command.coupon_code, command.discount_amount)
        current_domain.repository_for(Cart).add(cart)

    @handle(RemoveCartCoupon)
    def remove_coupon(self, command):
        cart = load_cart(command.customer_id)
        cart.remove_coupon()
        current_domain.repository_for(Cart).add(cart)

    @handle(UpdateCartShipping)
    def update_shipping(self, command):
        cart = load_cart(command.customer_id)
        cart.update_shipping(command.shipping)
        current_domain.repository_for(Cart).add(cart)

    @handle(ExpireStaleCarts)
    def expire_stale_carts(self, command):
        now = datetime.fromisoformat(command.as_of) if command.as_of else datetime.now(UTC)
        repo = current_domain.repository_for(Cart)

        expired = 0
        for cart in repo.active_carts():
            if cart.expire(now):
                repo.add(cart)
                expired += 1

        logger.info("stale_carts_expired", count=expired)
        return expired
