"""Cart item management: commands and handler.

Carts are addressed by customer: every customer has at most one, created on
first use. Adding an item captures the product and store details at that
moment so the cart can be shown without further lookups.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.inventory.product import Product
from storefront.store.store import Store

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=1, min_value=1)
    notes = String(max_length=200)


@storefront.command(part_of="Cart")
class UpdateCartItemQuantity:
    """Set a line's quantity; a quantity below 1 removes the line."""

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="Cart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


def load_or_open_cart(customer_id):
    """Return the customer's cart, opening one when none exists yet."""
    repo = current_domain.repository_for(Cart)
    cart = repo.for_customer(customer_id)
    if cart is None:
        cart = Cart.open(customer_id=customer_id)
        logger.info("cart_opened", customer_id=str(customer_id), cart_id=str(cart.id))
    return cart


def load_cart(customer_id):
    cart = current_domain.repository_for(Cart).for_customer(customer_id)
    if cart is None:
        raise ObjectNotFoundError({"cart": ["Cart not found"]})
    return cart


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = current_domain.repository_for(Product).find(command.product_id)
        if product is None:
            raise ObjectNotFoundError({"product": ["Product not found"]})
        if not product.is_available_online:
            raise ValidationError({"product": ["Product is not available"]})

        cart = load_or_open_cart(command.customer_id)
        existing = cart.find_item(product.id)
        wanted = command.quantity + (existing.quantity if existing else 0)
        if wanted > product.quantity_in_stock:
            raise ValidationError({"quantity": [f"Insufficient stock. Only {product.quantity_in_stock} available"]})

        store = current_domain.repository_for(Store).get(product.store_id)
        cart.add_item(
            product_id=str(product.id),
            product_snapshot=product.snapshot(),
            price=product.selling_price,
            store_id=str(store.id),
            quantity=command.quantity,
            store_name=store.store_name,
            store_slug=store.slug,
            notes=command.notes,
        )
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(UpdateCartItemQuantity)
    def update_item_quantity(self, command):
        cart = load_cart(command.customer_id)

        if command.quantity >= 1:
            product = current_domain.repository_for(Product).find(command.product_id)
            if product is not None and command.quantity > product.quantity_in_stock:
                raise ValidationError(
                    {"quantity": [f"Insufficient stock. Only {product.quantity_in_stock} available"]}
                )

        cart.update_item_quantity(command.product_id, command.quantity)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = load_cart(command.customer_id)
        cart.remove_item(command.product_id)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)
