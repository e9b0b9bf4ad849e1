"""Frozen copies of product and store data captured on carts and orders.

Snapshots are value objects: they are taken once, when an item enters a cart
or an order, and are never refreshed from the live product or store. Later
edits to a product or store do not alter what a customer ordered.
"""

from protean.fields import String

from storefront.domain import storefront

DEFAULT_PRIMARY_COLOR = "#0D9488"
DEFAULT_SECONDARY_COLOR = "#F3F4F6"


@storefront.value_object
class ProductSnapshot:
    product_name = String(required=True, max_length=255)
    sku = String(max_length=100)
    image = String(max_length=1000)
    category = String(max_length=100)
    unit_of_measure = String(max_length=20, default="Piece")


@storefront.value_object
class StoreSnapshot:
    """Store contact, address, social and branding details at order time."""

    store_name = String(required=True, max_length=255)
    store_slug = String(max_length=255)
    store_phone = String(max_length=30)
    store_email = String(max_length=255)

    street = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    country = String(max_length=100, default="Nigeria")

    website = String(max_length=500)
    instagram = String(max_length=255)
    facebook = String(max_length=255)
    twitter = String(max_length=255)
    tiktok = String(max_length=255)
    whatsapp = String(max_length=30)

    logo = String(max_length=1000)
    primary_color = String(max_length=20, default=DEFAULT_PRIMARY_COLOR)
    secondary_color = String(max_length=20, default=DEFAULT_SECONDARY_COLOR)
