"""Domain events for the Cart aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Cart")
class CartOpened:
    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@storefront.event(part_of="Cart")
class CartItemAdded:
    """A product was added to the cart, or its quantity increased."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    store_id = Identifier(required=True)
    quantity = Integer(required=True)
    price = Float(required=True)


@storefront.event(part_of="Cart")
class CartItemQuantityChanged:
    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.event(part_of="Cart")
class CouponApplied:
    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String(required=True, max_length=50)
    coupon_discount = Float(required=True)


@storefront.event(part_of="Cart")
class CouponRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    coupon_code = String(max_length=50)


@storefront.event(part_of="Cart")
class CartCleared:
    """Every item was removed, usually because the cart became an order."""

    __version__ = 1

    cart_id = Identifier(required=True)
    items_removed = Integer(required=True)


@storefront.event(part_of="Cart")
class CartConverted:
    __version__ = 1

    cart_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@storefront.event(part_of="Cart")
class CartExpired:
    __version__ = 1

    cart_id = Identifier(required=True)
    expired_at = DateTime(required=True)
