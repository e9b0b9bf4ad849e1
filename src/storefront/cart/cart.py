"""Cart aggregate: one per customer, holding products from any number of stores.

Totals are never set directly. Every mutation recomputes subtotal, item
count and total from the items, pushes the expiry forward and settles the
status: a cart with no items is abandoned, and adding items to an abandoned
or expired cart makes it active again.
"""

from collections import OrderedDict
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront import settings
from storefront.cart.events import (
    CartCleared,
    CartConverted,
    CartExpired,
    CartItemAdded,
    CartItemQuantityChanged,
    CartItemRemoved,
    CartOpened,
    CouponApplied,
    CouponRemoved,
)
from storefront.domain import storefront
from storefront.shared.money import amounts_match, round_money
from storefront.shared.snapshots import ProductSnapshot


class CartStatus(Enum):
    ACTIVE = "active"
    ABANDONED = "abandoned"
    CONVERTED = "converted"
    EXPIRED = "expired"


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    product_snapshot = ValueObject(ProductSnapshot)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    subtotal = Float(default=0.0, min_value=0.0)
    store_id = Identifier(required=True)
    store_name = String(max_length=255)
    store_slug = String(max_length=255)
    added_at = DateTime()
    notes = String(max_length=200)


@storefront.aggregate
class Cart:
    customer_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)

    subtotal = Float(default=0.0)
    tax = Float(default=0.0, min_value=0.0)
    shipping = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    coupon_code = String(max_length=50)
    coupon_discount = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0)
    item_count = Integer(default=0, min_value=0)

    status = String(choices=CartStatus, default=CartStatus.ACTIVE.value)
    expires_at = DateTime()
    last_updated = DateTime()
    created_at = DateTime()

    @invariant.post
    def subtotal_is_sum_of_item_subtotals(self):
        if not amounts_match(self.subtotal, sum(item.subtotal for item in self.items)):
            raise ValidationError({"subtotal": ["Cart subtotal must equal the sum of item subtotals"]})

    @invariant.post
    def item_count_is_sum_of_quantities(self):
        if self.item_count != sum(item.quantity for item in self.items):
            raise ValidationError({"item_count": ["Item count must equal the sum of item quantities"]})

    @invariant.post
    def total_follows_from_components(self):
        expected = (
            (self.subtotal or 0.0)
            + (self.tax or 0.0)
            + (self.shipping or 0.0)
            - (self.discount or 0.0)
            - (self.coupon_discount or 0.0)
        )
        if not amounts_match(self.total, expected):
            raise ValidationError({"total": ["Total must equal subtotal plus tax and shipping less discounts"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def open(cls, customer_id):
        now = datetime.now(UTC)
        cart = cls(
            customer_id=customer_id,
            status=CartStatus.ACTIVE.value,
            created_at=now,
            last_updated=now,
            expires_at=now + timedelta(days=settings.CART_EXPIRY_DAYS),
        )
        cart.raise_(CartOpened(cart_id=str(cart.id), customer_id=str(customer_id)))
        return cart

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    @property
    def is_empty(self):
        return len(self.items) == 0

    @property
    def unique_stores(self):
        return list(OrderedDict.fromkeys(str(item.store_id) for item in self.items))

    @property
    def has_multiple_stores(self):
        return len(self.unique_stores) > 1

    @property
    def is_expired(self):
        return self.expires_at is not None and self.expires_at < datetime.now(UTC)

    @property
    def days_until_expiry(self):
        if self.expires_at is None:
            return None
        return max((self.expires_at - datetime.now(UTC)).days, 0)

    def find_item(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def items_by_store(self):
        """Cart items grouped per store, in the order stores first appear."""
        groups = OrderedDict()
        for item in self.items:
            group = groups.setdefault(
                str(item.store_id),
                {
                    "store_id": str(item.store_id),
                    "store_name": item.store_name,
                    "store_slug": item.store_slug,
                    "items": [],
                    "subtotal": 0.0,
                    "item_count": 0,
                },
            )
            group["items"].append(item)
            group["subtotal"] = round_money(group["subtotal"] + item.subtotal)
            group["item_count"] += item.quantity
        return list(groups.values())

    # -------------------------------------------------------------------
    # Recalculation
    # -------------------------------------------------------------------
    def _recalculate(self):
        """Recompute totals, extend expiry and settle status. Call inside atomic_change."""
        now = datetime.now(UTC)

        self.subtotal = round_money(sum(item.subtotal for item in self.items))
        self.item_count = sum(item.quantity for item in self.items)
        self.total = round_money(
            self.subtotal
            + (self.tax or 0.0)
            + (self.shipping or 0.0)
            - (self.discount or 0.0)
            - (self.coupon_discount or 0.0)
        )
        self.last_updated = now
        self.expires_at = now + timedelta(days=settings.CART_EXPIRY_DAYS)

        if not self.items:
            self.status = CartStatus.ABANDONED.value
        elif self.status in (CartStatus.ABANDONED.value, CartStatus.EXPIRED.value):
            self.status = CartStatus.ACTIVE.value

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, product_snapshot, price, store_id, quantity=1, store_name=None, store_slug=None, notes=None):
        """Add a product to the cart, merging with an existing line for the same product."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.find_item(product_id)

        with atomic_change(self):
            if existing:
                existing.quantity += quantity
                existing.subtotal = round_money(existing.quantity * existing.price)
                if notes:
                    existing.notes = notes
            else:
                self.add_items(
                    CartItem(
                        product_id=product_id,
                        product_snapshot=product_snapshot,
                        quantity=quantity,
                        price=price,
                        subtotal=round_money(quantity * price),
                        store_id=store_id,
                        store_name=store_name,
                        store_slug=store_slug,
                        added_at=datetime.now(UTC),
                        notes=notes,
                    )
                )
            self._recalculate()

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                store_id=str(store_id),
                quantity=quantity,
                price=price,
            )
        )

    def update_item_quantity(self, product_id, quantity):
        """Set a line's quantity. Anything below 1 removes the line."""
        item = self.find_item(product_id)
        if item is None:
            raise ValidationError({"product_id": ["Item not found in cart"]})

        if quantity is None or quantity < 1:
            self.remove_item(product_id)
            return

        previous_quantity = item.quantity
        with atomic_change(self):
            item.quantity = quantity
            item.subtotal = round_money(quantity * item.price)
            self._recalculate()

        self.raise_(
            CartItemQuantityChanged(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        item = self.find_item(product_id)
        if item is None:
            raise ValidationError({"product_id": ["Item not found in cart"]})

        with atomic_change(self):
            self.remove_items(item)
            self._recalculate()

        self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id)))

    def clear(self):
        """Empty the cart and drop any coupon or discount. The cart ends up abandoned."""
        items_removed = len(self.items)

        with atomic_change(self):
            for item in list(self.items):
                self.remove_items(item)
            self.coupon_code = None
            self.coupon_discount = 0.0
            self.discount = 0.0
            self._recalculate()

        self.raise_(CartCleared(cart_id=str(self.id), items_removed=items_removed))

    # -------------------------------------------------------------------
    # Pricing adjustments
    # -------------------------------------------------------------------
    def apply_coupon(self, coupon_code, discount_amount):
        if not coupon_code or not coupon_code.strip():
            raise ValidationError({"coupon_code": ["Coupon code is required"]})
        if discount_amount is None or discount_amount < 0:
            raise ValidationError({"coupon_discount": ["Coupon discount cannot be negative"]})

        code = coupon_code.strip().upper()
        with atomic_change(self):
            self.coupon_code = code
            self.coupon_discount = round_money(discount_amount)
            self._recalculate()

        self.raise_(CouponApplied(cart_id=str(self.id), coupon_code=code, coupon_discount=self.coupon_discount))

    def remove_coupon(self):
        previous = self.coupon_code
        with atomic_change(self):
            self.coupon_code = None
            self.coupon_discount = 0.0
            self._recalculate()

        self.raise_(CouponRemoved(cart_id=str(self.id), coupon_code=previous))

    def update_shipping(self, shipping_cost):
        if shipping_cost is None or shipping_cost < 0:
            raise ValidationError({"shipping": ["Shipping cost cannot be negative"]})

        with atomic_change(self):
            self.shipping = round_money(shipping_cost)
            self._recalculate()

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def reactivate(self):
        """Bring a cart back into use when its customer returns to it."""
        if self.status == CartStatus.ACTIVE.value:
            return False

        now = datetime.now(UTC)
        self.status = CartStatus.ACTIVE.value
        self.last_updated = now
        self.expires_at = now + timedelta(days=settings.CART_EXPIRY_DAYS)
        return True

    def mark_converted(self):
        if self.is_empty:
            raise ValidationError({"cart": ["Cannot convert an empty cart"]})

        self.status = CartStatus.CONVERTED.value
        self.last_updated = datetime.now(UTC)
        self.raise_(CartConverted(cart_id=str(self.id), customer_id=str(self.customer_id)))

    def expire(self, now=None):
        """Flag an active cart whose expiry has passed. Nothing is deleted."""
        now = now or datetime.now(UTC)
        if self.status != CartStatus.ACTIVE.value or self.expires_at is None or self.expires_at >= now:
            return False

        self.status = CartStatus.EXPIRED.value
        self.raise_(CartExpired(cart_id=str(self.id), expired_at=now))
        return True
