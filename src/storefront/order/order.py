"""Order aggregate: one checkout, spanning any number of stores.

Each order line carries frozen copies of the product and store as they were
at checkout, so later edits to either never change what the customer sees.
The per-store breakdown (``stores``) is derived from the lines on every read.

Totals follow from the lines and the cart's adjustments:

    subtotal     = sum(item.subtotal)
    total_amount = subtotal + tax + shipping_fee - discount - coupon_discount
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.order.events import (
    OrderCancelled,
    OrderPaid,
    OrderPlaced,
    OrderRefunded,
    OrderStatusChanged,
)
from storefront.order.grouping import group_by_store
from storefront.shared.money import amounts_match, round_money
from storefront.shared.snapshots import ProductSnapshot, StoreSnapshot


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class ItemStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class UpdatedBy(Enum):
    SYSTEM = "system"
    CUSTOMER = "customer"
    ADMIN = "admin"
    SELLER = "seller"


# Fulfilment moves forward only, though steps may be skipped.
_FORWARD_FLOW = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
]

_CANCELLABLE = {OrderStatus.PENDING, OrderStatus.CONFIRMED}
_REFUNDABLE = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class CustomerSnapshot:
    first_name = String(max_length=100)
    last_name = String(max_length=100)
    email = String(max_length=255)
    phone = String(max_length=20)


@storefront.value_object(part_of="Order")
class ShippingAddress:
    first_name = String(max_length=100)
    last_name = String(max_length=100)
    phone = String(required=True, max_length=20)
    street = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    country = String(max_length=100, default="Nigeria")
    postal_code = String(max_length=20)


@storefront.value_object(part_of="Order")
class PaymentInfo:
    method = String(max_length=30, default="cash_to_vendor")
    provider = String(max_length=30, default="manual")
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    transaction_id = String(max_length=255)
    reference = String(max_length=255)
    paid_at = DateTime()
    refunded_at = DateTime()
    refund_amount = Float(default=0.0)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """One product line, frozen at checkout together with its store."""

    product_id = Identifier(required=True)
    product_snapshot = ValueObject(ProductSnapshot)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    subtotal = Float(required=True, min_value=0.0)
    store_id = Identifier(required=True)
    store_snapshot = ValueObject(StoreSnapshot)
    seller_id = Identifier()
    item_status = String(choices=ItemStatus, default=ItemStatus.PENDING.value)


@storefront.entity(part_of="Order")
class TimelineEvent:
    # Free text: besides order statuses it records events such as "payment_completed"
    status = String(required=True, max_length=30)
    timestamp = DateTime(required=True)
    note = String(max_length=500)
    updated_by = String(choices=UpdatedBy, default=UpdatedBy.SYSTEM.value)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=30, unique=True)
    customer_id = Identifier(required=True)
    customer_snapshot = ValueObject(CustomerSnapshot)
    items = HasMany(OrderItem)

    subtotal = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    shipping_fee = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    coupon_discount = Float(default=0.0, min_value=0.0)
    total_amount = Float(default=0.0)

    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    shipping_address = ValueObject(ShippingAddress)
    payment_info = ValueObject(PaymentInfo)
    timeline = HasMany(TimelineEvent)

    coupon_code = String(max_length=50)
    customer_notes = String(max_length=500)
    order_source = String(max_length=20, default="web")

    cancellation_reason = String(max_length=500)
    cancelled_by = String(max_length=20)
    cancelled_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()

    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def subtotal_is_sum_of_item_subtotals(self):
        if not amounts_match(self.subtotal, sum(item.subtotal for item in self.items)):
            raise ValidationError({"subtotal": ["Order subtotal must equal the sum of item subtotals"]})

    @invariant.post
    def total_follows_from_components(self):
        expected = (
            (self.subtotal or 0.0)
            + (self.tax or 0.0)
            + (self.shipping_fee or 0.0)
            - (self.discount or 0.0)
            - (self.coupon_discount or 0.0)
        )
        if not amounts_match(self.total_amount, expected):
            raise ValidationError({"total_amount": ["Total must equal subtotal plus tax and shipping less discounts"]})

    @invariant.post
    def store_subtotals_add_up(self):
        if not amounts_match(sum(g.subtotal for g in self.stores), self.subtotal):
            raise ValidationError({"stores": ["Store subtotals must add up to the order subtotal"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        customer_id,
        customer_snapshot,
        shipping_address,
        lines,
        tax=0.0,
        shipping_fee=0.0,
        discount=0.0,
        coupon_discount=0.0,
        coupon_code=None,
        customer_notes=None,
        order_source="web",
    ):
        """Create a pending order from prepared lines.

        Args:
            lines: ``OrderItem`` instances, each already carrying its product
                and store snapshots.
        """
        now = datetime.now(UTC)
        lines = list(lines)
        tax, shipping_fee = tax or 0.0, shipping_fee or 0.0
        discount, coupon_discount = discount or 0.0, coupon_discount or 0.0
        subtotal = round_money(sum(line.subtotal for line in lines))

        # Lines and totals are set together; post-invariants run on construction
        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            customer_snapshot=customer_snapshot,
            shipping_address=shipping_address,
            payment_info=PaymentInfo(),
            items=lines,
            subtotal=subtotal,
            tax=tax,
            shipping_fee=shipping_fee,
            discount=discount,
            coupon_discount=coupon_discount,
            total_amount=round_money(subtotal + tax + shipping_fee - discount - coupon_discount),
            coupon_code=coupon_code,
            customer_notes=customer_notes,
            order_source=order_source,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                total_amount=order.total_amount,
                item_count=order.item_count,
                store_count=len(order.stores),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    @property
    def stores(self):
        return group_by_store(self.items)

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items)

    @property
    def is_multi_vendor(self):
        return len({str(item.store_id) for item in self.items}) > 1

    @property
    def is_paid(self):
        return self.payment_info is not None and self.payment_info.status == PaymentStatus.COMPLETED.value

    @property
    def can_be_cancelled(self):
        return OrderStatus(self.status) in _CANCELLABLE

    @property
    def can_be_refunded(self):
        return self.is_paid and OrderStatus(self.status) in _REFUNDABLE

    def sorted_timeline(self):
        return sorted(self.timeline, key=lambda e: e.timestamp)

    # -------------------------------------------------------------------
    # Timeline and status
    # -------------------------------------------------------------------
    def add_timeline_event(self, status, note="", updated_by=UpdatedBy.SYSTEM.value):
        self.add_timeline(
            TimelineEvent(
                status=status,
                timestamp=datetime.now(UTC),
                note=note,
                updated_by=updated_by,
            )
        )
        self.updated_at = datetime.now(UTC)

    def _assert_can_move_to(self, target):
        current = OrderStatus(self.status)
        if target == OrderStatus.CANCELLED:
            if current not in _CANCELLABLE:
                raise ValidationError({"status": [f"Order cannot be cancelled once it is {current.value}"]})
            return
        if target == OrderStatus.REFUNDED:
            raise ValidationError({"status": ["Use a refund to move an order to refunded"]})
        if current not in _FORWARD_FLOW or _FORWARD_FLOW.index(target) <= _FORWARD_FLOW.index(current):
            raise ValidationError({"status": [f"Cannot change status from {current.value} to {target.value}"]})

    def update_status(self, new_status, note="", updated_by=UpdatedBy.SYSTEM.value):
        """Move the order to ``new_status`` and record it on the timeline."""
        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError({"status": [f"Unknown order status: {new_status}"]}) from None

        if target == OrderStatus.CANCELLED:
            self.cancel(reason=note, cancelled_by=updated_by)
            return

        self._assert_can_move_to(target)
        previous = self.status
        now = datetime.now(UTC)

        self.status = target.value
        if target == OrderStatus.SHIPPED and not self.shipped_at:
            self.shipped_at = now
        elif target == OrderStatus.DELIVERED and not self.delivered_at:
            self.delivered_at = now
        self.add_timeline_event(target.value, note, updated_by)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                updated_by=updated_by,
                note=note,
            )
        )

    def cancel(self, reason, cancelled_by=UpdatedBy.CUSTOMER.value):
        """Cancel the order and every line in it."""
        self._assert_can_move_to(OrderStatus.CANCELLED)
        now = datetime.now(UTC)

        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_by = cancelled_by
        self.cancelled_at = now
        for item in self.items:
            item.item_status = ItemStatus.CANCELLED.value
        self.add_timeline_event(OrderStatus.CANCELLED.value, f"Order cancelled: {reason}", cancelled_by)

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                reason=reason,
                cancelled_by=cancelled_by,
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def mark_as_paid(self, transaction_id=None, reference=None):
        if self.is_paid:
            raise ValidationError({"payment_info": ["Order is already paid"]})

        now = datetime.now(UTC)
        current = self.payment_info or PaymentInfo()
        self.payment_info = PaymentInfo(
            method=current.method,
            provider=current.provider,
            status=PaymentStatus.COMPLETED.value,
            transaction_id=transaction_id,
            reference=reference,
            paid_at=now,
        )
        self.add_timeline_event("payment_completed", "Payment completed successfully")

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                transaction_id=transaction_id,
                reference=reference,
                paid_at=now,
            )
        )

    def refund(self, refund_amount, reason=""):
        """Refund all or part of a paid order.

        A refund covering the full total marks the payment ``refunded``,
        anything less ``partially_refunded``. The order becomes ``refunded``
        unless it was already cancelled.
        """
        if not self.can_be_refunded:
            raise ValidationError({"status": ["Only paid orders that are delivered or cancelled can be refunded"]})
        if refund_amount is None or refund_amount <= 0:
            raise ValidationError({"refund_amount": ["Refund amount must be greater than zero"]})
        if refund_amount > self.total_amount:
            raise ValidationError({"refund_amount": ["Refund amount cannot exceed the order total"]})

        now = datetime.now(UTC)
        payment_status = (
            PaymentStatus.REFUNDED.value if refund_amount >= self.total_amount else PaymentStatus.PARTIALLY_REFUNDED.value
        )
        current = self.payment_info
        self.payment_info = PaymentInfo(
            method=current.method,
            provider=current.provider,
            status=payment_status,
            transaction_id=current.transaction_id,
            reference=current.reference,
            paid_at=current.paid_at,
            refunded_at=now,
            refund_amount=round_money(refund_amount),
        )
        if self.status != OrderStatus.CANCELLED.value:
            self.status = OrderStatus.REFUNDED.value
        self.add_timeline_event(OrderStatus.REFUNDED.value, f"Refund processed: {reason}", UpdatedBy.ADMIN.value)

        self.raise_(
            OrderRefunded(
                order_id=str(self.id),
                refund_amount=refund_amount,
                payment_status=payment_status,
                reason=reason,
            )
        )
