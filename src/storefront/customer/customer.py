"""Customer aggregate with the ShoppingStats value object.

Only what checkout needs lives here: the name, contact details and the
running totals updated every time an order is placed. Registration and
sign-in flows are handled elsewhere.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String, ValueObject

from storefront.customer.events import ShoppingStatsUpdated
from storefront.domain import storefront
from storefront.shared.money import round_money


@storefront.value_object(part_of="Customer")
class ShoppingStats:
    """Lifetime purchase figures. Replaced wholesale after every order."""

    total_orders: Integer(default=0, min_value=0)
    total_spent: Float(default=0.0, min_value=0.0)
    average_order_value: Float(default=0.0, min_value=0.0)
    first_order_date: DateTime()
    last_order_date: DateTime()

    @invariant.post
    def first_order_cannot_follow_last_order(self):
        if self.first_order_date and self.last_order_date and self.first_order_date > self.last_order_date:
            raise ValidationError({"first_order_date": ["First order date cannot be after the last order date"]})


@storefront.aggregate
class Customer:
    first_name: String(required=True, max_length=100)
    last_name: String(required=True, max_length=100)
    email: String(required=True, max_length=255, unique=True)
    phone: String(max_length=20)
    shopping_stats: ValueObject(ShoppingStats)
    created_at: DateTime(default=lambda: datetime.now(UTC))

    @classmethod
    def register(cls, first_name, last_name, email, phone=None):
        return cls(
            first_name=first_name,
            last_name=last_name,
            email=email.strip().lower(),
            phone=phone,
            shopping_stats=ShoppingStats(),
        )

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def update_shopping_stats(self, order_amount, ordered_at=None):
        """Fold one placed order into the customer's lifetime figures."""
        ordered_at = ordered_at or datetime.now(UTC)
        stats = self.shopping_stats or ShoppingStats()

        total_orders = (stats.total_orders or 0) + 1
        total_spent = round_money((stats.total_spent or 0.0) + order_amount)

        self.shopping_stats = ShoppingStats(
            total_orders=total_orders,
            total_spent=total_spent,
            average_order_value=round_money(total_spent / total_orders),
            first_order_date=stats.first_order_date or ordered_at,
            last_order_date=ordered_at,
        )

        self.raise_(
            ShoppingStatsUpdated(
                customer_id=str(self.id),
                order_amount=order_amount,
                total_orders=total_orders,
                total_spent=total_spent,
                ordered_at=ordered_at,
            )
        )
