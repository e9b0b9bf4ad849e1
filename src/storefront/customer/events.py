"""Domain events for the Customer and CustomerSession aggregates."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Customer")
class ShoppingStatsUpdated:
    """A completed checkout was added to the customer's lifetime figures."""

    __version__ = 1

    customer_id = Identifier(required=True)
    order_amount = Float(required=True)
    total_orders = Integer(required=True)
    total_spent = Float(required=True)
    ordered_at = DateTime(required=True)


@storefront.event(part_of="CustomerSession")
class SessionStarted:
    __version__ = 1

    session_id = String(required=True, max_length=128)
    customer_id = Identifier(required=True)
    expires_at = DateTime(required=True)


@storefront.event(part_of="CustomerSession")
class SessionEnded:
    __version__ = 1

    session_id = String(required=True, max_length=128)
    customer_id = Identifier(required=True)
