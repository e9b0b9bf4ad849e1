"""Repository for the Order aggregate."""

from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus

_IN_PROGRESS = {OrderStatus.PENDING.value, OrderStatus.CONFIRMED.value, OrderStatus.PROCESSING.value}


@storefront.repository(part_of=Order)
class OrderRepository:
    def count(self) -> int:
        return self._dao.query.all().total

    def number_taken(self, order_number) -> bool:
        return self._dao.query.filter(order_number=order_number).all().total > 0

    def owned_by(self, order_id, customer_id) -> Order | None:
        """The order when it exists and belongs to the customer, else None."""
        results = self._dao.query.filter(id=str(order_id), customer_id=str(customer_id)).all()
        return results.items[0] if results.items else None

    def for_customer(self, customer_id, statuses=None) -> list[Order]:
        """A customer's orders, newest first, optionally narrowed to some statuses."""
        orders = self._dao.query.filter(customer_id=str(customer_id)).all().items
        if statuses:
            orders = [o for o in orders if o.status in statuses]
        return sorted(orders, key=lambda o: o.created_at, reverse=True)

    def stats_for_customer(self, customer_id) -> dict:
        orders = self.for_customer(customer_id)
        return {
            "totalOrders": len(orders),
            "totalSpent": round(sum(o.total_amount for o in orders), 2),
            "completedOrders": sum(1 for o in orders if o.status == OrderStatus.DELIVERED.value),
            "cancelledOrders": sum(1 for o in orders if o.status == OrderStatus.CANCELLED.value),
            "pendingOrders": sum(1 for o in orders if o.status in _IN_PROGRESS),
        }
