"""Repository for the Cart aggregate."""

from storefront.cart.cart import Cart, CartStatus
from storefront.domain import storefront


@storefront.repository(part_of=Cart)
class CartRepository:
    def for_customer(self, customer_id) -> Cart | None:
        """The customer's cart, whatever its status, or None."""
        results = self._dao.query.filter(customer_id=str(customer_id)).all()
        return results.items[0] if results.items else None

    def active_carts(self) -> list[Cart]:
        return self._dao.query.filter(status=CartStatus.ACTIVE.value).all().items
