"""Stock validation for a cart against live product records.

Validation reads products and never writes. It reports every problem line
rather than stopping at the first, so a customer sees the full list of
items to fix before checking out.
"""

from dataclasses import dataclass, field

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.inventory.product import Product

PRODUCT_UNAVAILABLE = "Product no longer available"
INSUFFICIENT_STOCK = "Insufficient stock"


@dataclass(frozen=True)
class UnavailableItem:
    product_id: str
    product_name: str | None
    store_id: str
    quantity: int
    price: float
    reason: str
    available_quantity: int | None = None

    def to_dict(self) -> dict:
        data = {
            "product": self.product_id,
            "productName": self.product_name,
            "store": self.store_id,
            "quantity": self.quantity,
            "price": self.price,
            "reason": self.reason,
        }
        if self.available_quantity is not None:
            data["availableQuantity"] = self.available_quantity
        return data


@dataclass(frozen=True)
class StockValidation:
    unavailable_items: tuple[UnavailableItem, ...] = field(default_factory=tuple)

    @property
    def is_valid(self) -> bool:
        return not self.unavailable_items


class StockUnavailableError(ValidationError):
    """Raised when checkout finds cart lines that cannot be fulfilled."""

    def __init__(self, unavailable_items):
        self.unavailable_items = tuple(unavailable_items)
        super().__init__({"items": ["Some items are no longer available"]})


def _unavailable(item, reason, available_quantity=None):
    snapshot = item.product_snapshot
    return UnavailableItem(
        product_id=str(item.product_id),
        product_name=snapshot.product_name if snapshot else None,
        store_id=str(item.store_id),
        quantity=item.quantity,
        price=item.price,
        reason=reason,
        available_quantity=available_quantity,
    )


def check_item(item, product) -> UnavailableItem | None:
    """Judge one cart line against its product (``None`` when the product is gone)."""
    if product is None or not product.is_available_online:
        return _unavailable(item, PRODUCT_UNAVAILABLE)
    if product.quantity_in_stock < item.quantity:
        return _unavailable(item, INSUFFICIENT_STOCK, available_quantity=product.quantity_in_stock)
    return None


def validate_stock(cart, products=None) -> StockValidation:
    """Check every cart line against the current product records.

    ``products`` maps product id to an already-loaded ``Product``; any line
    whose product is not in the map is looked up through the repository.
    """
    products = products if products is not None else {}
    repo = current_domain.repository_for(Product)

    problems = []
    for item in cart.items:
        key = str(item.product_id)
        if key not in products:
            products[key] = repo.find(key)
        problem = check_item(item, products[key])
        if problem is not None:
            problems.append(problem)

    return StockValidation(unavailable_items=tuple(problems))
