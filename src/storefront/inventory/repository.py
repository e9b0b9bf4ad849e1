"""Repositories for the Product and InventoryBatch aggregates."""

from storefront.domain import storefront
from storefront.inventory.batch import BatchStatus, InventoryBatch
from storefront.inventory.product import Product


@storefront.repository(part_of=Product)
class ProductRepository:
    def find(self, product_id):
        """Return the product, or None when it does not exist."""
        results = self._dao.query.filter(id=str(product_id)).all()
        return results.items[0] if results.items else None

    def sku_taken(self, sku) -> bool:
        return self._dao.query.filter(sku=sku).all().total > 0

    def count_for_owner(self, owner_id) -> int:
        return self._dao.query.filter(owner_id=str(owner_id)).all().total

    def for_store(self, store_id) -> list[Product]:
        return self._dao.query.filter(store_id=str(store_id)).all().items


@storefront.repository(part_of=InventoryBatch)
class InventoryBatchRepository:
    def sellable_for_product(self, product_id) -> list[InventoryBatch]:
        """Active batches of a product that still hold stock, oldest first."""
        results = self._dao.query.filter(product_id=str(product_id), status=BatchStatus.ACTIVE.value).all()
        batches = [b for b in results.items if b.quantity_remaining > 0]
        return sorted(batches, key=lambda b: b.date_received)

    def for_product(self, product_id) -> list[InventoryBatch]:
        results = self._dao.query.filter(product_id=str(product_id)).all()
        return sorted(results.items, key=lambda b: b.date_received)

    def batch_code_taken(self, batch_code) -> bool:
        return self._dao.query.filter(batch_code=batch_code).all().total > 0

    def count_for_product(self, product_id) -> int:
        return self._dao.query.filter(product_id=str(product_id)).all().total
