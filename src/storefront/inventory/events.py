"""Domain events for the Product and InventoryBatch aggregates."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductListed:
    __version__ = 1

    product_id = Identifier(required=True)
    store_id = Identifier(required=True)
    sku = String(required=True, max_length=100)
    product_name = String(required=True, max_length=255)


@storefront.event(part_of="Product")
class StockAdded:
    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    quantity_in_stock = Integer(required=True)


@storefront.event(part_of="Product")
class SaleRecorded:
    """Units left the shelf through a placed order."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    quantity_in_stock = Integer(required=True)
    sold_quantity = Integer(required=True)


@storefront.event(part_of="Product")
class LowStockReached:
    __version__ = 1

    product_id = Identifier(required=True)
    quantity_in_stock = Integer(required=True)
    reorder_level = Integer(required=True)


@storefront.event(part_of="InventoryBatch")
class BatchReceived:
    __version__ = 1

    batch_id = Identifier(required=True)
    product_id = Identifier(required=True)
    batch_code = String(required=True, max_length=100)
    quantity_in = Integer(required=True)
    date_received = DateTime(required=True)


@storefront.event(part_of="InventoryBatch")
class BatchSold:
    __version__ = 1

    batch_id = Identifier(required=True)
    product_id = Identifier(required=True)
    order_id = Identifier()
    quantity = Integer(required=True)
    quantity_remaining = Integer(required=True)


@storefront.event(part_of="InventoryBatch")
class BatchDepleted:
    __version__ = 1

    batch_id = Identifier(required=True)
    product_id = Identifier(required=True)
    batch_code = String(required=True, max_length=100)
