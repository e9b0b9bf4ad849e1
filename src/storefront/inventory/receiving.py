"""Listing products and receiving stock: commands and handlers.

Every delivery becomes an ``InventoryBatch`` and raises the product's stock
by the same amount in one unit of work, so the batch records and the
product's aggregate figure start out in agreement.
"""

from datetime import UTC, datetime

import structlog
from protean import handle
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront import settings
from storefront.domain import storefront
from storefront.inventory.batch import InventoryBatch, batch_code_prefix
from storefront.inventory.product import Product, sku_prefix
from storefront.shared.codes import next_free_code

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class ListProduct:
    """Put a new product on sale, optionally with an opening batch of stock."""

    owner_id = Identifier(required=True)
    store_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    selling_price = Float(required=True, min_value=0.0)
    sku = String(max_length=100)
    category = String(max_length=100)
    description = Text()
    brand = String(max_length=100)
    unit_of_measure = String(max_length=20, default="Piece")
    cost_price = Float(default=0.0)
    reorder_level = Integer(default=5)
    image = String(max_length=1000)
    web_visibility = Boolean(default=True)
    initial_quantity = Integer(default=0, min_value=0)
    supplier = String(max_length=255)


@storefront.command(part_of="InventoryBatch")
class ReceiveStock:
    """Record a delivery of ``quantity`` units for an existing product."""

    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    cost_price = Float()
    selling_price = Float()
    date_received = DateTime()
    expiry_date = DateTime()
    supplier = String(max_length=255)
    notes = Text()
    batch_code = String(max_length=100)


def _generate_sku(repo, owner_id, category):
    prefix = sku_prefix(category)
    return next_free_code(
        build=lambda seq: f"{prefix}-{seq:03d}",
        is_taken=repo.sku_taken,
        start=repo.count_for_owner(owner_id) + 1,
        attempts=settings.CODE_GENERATION_ATTEMPTS,
        field="sku",
    )


def _generate_batch_code(repo, product, date_received):
    prefix = batch_code_prefix(product.sku, date_received)
    return next_free_code(
        build=lambda seq: f"{prefix}-B{seq:03d}",
        is_taken=repo.batch_code_taken,
        start=repo.count_for_product(product.id) + 1,
        attempts=settings.CODE_GENERATION_ATTEMPTS,
        field="batch_code",
    )


def _receive_batch(product, quantity, date_received=None, batch_code=None, **details):
    """Create a batch for ``product`` and raise its stock by ``quantity``."""
    batch_repo = current_domain.repository_for(InventoryBatch)
    date_received = date_received or datetime.now(UTC)

    batch = InventoryBatch.receive(
        product_id=str(product.id),
        owner_id=str(product.owner_id),
        batch_code=batch_code or _generate_batch_code(batch_repo, product, date_received),
        quantity_in=quantity,
        date_received=date_received,
        cost_price=details.pop("cost_price", None) or product.cost_price,
        selling_price=details.pop("selling_price", None) or product.selling_price,
        **details,
    )
    product.add_stock(quantity)
    batch_repo.add(batch)

    logger.info(
        "stock_received",
        product_id=str(product.id),
        batch_code=batch.batch_code,
        quantity=quantity,
    )
    return batch


@storefront.command_handler(part_of=Product)
class ListProductHandler:
    @handle(ListProduct)
    def list_product(self, command):
        repo = current_domain.repository_for(Product)

        product = Product.create(
            owner_id=command.owner_id,
            store_id=command.store_id,
            product_name=command.product_name,
            sku=command.sku or _generate_sku(repo, command.owner_id, command.category),
            selling_price=command.selling_price,
            category=command.category,
            description=command.description,
            brand=command.brand,
            unit_of_measure=command.unit_of_measure or "Piece",
            cost_price=command.cost_price or 0.0,
            reorder_level=command.reorder_level if command.reorder_level is not None else 5,
            image=command.image,
            web_visibility=command.web_visibility,
        )

        if command.initial_quantity:
            _receive_batch(product, command.initial_quantity, supplier=command.supplier)

        repo.add(product)
        return str(product.id)


@storefront.command_handler(part_of=InventoryBatch)
class ReceiveStockHandler:
    @handle(ReceiveStock)
    def receive_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)

        batch = _receive_batch(
            product,
            command.quantity,
            date_received=command.date_received,
            batch_code=command.batch_code,
            cost_price=command.cost_price,
            selling_price=command.selling_price,
            expiry_date=command.expiry_date,
            supplier=command.supplier,
            notes=command.notes,
        )
        repo.add(product)
        return str(batch.id)
