"""Product aggregate: the live inventory record for something a store sells.

The product carries the aggregate stock figures. How those units are split
across received batches lives in ``InventoryBatch``; checkout keeps both in
step, consuming batches oldest-first and recording one sale per order line.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.inventory.events import LowStockReached, ProductListed, SaleRecorded, StockAdded
from storefront.shared.snapshots import ProductSnapshot


class ProductStatus(Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    DISCONTINUED = "Discontinued"


class UnitOfMeasure(Enum):
    PIECE = "Piece"
    PACK = "Pack"
    CARTON = "Carton"
    KG = "Kg"
    LITER = "Liter"
    METER = "Meter"
    BOX = "Box"
    DOZEN = "Dozen"
    OTHER = "Other"


class StockStatus(Enum):
    IN_STOCK = "In Stock"
    LOW_STOCK = "Low Stock"
    OUT_OF_STOCK = "Out of Stock"


def sku_prefix(category):
    """First three letters of the category, upper-cased (``ITM`` without one)."""
    return category[:3].upper() if category else "ITM"


@storefront.aggregate
class Product:
    owner_id = Identifier(required=True)
    store_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    category = String(max_length=100)
    sku = String(required=True, max_length=100, unique=True)
    description = Text()
    brand = String(max_length=100)
    unit_of_measure = String(choices=UnitOfMeasure, default=UnitOfMeasure.PIECE.value)

    quantity_in_stock = Integer(default=0, min_value=0)
    total_stocked_quantity = Integer(default=0, min_value=0)
    sold_quantity = Integer(default=0, min_value=0)
    reorder_level = Integer(default=5, min_value=0)

    cost_price = Float(default=0.0, min_value=0.0)
    selling_price = Float(required=True, min_value=0.0)

    image = String(max_length=1000)
    status = String(choices=ProductStatus, default=ProductStatus.ACTIVE.value)
    web_visibility = Boolean(default=True)

    created_at = DateTime(default=lambda: datetime.now(UTC))
    updated_at = DateTime()

    @invariant.post
    def total_stocked_covers_stock_and_sales(self):
        if (self.total_stocked_quantity or 0) < (self.quantity_in_stock or 0) + (self.sold_quantity or 0):
            raise ValidationError(
                {"total_stocked_quantity": ["Total stocked quantity cannot be less than stock on hand plus units sold"]}
            )

    @classmethod
    def create(
        cls,
        owner_id,
        store_id,
        product_name,
        sku,
        selling_price,
        quantity_in_stock=0,
        sold_quantity=0,
        total_stocked_quantity=0,
        **details,
    ):
        # A total that undercounts what is on hand and already sold is raised to match
        total = max(total_stocked_quantity or 0, quantity_in_stock + sold_quantity)
        product = cls(
            owner_id=owner_id,
            store_id=store_id,
            product_name=product_name,
            sku=sku,
            selling_price=selling_price,
            quantity_in_stock=quantity_in_stock,
            sold_quantity=sold_quantity,
            total_stocked_quantity=total,
            **details,
        )
        product.raise_(
            ProductListed(
                product_id=str(product.id),
                store_id=str(store_id),
                sku=sku,
                product_name=product_name,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    @property
    def is_available_online(self):
        return bool(self.web_visibility) and self.status == ProductStatus.ACTIVE.value

    @property
    def is_low_stock(self):
        return self.quantity_in_stock <= self.reorder_level

    @property
    def stock_status(self):
        if self.quantity_in_stock == 0:
            return StockStatus.OUT_OF_STOCK.value
        if self.is_low_stock:
            return StockStatus.LOW_STOCK.value
        return StockStatus.IN_STOCK.value

    def snapshot(self):
        return ProductSnapshot(
            product_name=self.product_name,
            sku=self.sku,
            image=self.image,
            category=self.category,
            unit_of_measure=self.unit_of_measure,
        )

    # -------------------------------------------------------------------
    # Stock movements
    # -------------------------------------------------------------------
    def add_stock(self, quantity):
        """Receive ``quantity`` new units onto the shelf."""
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be greater than zero"]})

        with atomic_change(self):
            self.quantity_in_stock += quantity
            self.total_stocked_quantity += quantity
            self.updated_at = datetime.now(UTC)

        self.raise_(
            StockAdded(
                product_id=str(self.id),
                quantity=quantity,
                quantity_in_stock=self.quantity_in_stock,
            )
        )

    def record_sale(self, quantity):
        """Move ``quantity`` units from stock on hand to sold."""
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Sale quantity must be greater than zero"]})
        if quantity > self.quantity_in_stock:
            raise ValidationError(
                {"quantity": [f"Insufficient stock: {self.quantity_in_stock} available, {quantity} requested"]}
            )

        was_low = self.is_low_stock
        with atomic_change(self):
            self.quantity_in_stock -= quantity
            self.sold_quantity += quantity
            self.updated_at = datetime.now(UTC)

        self.raise_(
            SaleRecorded(
                product_id=str(self.id),
                quantity=quantity,
                quantity_in_stock=self.quantity_in_stock,
                sold_quantity=self.sold_quantity,
            )
        )

        if self.is_low_stock and not was_low:
            self.raise_(
                LowStockReached(
                    product_id=str(self.id),
                    quantity_in_stock=self.quantity_in_stock,
                    reorder_level=self.reorder_level,
                )
            )
