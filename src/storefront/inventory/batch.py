"""InventoryBatch aggregate: one delivery of a product, sold down FIFO.

Every batch remembers how much came in and how much of it has been sold.
``quantity_remaining`` and ``status`` are never set directly; they follow from
the quantities and the expiry date after each change.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.inventory.events import BatchDepleted, BatchReceived, BatchSold


class BatchStatus(Enum):
    ACTIVE = "active"
    DEPLETED = "depleted"
    EXPIRED = "expired"
    DAMAGED = "damaged"


def batch_code_prefix(sku, date_received):
    """``<first SKU segment>-<YYMMDD>``, e.g. ``ELE-240315`` for SKU ``ELE-001``."""
    product_code = (sku or "").split("-")[0] or "BTH"
    return f"{product_code}-{date_received.strftime('%y%m%d')}"


@storefront.aggregate
class InventoryBatch:
    product_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    batch_code = String(required=True, max_length=100, unique=True)

    quantity_in = Integer(required=True, min_value=0)
    quantity_sold = Integer(default=0, min_value=0)
    quantity_remaining = Integer(default=0, min_value=0)

    cost_price = Float(default=0.0, min_value=0.0)
    selling_price = Float(default=0.0, min_value=0.0)

    date_received = DateTime(required=True)
    expiry_date = DateTime()
    supplier = String(max_length=255)
    notes = Text()
    status = String(choices=BatchStatus, default=BatchStatus.ACTIVE.value)

    @invariant.post
    def remaining_matches_quantities(self):
        expected = max((self.quantity_in or 0) - (self.quantity_sold or 0), 0)
        if self.quantity_remaining != expected:
            raise ValidationError({"quantity_remaining": ["Remaining quantity must equal quantity in minus quantity sold"]})

    @invariant.post
    def cannot_sell_more_than_received(self):
        if (self.quantity_sold or 0) > (self.quantity_in or 0):
            raise ValidationError({"quantity_sold": ["Cannot sell more than the batch received"]})

    @classmethod
    def receive(cls, product_id, owner_id, batch_code, quantity_in, date_received=None, **details):
        date_received = date_received or datetime.now(UTC)
        batch = cls(
            product_id=product_id,
            owner_id=owner_id,
            batch_code=batch_code,
            quantity_in=quantity_in,
            quantity_sold=0,
            quantity_remaining=quantity_in,
            date_received=date_received,
            status=BatchStatus.ACTIVE.value,
            **details,
        )
        batch._refresh_status()
        batch.raise_(
            BatchReceived(
                batch_id=str(batch.id),
                product_id=str(product_id),
                batch_code=batch_code,
                quantity_in=quantity_in,
                date_received=date_received,
            )
        )
        return batch

    @property
    def is_expired(self):
        return self.expiry_date is not None and self.expiry_date < datetime.now(UTC)

    @property
    def is_sellable(self):
        return self.status == BatchStatus.ACTIVE.value and self.quantity_remaining > 0

    def _refresh_status(self):
        # Damaged is set by hand and sticks
        if self.status == BatchStatus.DAMAGED.value:
            return
        if self.quantity_remaining <= 0:
            self.status = BatchStatus.DEPLETED.value
        elif self.is_expired:
            self.status = BatchStatus.EXPIRED.value
        else:
            self.status = BatchStatus.ACTIVE.value

    def sell(self, quantity, order_id=None):
        """Take ``quantity`` units out of this batch, optionally on behalf of an order."""
        if quantity is None or quantity <= 0:
            raise ValidationError({"quantity": ["Sale quantity must be greater than zero"]})
        if quantity > self.quantity_remaining:
            raise ValidationError(
                {"quantity": [f"Batch {self.batch_code} has only {self.quantity_remaining} units remaining"]}
            )

        with atomic_change(self):
            self.quantity_sold += quantity
            self.quantity_remaining = max(self.quantity_in - self.quantity_sold, 0)
            self._refresh_status()

        self.raise_(
            BatchSold(
                batch_id=str(self.id),
                product_id=str(self.product_id),
                order_id=str(order_id) if order_id else None,
                quantity=quantity,
                quantity_remaining=self.quantity_remaining,
            )
        )
        if self.status == BatchStatus.DEPLETED.value:
            self.raise_(
                BatchDepleted(
                    batch_id=str(self.id),
                    product_id=str(self.product_id),
                    batch_code=self.batch_code,
                )
            )

    def mark_damaged(self):
        self.status = BatchStatus.DAMAGED.value
