"""Application tests for listing products and receiving stock batches."""

import re
from datetime import UTC, datetime

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from storefront.inventory.batch import InventoryBatch
from storefront.inventory.product import Product
from storefront.inventory.receiving import ListProduct, ReceiveStock


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _list(store, **overrides):
    fields = {
        "owner_id": str(store.owner_id),
        "store_id": str(store.id),
        "product_name": "Tomato Paste 400g",
        "selling_price": 1200.0,
        "category": "Groceries",
    }
    fields.update(overrides)
    return _process(ListProduct(**fields))


class TestListProduct:
    def test_sku_generated_from_category(self, seed):
        store = seed.store(owner_id="owner-sku")
        product = current_domain.repository_for(Product).get(_list(store))
        assert product.sku == "GRO-001"

    def test_sku_sequence_follows_owner_product_count(self, seed):
        store = seed.store(owner_id="owner-sku")
        _list(store)
        second = current_domain.repository_for(Product).get(_list(store, product_name="Sardines"))
        assert second.sku == "GRO-002"

    def test_explicit_sku_is_kept(self, seed):
        store = seed.store()
        product = current_domain.repository_for(Product).get(_list(store, sku="CUSTOM-9"))
        assert product.sku == "CUSTOM-9"

    def test_initial_quantity_creates_opening_batch(self, seed):
        store = seed.store()
        product_id = _list(store, initial_quantity=12, supplier="Dangote Depot")

        product = current_domain.repository_for(Product).get(product_id)
        assert product.quantity_in_stock == 12
        assert product.total_stocked_quantity == 12

        [batch] = current_domain.repository_for(InventoryBatch).for_product(product_id)
        assert batch.quantity_in == 12
        assert batch.supplier == "Dangote Depot"
        assert re.fullmatch(r"GRO-\d{6}-B001", batch.batch_code)


class TestReceiveStock:
    def test_receiving_adds_stock_and_batch(self, seed):
        store = seed.store()
        product = seed.product(store, sku="ELE-001", stock=0, category="Electronics")

        batch_id = _process(
            ReceiveStock(
                product_id=str(product.id),
                quantity=8,
                cost_price=3000.0,
                date_received=datetime(2024, 3, 15, tzinfo=UTC),
            )
        )

        batch = current_domain.repository_for(InventoryBatch).get(batch_id)
        assert batch.batch_code == "ELE-240315-B001"
        assert batch.quantity_remaining == 8
        assert batch.cost_price == 3000.0
        assert batch.selling_price == product.selling_price

        product = current_domain.repository_for(Product).get(str(product.id))
        assert product.quantity_in_stock == 8

    def test_second_batch_same_day_gets_next_code(self, seed):
        store = seed.store()
        product = seed.product(store, sku="ELE-001", stock=0, category="Electronics")
        received = datetime(2024, 3, 15, tzinfo=UTC)

        _process(ReceiveStock(product_id=str(product.id), quantity=2, date_received=received))
        second_id = _process(ReceiveStock(product_id=str(product.id), quantity=3, date_received=received))

        assert current_domain.repository_for(InventoryBatch).get(second_id).batch_code == "ELE-240315-B002"

    def test_quantity_must_be_positive(self, seed):
        store = seed.store()
        product = seed.product(store)
        with pytest.raises(ValidationError):
            _process(ReceiveStock(product_id=str(product.id), quantity=0))
