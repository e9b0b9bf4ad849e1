from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


class Seed:
    """Persist customers, stores, products and batches straight through repositories."""

    def customer(self, first_name="Ada", last_name="Okafor", email=None, phone="08031234567"):
        from protean import current_domain
        from storefront.customer.customer import Customer

        customer = Customer.register(
            first_name=first_name,
            last_name=last_name,
            email=email or f"{first_name.lower()}.{uuid4().hex[:8]}@example.com",
            phone=phone,
        )
        current_domain.repository_for(Customer).add(customer)
        return customer

    def session(self, customer, days=7, active=True):
        from protean import current_domain
        from storefront.customer.session import CustomerSession

        session = CustomerSession.start(customer_id=str(customer.id), ttl_days=days)
        if not active:
            session.end()
        current_domain.repository_for(CustomerSession).add(session)
        return session

    def store(self, store_name="Mama Put Provisions", owner_id="owner-001", **details):
        from protean import current_domain
        from storefront.store.store import Store

        details.setdefault("store_phone", "08020000001")
        details.setdefault("store_email", "hello@mamaput.ng")
        details.setdefault("city", "Ikeja")
        details.setdefault("state", "Lagos")
        store = Store.open(owner_id=owner_id, store_name=store_name, **details)
        current_domain.repository_for(Store).add(store)
        return store

    def product(self, store, product_name="Ofada Rice 5kg", sku=None, price=4500.0, stock=10, **details):
        from protean import current_domain
        from storefront.inventory.product import Product

        product = Product.create(
            owner_id=str(store.owner_id),
            store_id=str(store.id),
            product_name=product_name,
            sku=sku or f"GRO-{uuid4().hex[:6].upper()}",
            selling_price=price,
            quantity_in_stock=stock,
            category=details.pop("category", "Groceries"),
            **details,
        )
        current_domain.repository_for(Product).add(product)
        return product

    def batch(self, product, quantity, days_ago=0, code=None, **details):
        from protean import current_domain
        from storefront.inventory.batch import InventoryBatch

        received = datetime.now(UTC) - timedelta(days=days_ago)
        batch = InventoryBatch.receive(
            product_id=str(product.id),
            owner_id=str(product.owner_id),
            batch_code=code or f"{product.sku}-{days_ago}-{quantity}",
            quantity_in=quantity,
            date_received=received,
            **details,
        )
        current_domain.repository_for(InventoryBatch).add(batch)
        return batch

    def cart_with(self, customer, *lines):
        """Fill the customer's cart: each line is ``(product, quantity)``."""
        from protean import current_domain
        from storefront.cart.items import AddToCart

        cart_id = None
        for product, quantity in lines:
            cart_id = current_domain.process(
                AddToCart(customer_id=str(customer.id), product_id=str(product.id), quantity=quantity),
                asynchronous=False,
            )
        return cart_id


@pytest.fixture
def seed():
    return Seed()
