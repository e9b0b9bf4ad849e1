"""PlaceOrder: turn a customer's cart into an order.

The whole checkout is one command handler and so one unit of work: the
order, the consumed batches, the products, the customer's figures, the
stores' figures and the emptied cart are committed together or not at all.
Everything that can reject the request is checked before anything is
changed.

Steps, in order:

1. Load the customer and their cart; an empty cart is rejected.
2. Validate every line against live stock.
3. Validate the shipping details (phone, city and state; Nigerian phone).
4. Snapshot products and stores into order lines and number the order.
5. Consume each line from the product's batches oldest-first, then record
   the sale on the product.
6. Fold the total into the customer's stats and each store's subtotal into
   that store's sales metrics.
7. Clear the cart.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.validation import StockUnavailableError, validate_stock
from storefront.customer.customer import Customer
from storefront.domain import storefront
from storefront.inventory.batch import InventoryBatch
from storefront.inventory.fifo import allocate_fifo
from storefront.inventory.product import Product
from storefront.order.numbering import generate_order_number
from storefront.order.order import (
    CustomerSnapshot,
    Order,
    OrderItem,
    OrderStatus,
    ShippingAddress,
    UpdatedBy,
)
from storefront.shared.phone import is_valid_nigerian_phone, normalize_phone
from storefront.store.store import Store

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    cart_id = Identifier(required=True)
    phone = String(max_length=30)
    city = String(max_length=100)
    state = String(max_length=100)
    postal_code = String(max_length=20)
    customer_notes = String(max_length=500)


def _shipping_address(customer, command):
    if not (command.phone and command.city and command.state):
        raise ValidationError({"shipping_address": ["Complete shipping address is required"]})

    phone = normalize_phone(command.phone)
    if not is_valid_nigerian_phone(phone):
        raise ValidationError({"phone": ["Invalid phone number format"]})

    return ShippingAddress(
        first_name=customer.first_name,
        last_name=customer.last_name,
        phone=phone,
        street=f"{command.city}, {command.state}",
        city=command.city,
        state=command.state,
        country="Nigeria",
        postal_code=command.postal_code,
    )


def _order_lines(cart, products, stores):
    return [
        OrderItem(
            product_id=str(item.product_id),
            product_snapshot=products[str(item.product_id)].snapshot(),
            quantity=item.quantity,
            price=item.price,
            subtotal=item.subtotal,
            store_id=str(item.store_id),
            store_snapshot=stores[str(item.store_id)].snapshot(),
            seller_id=str(stores[str(item.store_id)].owner_id),
        )
        for item in cart.items
    ]


def _consume_inventory(order, products):
    """Draw every line from its product's batches oldest-first, then record the sale."""
    batch_repo = current_domain.repository_for(InventoryBatch)
    product_repo = current_domain.repository_for(Product)

    for item in order.items:
        batches = {str(b.id): b for b in batch_repo.sellable_for_product(item.product_id)}
        plan = allocate_fifo(batches.values(), item.quantity)

        for allocation in plan.allocations:
            batch = batches[allocation.batch_id]
            batch.sell(allocation.quantity, order_id=order.id)
            batch_repo.add(batch)

        if plan.shortfall:
            logger.warning(
                "batch_shortfall",
                order_number=order.order_number,
                product_id=str(item.product_id),
                ordered=item.quantity,
                allocated=plan.allocated,
            )

        product = products[str(item.product_id)]
        product.record_sale(item.quantity)
        product_repo.add(product)


def _update_stores(order, stores):
    store_repo = current_domain.repository_for(Store)
    for group in order.stores:
        store = stores[group.store_id]
        store.update_sales_metrics(group.subtotal)
        store.record_website_order()
        store_repo.add(store)


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        customer_repo = current_domain.repository_for(Customer)
        cart_repo = current_domain.repository_for(Cart)
        order_repo = current_domain.repository_for(Order)

        customer = customer_repo.find(command.customer_id)
        if customer is None:
            raise ObjectNotFoundError({"customer": ["Customer not found"]})

        cart = cart_repo.for_customer(customer.id)
        if cart is None or str(cart.id) != str(command.cart_id) or cart.is_empty:
            raise ValidationError({"cart": ["Cart is empty"]})

        products = {}
        validation = validate_stock(cart, products)
        if not validation.is_valid:
            logger.info(
                "checkout_rejected_stock",
                cart_id=str(cart.id),
                unavailable=len(validation.unavailable_items),
            )
            raise StockUnavailableError(validation.unavailable_items)

        shipping_address = _shipping_address(customer, command)

        store_repo = current_domain.repository_for(Store)
        stores = {store_id: store_repo.get(store_id) for store_id in cart.unique_stores}

        order = Order.place(
            order_number=generate_order_number(order_repo),
            customer_id=str(customer.id),
            customer_snapshot=CustomerSnapshot(
                first_name=customer.first_name,
                last_name=customer.last_name,
                email=customer.email,
                phone=shipping_address.phone,
            ),
            shipping_address=shipping_address,
            lines=_order_lines(cart, products, stores),
            tax=cart.tax,
            shipping_fee=cart.shipping,
            discount=cart.discount,
            coupon_discount=cart.coupon_discount,
            coupon_code=cart.coupon_code,
            customer_notes=command.customer_notes,
        )
        order.add_timeline_event(OrderStatus.PENDING.value, "Order created", UpdatedBy.CUSTOMER.value)

        _consume_inventory(order, products)

        customer.update_shopping_stats(order.total_amount)
        customer_repo.add(customer)

        _update_stores(order, stores)

        cart.clear()
        cart_repo.add(cart)

        order_repo.add(order)

        logger.info(
            "order_placed",
            order_number=order.order_number,
            customer_id=str(customer.id),
            total_amount=order.total_amount,
            stores=len(stores),
        )
        return str(order.id)
