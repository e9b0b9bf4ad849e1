"""Order lifecycle after checkout: status updates, cancellation, payment, refunds."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, OrderStatus, UpdatedBy
from storefront.store.store import Store


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    note = String(max_length=500, default="")
    updated_by = String(max_length=20, default=UpdatedBy.CUSTOMER.value)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = String(required=True, max_length=500)


@storefront.command(part_of="Order")
class MarkOrderPaid:
    order_id = Identifier(required=True)
    transaction_id = String(max_length=255)
    reference = String(max_length=255)


@storefront.command(part_of="Order")
class RefundOrder:
    order_id = Identifier(required=True)
    refund_amount = Float(required=True, min_value=0.0)
    reason = String(max_length=500, default="")


def load_customer_order(order_id, customer_id):
    order = current_domain.repository_for(Order).owned_by(order_id, customer_id)
    if order is None:
        raise ObjectNotFoundError({"order": ["Order not found"]})
    return order


@storefront.command_handler(part_of=Order)
class OrderLifecycleHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        order = load_customer_order(command.order_id, command.customer_id)
        order.update_status(command.status, command.note or "", command.updated_by)

        # A delivered order counts as a visit to each store's website
        if order.status == OrderStatus.DELIVERED.value:
            store_repo = current_domain.repository_for(Store)
            for group in order.stores:
                store = store_repo.get(group.store_id)
                store.record_website_visit()
                store_repo.add(store)

        current_domain.repository_for(Order).add(order)
        return order.status

    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_customer_order(command.order_id, command.customer_id)
        order.cancel(command.reason, UpdatedBy.CUSTOMER.value)
        current_domain.repository_for(Order).add(order)

    @handle(MarkOrderPaid)
    def mark_paid(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.mark_as_paid(command.transaction_id, command.reference)
        repo.add(order)

    @handle(RefundOrder)
    def refund_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.refund(command.refund_amount, command.reason or "")
        repo.add(order)
