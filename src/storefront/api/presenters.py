"""Render aggregates as the camelCase JSON documents clients expect."""

from pydantic.alias_generators import to_camel


def camelize(data):
    if data is None:
        return None
    return {to_camel(key): value for key, value in data.items()}


def _vo(value_object):
    return camelize(value_object.to_dict()) if value_object is not None else None


def store_group(group) -> dict:
    return {
        "store": group.store_id,
        "storeName": group.store_name,
        "itemCount": group.item_count,
        "subtotal": group.subtotal,
        "status": group.status,
        "storeSnapshot": _vo(group.store_snapshot),
    }


def order_item(item) -> dict:
    return {
        "_id": str(item.id),
        "product": str(item.product_id),
        "productSnapshot": _vo(item.product_snapshot),
        "quantity": item.quantity,
        "price": item.price,
        "subtotal": item.subtotal,
        "store": str(item.store_id),
        "storeSnapshot": _vo(item.store_snapshot),
        "seller": str(item.seller_id) if item.seller_id else None,
        "itemStatus": item.item_status,
    }


def timeline_event(event) -> dict:
    return {
        "status": event.status,
        "timestamp": event.timestamp,
        "note": event.note,
        "updatedBy": event.updated_by,
    }


def order_summary(order) -> dict:
    return {
        "_id": str(order.id),
        "orderNumber": order.order_number,
        "totalAmount": order.total_amount,
        "itemCount": order.item_count,
        "status": order.status,
        "stores": [store_group(g) for g in order.stores],
    }


def order_detail(order) -> dict:
    return {
        **order_summary(order),
        "customer": str(order.customer_id),
        "customerSnapshot": _vo(order.customer_snapshot),
        "items": [order_item(i) for i in order.items],
        "subtotal": order.subtotal,
        "tax": order.tax,
        "shippingFee": order.shipping_fee,
        "discount": order.discount,
        "couponDiscount": order.coupon_discount,
        "couponCode": order.coupon_code,
        "shippingAddress": _vo(order.shipping_address),
        "paymentInfo": _vo(order.payment_info),
        "timeline": [timeline_event(e) for e in order.sorted_timeline()],
        "customerNotes": order.customer_notes,
        "orderSource": order.order_source,
        "isMultiVendor": order.is_multi_vendor,
        "isPaid": order.is_paid,
        "canBeCancelled": order.can_be_cancelled,
        "canBeRefunded": order.can_be_refunded,
        "cancellation": {
            "reason": order.cancellation_reason,
            "cancelledBy": order.cancelled_by,
            "cancelledAt": order.cancelled_at,
        },
        "tracking": {"shippedAt": order.shipped_at, "deliveredAt": order.delivered_at},
        "createdAt": order.created_at,
        "updatedAt": order.updated_at,
    }


def cart_item(item) -> dict:
    return {
        "_id": str(item.id),
        "product": str(item.product_id),
        "productSnapshot": _vo(item.product_snapshot),
        "quantity": item.quantity,
        "price": item.price,
        "subtotal": item.subtotal,
        "store": str(item.store_id),
        "storeSnapshot": {"storeName": item.store_name, "storeSlug": item.store_slug},
        "addedAt": item.added_at,
        "notes": item.notes,
    }


def cart(cart) -> dict:
    return {
        "_id": str(cart.id),
        "customer": str(cart.customer_id),
        "items": [cart_item(i) for i in cart.items],
        "subtotal": cart.subtotal,
        "tax": cart.tax,
        "shipping": cart.shipping,
        "discount": cart.discount,
        "couponCode": cart.coupon_code,
        "couponDiscount": cart.coupon_discount,
        "total": cart.total,
        "itemCount": cart.item_count,
        "status": cart.status,
        "expiresAt": cart.expires_at,
        "lastUpdated": cart.last_updated,
        "hasMultipleStores": cart.has_multiple_stores,
    }
