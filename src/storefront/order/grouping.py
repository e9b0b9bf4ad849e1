"""Per-store view of an order's items.

An order's ``stores`` list is never stored on its own: it is derived from
the items every time it is read, so it cannot drift from them.
"""

from collections import OrderedDict
from dataclasses import dataclass

from storefront.shared.money import round_money


@dataclass(frozen=True)
class StoreGroup:
    store_id: str
    store_name: str | None
    item_count: int
    subtotal: float
    status: str
    store_snapshot: object = None


def group_by_store(items) -> list[StoreGroup]:
    """One group per distinct store, in the order stores first appear.

    The group status is the status of the store's first item.
    """
    groups = OrderedDict()
    for item in items:
        key = str(item.store_id)
        groups.setdefault(key, []).append(item)

    result = []
    for store_id, store_items in groups.items():
        first = store_items[0]
        snapshot = first.store_snapshot
        result.append(
            StoreGroup(
                store_id=store_id,
                store_name=snapshot.store_name if snapshot else None,
                item_count=sum(i.quantity for i in store_items),
                subtotal=round_money(sum(i.subtotal for i in store_items)),
                status=first.item_status,
                store_snapshot=snapshot,
            )
        )
    return result
