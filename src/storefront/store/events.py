"""Domain events for the Store aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Store")
class StoreOpened:
    __version__ = 1

    store_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    store_name = String(required=True, max_length=255)


@storefront.event(part_of="Store")
class StoreSaleRecorded:
    """A checkout included items sold by this store."""

    __version__ = 1

    store_id = Identifier(required=True)
    amount = Float(required=True)
    total_sales = Integer(required=True)
    total_revenue = Float(required=True)
    sold_at = DateTime(required=True)


@storefront.event(part_of="Store")
class WebsiteOrderRecorded:
    __version__ = 1

    store_id = Identifier(required=True)
    website_total_orders = Integer(required=True)
