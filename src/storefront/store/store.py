"""Store aggregate: an independent vendor selling through the storefront.

A store owns products, has contact details and branding that get frozen into
order snapshots, and keeps running sales counters. Stores that publish a
website also count orders that came through it.
"""

import re
from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront
from storefront.shared.money import round_money
from storefront.shared.snapshots import DEFAULT_PRIMARY_COLOR, DEFAULT_SECONDARY_COLOR, StoreSnapshot
from storefront.store.events import StoreOpened, StoreSaleRecorded, WebsiteOrderRecorded


class WebsiteStatus(Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    SUSPENDED = "suspended"


def slugify(value):
    return re.sub(r"[^a-z0-9]+", "-", (value or "").lower()).strip("-")


@storefront.aggregate
class Store:
    owner_id = Identifier(required=True)
    store_name = String(required=True, max_length=255)
    store_phone = String(max_length=30)
    store_email = String(max_length=255)

    # Address
    street = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    country = String(max_length=100, default="Nigeria")

    # Online presence
    website = String(max_length=500)
    instagram = String(max_length=255)
    facebook = String(max_length=255)
    twitter = String(max_length=255)
    tiktok = String(max_length=255)
    whatsapp = String(max_length=30)

    # Branding
    logo = String(max_length=1000)
    primary_color = String(max_length=20, default=DEFAULT_PRIMARY_COLOR)
    secondary_color = String(max_length=20, default=DEFAULT_SECONDARY_COLOR)

    # Hosted storefront website
    website_path = String(max_length=255)
    website_enabled = Boolean(default=False)
    website_status = String(choices=WebsiteStatus, default=WebsiteStatus.DRAFT.value)
    website_total_views = Integer(default=0, min_value=0)
    website_total_orders = Integer(default=0, min_value=0)
    website_last_visit = DateTime()

    # Sales metrics
    total_sales = Integer(default=0, min_value=0)
    total_revenue = Float(default=0.0, min_value=0.0)
    last_sale_date = DateTime()

    created_at = DateTime(default=lambda: datetime.now(UTC))

    @classmethod
    def open(cls, owner_id, store_name, **details):
        store = cls(owner_id=owner_id, store_name=store_name, **details)
        store.raise_(StoreOpened(store_id=str(store.id), owner_id=str(owner_id), store_name=store_name))
        return store

    @property
    def slug(self):
        """Public slug: the website path when one is set, else derived from the name."""
        return self.website_path or slugify(self.store_name)

    def snapshot(self):
        """Freeze the store's current details for embedding in an order."""
        return StoreSnapshot(
            store_name=self.store_name,
            store_slug=self.slug,
            store_phone=self.store_phone,
            store_email=self.store_email,
            street=self.street,
            city=self.city,
            state=self.state,
            country=self.country or "Nigeria",
            website=self.website,
            instagram=self.instagram,
            facebook=self.facebook,
            twitter=self.twitter,
            tiktok=self.tiktok,
            whatsapp=self.whatsapp or self.store_phone,
            logo=self.logo,
            primary_color=self.primary_color or DEFAULT_PRIMARY_COLOR,
            secondary_color=self.secondary_color or DEFAULT_SECONDARY_COLOR,
        )

    def update_sales_metrics(self, amount, sold_at=None):
        """Count one sale worth ``amount`` towards this store's totals."""
        sold_at = sold_at or datetime.now(UTC)
        self.total_sales = (self.total_sales or 0) + 1
        self.total_revenue = round_money((self.total_revenue or 0.0) + amount)
        self.last_sale_date = sold_at

        self.raise_(
            StoreSaleRecorded(
                store_id=str(self.id),
                amount=amount,
                total_sales=self.total_sales,
                total_revenue=self.total_revenue,
                sold_at=sold_at,
            )
        )

    def record_website_order(self, at=None):
        """Bump the website order counter. No-op for stores without a live website."""
        if not self.website_enabled:
            return False

        self.website_total_orders = (self.website_total_orders or 0) + 1
        self.website_last_visit = at or datetime.now(UTC)
        self.raise_(WebsiteOrderRecorded(store_id=str(self.id), website_total_orders=self.website_total_orders))
        return True

    def record_website_visit(self, at=None):
        if self.website_enabled:
            self.website_last_visit = at or datetime.now(UTC)
