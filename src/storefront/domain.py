"""Storefront bounded context: carts, checkout and multi-vendor orders.

Customers keep one cart that may hold products from many independent
stores. Checkout turns the cart into a single order, consumes stock from
inventory batches oldest-first and updates the customer and store counters,
all inside one unit of work.
"""

import structlog
from protean.domain import Domain

from storefront.utils.logging import configure_logging

configure_logging(log_dir="logs", log_file_prefix="storefront")

logger = structlog.get_logger(__name__)

storefront = Domain(name="storefront")
