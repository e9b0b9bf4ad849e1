"""Order numbers: ``ORD-<last 6 digits of epoch millis>-<4-digit sequence>``."""

from datetime import UTC, datetime

from storefront import settings
from storefront.shared.codes import next_free_code


def order_number_prefix(now=None) -> str:
    now = now or datetime.now(UTC)
    millis = int(now.timestamp() * 1000)
    return f"ORD-{str(millis)[-6:]}"


def generate_order_number(repo, now=None) -> str:
    """Pick an unused order number, starting from the current order count.

    The sequence wraps at 10000 so it always renders as four digits.
    """
    prefix = order_number_prefix(now)
    return next_free_code(
        build=lambda seq: f"{prefix}-{seq % 10000:04d}",
        is_taken=repo.number_taken,
        start=repo.count() + 1,
        attempts=settings.CODE_GENERATION_ATTEMPTS,
        field="order_number",
    )
