"""Nigerian phone numbers as accepted at checkout.

Numbers are either local (``0`` followed by ten digits) or international
(``+234`` followed by ten digits), and the first significant digit must be
7, 8 or 9 (mobile ranges).
"""

import re

NIGERIAN_PHONE_PATTERN = re.compile(r"^(\+234|0)[789]\d{9}$")


def normalize_phone(phone: str | None) -> str:
    """Strip all whitespace from a phone number."""
    return re.sub(r"\s+", "", phone or "")


def is_valid_nigerian_phone(phone: str | None) -> bool:
    return bool(NIGERIAN_PHONE_PATTERN.match(normalize_phone(phone)))
