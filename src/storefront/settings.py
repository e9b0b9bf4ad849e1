"""Runtime knobs read from the environment."""

import os

CART_EXPIRY_DAYS = int(os.environ.get("CART_EXPIRY_DAYS", "30"))
SESSION_TTL_DAYS = int(os.environ.get("SESSION_TTL_DAYS", "7"))

# Order numbers, SKUs and batch codes are probed this many times before giving up
CODE_GENERATION_ATTEMPTS = int(os.environ.get("CODE_GENERATION_ATTEMPTS", "10"))

SESSION_COOKIE_NAME = os.environ.get("SESSION_COOKIE_NAME", "session")
