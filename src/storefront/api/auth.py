"""Resolve the ``session`` cookie to the signed-in customer."""

from fastapi import Cookie
from protean.utils.globals import current_domain

from storefront import settings
from storefront.api.errors import AuthenticationRequired
from storefront.customer.session import CustomerSession


async def current_customer_id(session: str | None = Cookie(default=None, alias=settings.SESSION_COOKIE_NAME)) -> str:
    """FastAPI dependency: the id of the customer behind a valid session cookie."""
    customer_session = current_domain.repository_for(CustomerSession).find_valid(session)
    if customer_session is None:
        raise AuthenticationRequired()
    return str(customer_session.customer_id)
