"""Exception handlers mapping domain errors onto the storefront's JSON envelope.

Every error response has the shape ``{"success": false, "message": ...}``;
validation failures add ``errors`` and stock failures add
``unavailableItems``.
"""

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers as register_protean_handlers

from storefront.cart.validation import StockUnavailableError

logger = structlog.get_logger(__name__)


class AuthenticationRequired(Exception):
    def __init__(self, message="Unauthorized. Please sign in."):
        super().__init__(message)
        self.message = message


def first_message(messages, default="Request could not be processed"):
    """Pull the first human-readable message out of a Protean error payload."""
    if isinstance(messages, str):
        return messages
    if isinstance(messages, dict):
        for value in messages.values():
            found = first_message(value, default=None)
            if found:
                return found
    if isinstance(messages, list | tuple):
        for value in messages:
            found = first_message(value, default=None)
            if found:
                return found
    return default


def _envelope(status_code, message, **extra):
    return JSONResponse(status_code=status_code, content={"success": False, "message": message, **extra})


async def _validation_error(request: Request, exc: ValidationError):
    return _envelope(400, first_message(exc.messages), errors=exc.messages)


async def _stock_unavailable(request: Request, exc: StockUnavailableError):
    return _envelope(
        400,
        "Some items are no longer available",
        unavailableItems=[item.to_dict() for item in exc.unavailable_items],
    )


async def _not_found(request: Request, exc: ObjectNotFoundError):
    # ObjectNotFoundError carries its payload positionally, not as ``messages``
    return _envelope(404, first_message(exc.args[0] if exc.args else None, default="Not found"))


async def _authentication_required(request: Request, exc: AuthenticationRequired):
    return _envelope(401, exc.message)


async def _http_exception(request: Request, exc: HTTPException):
    return _envelope(exc.status_code, str(exc.detail))


def register_exception_handlers(app: FastAPI) -> None:
    """Install Protean's defaults, then the storefront's envelope on top."""
    register_protean_handlers(app)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(StockUnavailableError, _stock_unavailable)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(AuthenticationRequired, _authentication_required)
    app.add_exception_handler(HTTPException, _http_exception)
