"""Pydantic request/response schemas for the storefront API.

These are external contracts: JSON uses camelCase keys, while the Python
side keeps snake_case attribute names. They are separate from the internal
Protean commands.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class ShippingAddressSchema(ApiModel):
    phone: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None


class CreateOrderRequest(ApiModel):
    cart_id: str
    shipping_address: ShippingAddressSchema = Field(default_factory=ShippingAddressSchema)
    customer_notes: str | None = Field(default=None, max_length=500)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "cartId": "6f1c2a3b-0d4e-4f5a-9b8c-7d6e5f4a3b2c",
                    "shippingAddress": {
                        "phone": "08012345678",
                        "city": "Ikeja",
                        "state": "Lagos",
                    },
                    "customerNotes": "Please call before delivery",
                }
            ]
        },
    )


class UpdateOrderStatusRequest(ApiModel):
    status: str
    note: str = ""


class CancelOrderRequest(ApiModel):
    reason: str = Field(min_length=1, max_length=500)


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(ApiModel):
    product_id: str | None = None
    quantity: int = 1
    notes: str | None = Field(default=None, max_length=200)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={"examples": [{"productId": "prod-001", "quantity": 2}]},
    )


class UpdateCartItemRequest(ApiModel):
    quantity: int


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class StatusResponse(ApiModel):
    success: bool = True
    message: str = "ok"