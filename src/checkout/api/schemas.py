"""Pydantic request/response schemas for the checkout API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands.
"""

from pydantic import BaseModel, Field

_AMOUNT_PATTERN = r"^\d+(\.\d+)?$"


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemSchema(BaseModel):
    title: str
    sku: str | None = None
    quantity: int = Field(ge=1)
    unit_price: str = Field(pattern=_AMOUNT_PATTERN)
    promotion_total: str | None = None


class AdjustmentSchema(BaseModel):
    type: str  # tax, shipping, fee, promotion
    label: str | None = None
    amount: str
    included: bool = False


class PlaceOrderRequest(BaseModel):
    customer_id: str
    currency_code: str = Field(min_length=3, max_length=3)
    items: list[OrderItemSchema] = Field(min_length=1)
    adjustments: list[AdjustmentSchema] = []
    store_name: str | None = None
    email: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cust-001",
                    "currency_code": "USD",
                    "items": [{"title": "T-shirt", "sku": "TS-001", "quantity": 1, "unit_price": "19.99"}],
                    "store_name": "ShirtShop",
                }
            ]
        }
    }


class OrderIdResponse(BaseModel):
    order_id: str


class OrderResponse(BaseModel):
    order_id: str
    email: str | None = None
    total: str
    currency_code: str
    checkout_flow: str
    checkout_step: str | None = None
    payment_gateway_id: str | None = None
    payment_method_id: str | None = None
    billing_profile_id: str | None = None
    shipping_profile_id: str | None = None


# ---------------------------------------------------------------------------
# PayPal widget callbacks
# ---------------------------------------------------------------------------
class RemoteOrderIdResponse(BaseModel):
    id: str


class RedirectResponse(BaseModel):
    redirectUri: str


class OffsitePaymentResponse(BaseModel):
    payment_id: str
    redirectUri: str


class WidgetSettingsResponse(BaseModel):
    solution: str
    src: str
    onCreateUrl: str
    onApproveUrl: str
    clientToken: str | None = None


# ---------------------------------------------------------------------------
# Payment methods & payments
# ---------------------------------------------------------------------------
class CreatePaymentMethodRequest(BaseModel):
    order_id: str
    payment_gateway_id: str


class PaymentMethodIdResponse(BaseModel):
    payment_method_id: str


class CreatePaymentRequest(BaseModel):
    order_id: str


class PaymentIdResponse(BaseModel):
    payment_id: str


class AmountRequest(BaseModel):
    amount: str | None = Field(default=None, pattern=_AMOUNT_PATTERN)


class PaymentResponse(BaseModel):
    payment_id: str
    order_id: str
    state: str
    amount: str
    refunded_amount: str
    currency_code: str
    remote_id: str | None = None
    remote_state: str | None = None


# ---------------------------------------------------------------------------
# Gateway configuration
# ---------------------------------------------------------------------------
class ConfigureGatewayRequest(BaseModel):
    client_id: str
    secret: str
    label: str | None = None
    mode: str | None = Field(default=None, pattern="^(live|test)$")
    intent: str | None = Field(default=None, pattern="^(capture|authorize)$")
    shipping_preference: str | None = Field(
        default=None, pattern="^(no_shipping|get_from_file|set_provided_address)$"
    )
    payment_solution: str | None = Field(default=None, pattern="^(smart_payment_buttons|hosted_fields|redirect)$")
    update_billing_profile: bool | None = None
    update_shipping_profile: bool | None = None
    shipping_enabled: bool | None = None


class GatewayIdResponse(BaseModel):
    payment_gateway_id: str


class GatewayConfigResponse(BaseModel):
    payment_gateway_id: str
    label: str | None = None
    client_id: str
    mode: str
    intent: str
    shipping_preference: str
    payment_solution: str
    update_billing_profile: bool
    update_shipping_profile: bool
    shipping_enabled: bool
