"""FastAPI routes for the checkout context.

The ``/paypal/checkout`` endpoints are called by the PayPal widget running
in the browser; the others are used by the storefront's checkout flow and
by administrators.

Routes that call PayPal are plain functions: FastAPI runs them in its
threadpool, so a slow PayPal round-trip does not hold up the event loop.
"""

import json

from fastapi import APIRouter, Body, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from checkout.api.schemas import (
    AmountRequest,
    ConfigureGatewayRequest,
    CreatePaymentMethodRequest,
    CreatePaymentRequest,
    GatewayConfigResponse,
    GatewayIdResponse,
    OffsitePaymentResponse,
    OrderIdResponse,
    OrderResponse,
    PaymentIdResponse,
    PaymentMethodIdResponse,
    PaymentResponse,
    PlaceOrderRequest,
    RedirectResponse,
    RemoteOrderIdResponse,
    WidgetSettingsResponse,
)
from checkout.domain import logger
from checkout.exceptions import HardDeclineError, OrderMismatchError, PaymentGatewayError, RemoteCallError
from checkout.gateway import sdk_for
from checkout.order.order import Order
from checkout.order.placement import PlaceOrder
from checkout.order.snapshot import remote_order_request
from checkout.payment.approval import approve_order
from checkout.payment.capture import CapturePayment
from checkout.payment.creation import CreatePayment
from checkout.payment.offsite import complete_offsite_payment
from checkout.payment.payment import Payment
from checkout.payment.refund import RefundPayment
from checkout.payment.void import VoidPayment
from checkout.payment_gateway.configuration import ConfigureGateway
from checkout.payment_gateway.payment_gateway import PaymentGateway
from checkout.payment_method.creation import CreatePaymentMethod
from checkout.widget.settings import build_widget_settings
from checkout.widget.solutions import capabilities_for

GENERIC_GATEWAY_ERROR = "We encountered an error processing your payment. Please check your details and try again."
HARD_DECLINE_ERROR = "Your payment was declined. Please try a different payment method."


def register_checkout_exception_handlers(app: FastAPI) -> None:
    """Map gateway failures to 402 without leaking PayPal's error details."""

    @app.exception_handler(PaymentGatewayError)
    async def payment_gateway_error_handler(request: Request, exc: PaymentGatewayError):
        logger.warning("payment_gateway_error", path=request.url.path, error=str(exc))
        message = HARD_DECLINE_ERROR if isinstance(exc, HardDeclineError) else GENERIC_GATEWAY_ERROR
        return JSONResponse(status_code=402, content={"error": message})

    @app.exception_handler(OrderMismatchError)
    async def order_mismatch_handler(request: Request, exc: OrderMismatchError):
        logger.warning("paypal_order_mismatch", order_id=exc.order_id, reason=exc.reason)
        return Response(status_code=400)


def _payment_response(payment) -> PaymentResponse:
    return PaymentResponse(
        payment_id=str(payment.id),
        order_id=str(payment.order_id),
        state=payment.state,
        amount=payment.amount.number,
        refunded_amount=payment.refunded_amount.number if payment.refunded_amount else "0",
        currency_code=payment.amount.currency_code,
        remote_id=payment.remote_id,
        remote_state=payment.remote_state,
    )


# ---------------------------------------------------------------------------
# PayPal widget callbacks
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/paypal/checkout", tags=["paypal-checkout"])


@checkout_router.post("/create/{payment_gateway_id}/{order_id}", response_model=RemoteOrderIdResponse)
def create_remote_order(payment_gateway_id: str, order_id: str):
    """Create the PayPal order the widget renders buttons / card fields for."""
    gateway = current_domain.repository_for(PaymentGateway).get(payment_gateway_id)
    order = current_domain.repository_for(Order).get(order_id)
    try:
        remote_order = sdk_for(gateway).create_order(remote_order_request(order, gateway))
    except RemoteCallError as exc:
        logger.error(
            "paypal_create_order_failed",
            order_id=order_id,
            status_code=exc.status_code,
            body=exc.body,
        )
        return Response(status_code=400)
    return RemoteOrderIdResponse(id=remote_order["id"])


@checkout_router.post("/approve/{payment_gateway_id}/{order_id}", response_model=RedirectResponse)
def approve_remote_order(payment_gateway_id: str, order_id: str, paypal_order: dict = Body(...)):
    """Approval callback; answers 400 with an empty body when the order does not match."""
    redirect_uri = approve_order(order_id, payment_gateway_id, paypal_order)
    return RedirectResponse(redirectUri=redirect_uri)


@checkout_router.get("/settings/{payment_gateway_id}/{order_id}", response_model=WidgetSettingsResponse)
def widget_settings(payment_gateway_id: str, order_id: str, commit: bool = False):
    gateway = current_domain.repository_for(PaymentGateway).get(payment_gateway_id)
    order = current_domain.repository_for(Order).get(order_id)
    settings = build_widget_settings(gateway, order, sdk_for(gateway), commit=commit)
    if settings is None:
        return Response(status_code=204)
    return WidgetSettingsResponse(**settings.to_dict())


@checkout_router.post("/offsite/{payment_gateway_id}/{order_id}", response_model=OffsitePaymentResponse)
def offsite_payment(payment_gateway_id: str, order_id: str):
    """Redirect solution: pay the approved order without a widget."""
    gateway = current_domain.repository_for(PaymentGateway).get(payment_gateway_id)
    if not capabilities_for(gateway.payment_solution).is_offsite:
        raise ValidationError({"payment_gateway_id": ["The gateway does not use the redirect solution"]})
    payment_id, redirect_uri = complete_offsite_payment(order_id)
    return OffsitePaymentResponse(payment_id=payment_id, redirectUri=redirect_uri)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderIdResponse)
async def place_order(body: PlaceOrderRequest) -> OrderIdResponse:
    command = PlaceOrder(
        customer_id=body.customer_id,
        currency_code=body.currency_code,
        items=json.dumps([item.model_dump() for item in body.items]),
        adjustments=json.dumps([adjustment.model_dump() for adjustment in body.adjustments]),
        store_name=body.store_name,
        email=body.email,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    return OrderResponse(
        order_id=str(order.id),
        email=order.email,
        total=order.total_price.number,
        currency_code=order.currency_code,
        checkout_flow=order.checkout_flow,
        checkout_step=order.checkout_step,
        payment_gateway_id=order.payment_gateway_id,
        payment_method_id=order.payment_method_id,
        billing_profile_id=order.billing_profile_id,
        shipping_profile_id=order.shipping_profile_id,
    )


# ---------------------------------------------------------------------------
# Payment methods
# ---------------------------------------------------------------------------
payment_method_router = APIRouter(prefix="/payment-methods", tags=["payment-methods"])


@payment_method_router.post("", status_code=201, response_model=PaymentMethodIdResponse)
async def create_payment_method(body: CreatePaymentMethodRequest) -> PaymentMethodIdResponse:
    """Payment step submitted with PayPal selected ("mark" flow)."""
    command = CreatePaymentMethod(order_id=body.order_id, payment_gateway_id=body.payment_gateway_id)
    result = current_domain.process(command, asynchronous=False)
    return PaymentMethodIdResponse(payment_method_id=result)


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("", status_code=201, response_model=PaymentIdResponse)
def create_payment(body: CreatePaymentRequest) -> PaymentIdResponse:
    result = current_domain.process(CreatePayment(order_id=body.order_id), asynchronous=False)
    return PaymentIdResponse(payment_id=result)


@payment_router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(payment_id: str) -> PaymentResponse:
    return _payment_response(current_domain.repository_for(Payment).get(payment_id))


@payment_router.post("/{payment_id}/capture", response_model=PaymentResponse)
def capture_payment(payment_id: str, body: AmountRequest | None = None) -> PaymentResponse:
    amount = body.amount if body else None
    current_domain.process(CapturePayment(payment_id=payment_id, amount=amount), asynchronous=False)
    return _payment_response(current_domain.repository_for(Payment).get(payment_id))


@payment_router.post("/{payment_id}/void", response_model=PaymentResponse)
def void_payment(payment_id: str) -> PaymentResponse:
    current_domain.process(VoidPayment(payment_id=payment_id), asynchronous=False)
    return _payment_response(current_domain.repository_for(Payment).get(payment_id))


@payment_router.post("/{payment_id}/refund", response_model=PaymentResponse)
def refund_payment(payment_id: str, body: AmountRequest | None = None) -> PaymentResponse:
    amount = body.amount if body else None
    current_domain.process(RefundPayment(payment_id=payment_id, amount=amount), asynchronous=False)
    return _payment_response(current_domain.repository_for(Payment).get(payment_id))


# ---------------------------------------------------------------------------
# Gateway configuration
# ---------------------------------------------------------------------------
gateway_router = APIRouter(prefix="/payment-gateways", tags=["payment-gateways"])


@gateway_router.put("/{payment_gateway_id}", response_model=GatewayIdResponse)
def configure_gateway(payment_gateway_id: str, body: ConfigureGatewayRequest) -> GatewayIdResponse:
    """Store the gateway configuration after checking the credentials with PayPal."""
    command = ConfigureGateway(payment_gateway_id=payment_gateway_id, **body.model_dump(exclude_none=True))
    result = current_domain.process(command, asynchronous=False)
    return GatewayIdResponse(payment_gateway_id=result)


@gateway_router.get("/{payment_gateway_id}", response_model=GatewayConfigResponse)
async def get_gateway(payment_gateway_id: str) -> GatewayConfigResponse:
    gateway = current_domain.repository_for(PaymentGateway).get(payment_gateway_id)
    return GatewayConfigResponse(
        payment_gateway_id=str(gateway.id),
        label=gateway.label,
        client_id=gateway.client_id,
        mode=gateway.mode,
        intent=gateway.intent,
        shipping_preference=gateway.shipping_preference,
        payment_solution=gateway.payment_solution,
        update_billing_profile=gateway.update_billing_profile,
        update_shipping_profile=gateway.update_shipping_profile,
        shipping_enabled=gateway.shipping_enabled,
    )
