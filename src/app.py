"""PayPal Checkout FastAPI application.

Serves the endpoints the PayPal widget calls back into (create, approve,
widget settings) together with the checkout flow's payment operations.
Every request runs inside the checkout domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload

Environment:
    PAYPAL_CLIENT_ID / PAYPAL_SECRET   credentials; when set, PayPal is called
                                       for real and a gateway is registered
    PAYPAL_GATEWAY_ID                  id of that gateway (default "paypal")
    PAYPAL_MODE                        live | test (default test)
    PAYPAL_INTENT                      capture | authorize (default capture)
    PAYPAL_SHIPPING_PREFERENCE         no_shipping | get_from_file | set_provided_address
    PAYPAL_PAYMENT_SOLUTION            smart_payment_buttons | hosted_fields | redirect
    LOG_LEVEL, LOG_JSON                logging output
"""

import os

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the domain.toml overlay.
from checkout.domain import checkout
from checkout.utils.logging import configure_logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

configure_logging(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    json_logs=os.environ.get("LOG_JSON", "").lower() in ("1", "true", "yes"),
)
checkout.init()


# ---------------------------------------------------------------------------
# PayPal wiring
# ---------------------------------------------------------------------------
def _install_paypal() -> str | None:
    """Use the real PayPal API when credentials are configured.

    Without credentials the in-memory fake processor stays installed.
    """
    client_id = os.environ.get("PAYPAL_CLIENT_ID")
    secret = os.environ.get("PAYPAL_SECRET")
    if not client_id or not secret:
        return None

    from checkout.gateway import set_sdk_factory
    from checkout.gateway.factory import CheckoutSdkFactory
    from checkout.payment_gateway.configuration import ConfigureGateway

    set_sdk_factory(CheckoutSdkFactory())

    gateway_id = os.environ.get("PAYPAL_GATEWAY_ID", "paypal")
    settings = {
        "mode": os.environ.get("PAYPAL_MODE"),
        "intent": os.environ.get("PAYPAL_INTENT"),
        "shipping_preference": os.environ.get("PAYPAL_SHIPPING_PREFERENCE"),
        "payment_solution": os.environ.get("PAYPAL_PAYMENT_SOLUTION"),
    }
    with checkout.domain_context():
        checkout.process(
            ConfigureGateway(
                payment_gateway_id=gateway_id,
                client_id=client_id,
                secret=secret,
                verify_credentials=False,
                **{key: value for key, value in settings.items() if value},
            ),
            asynchronous=False,
        )
    return gateway_id


bootstrapped_gateway_id = _install_paypal()


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="PayPal Checkout API",
    description="PayPal order approval, payments and refunds",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the checkout domain context for each request."""
    with checkout.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from checkout.api import (  # noqa: E402
    checkout_router,
    gateway_router,
    order_router,
    payment_method_router,
    payment_router,
    register_checkout_exception_handlers,
)

app.include_router(checkout_router)
app.include_router(order_router)
app.include_router(payment_method_router)
app.include_router(payment_router)
app.include_router(gateway_router)

register_exception_handlers(app)
register_checkout_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {"checkout": {"name": checkout.name}},
            "paypal_gateway": bootstrapped_gateway_id,
        }
    )
