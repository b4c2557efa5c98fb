"""Checkout API package."""

from checkout.api.routes import (
    checkout_router,
    gateway_router,
    order_router,
    payment_method_router,
    payment_router,
    register_checkout_exception_handlers,
)

__all__ = [
    "checkout_router",
    "gateway_router",
    "order_router",
    "payment_method_router",
    "payment_router",
    "register_checkout_exception_handlers",
]
