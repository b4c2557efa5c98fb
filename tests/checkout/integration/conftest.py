import pytest
from checkout.api import (
    checkout_router,
    gateway_router,
    order_router,
    payment_method_router,
    payment_router,
    register_checkout_exception_handlers,
)
from fastapi import FastAPI
from protean.integrations.fastapi import register_exception_handlers


@pytest.fixture()
def checkout_app():
    """The checkout routers and exception handlers, without the app's bootstrap."""
    app = FastAPI()
    for router in (checkout_router, order_router, payment_method_router, payment_router, gateway_router):
        app.include_router(router)
    register_exception_handlers(app)
    register_checkout_exception_handlers(app)
    return app
