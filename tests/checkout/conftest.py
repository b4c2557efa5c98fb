import json

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def checkout_bed():
    from checkout.domain import checkout

    bed = DomainFixture(checkout)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(checkout_bed):
    with checkout_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def fake_sdk():
    """Every test talks to a fresh in-memory PayPal."""
    from checkout.gateway import reset_sdk_factory, set_sdk_factory
    from checkout.gateway.fake_adapter import FakeCheckoutSdk, FakeSdkFactory

    sdk = FakeCheckoutSdk()
    set_sdk_factory(FakeSdkFactory(sdk))
    yield sdk
    reset_sdk_factory()


@pytest.fixture()
def configure_gateway():
    """Register a gateway through the ConfigureGateway command."""
    from checkout.payment_gateway.configuration import ConfigureGateway

    def _configure(payment_gateway_id="paypal", **settings):
        settings.setdefault("client_id", "client-abc")
        settings.setdefault("secret", "secret-abc")
        return current_domain.process(
            ConfigureGateway(payment_gateway_id=payment_gateway_id, **settings),
            asynchronous=False,
        )

    return _configure


@pytest.fixture()
def place_order():
    """Place an order through the PlaceOrder command."""
    from checkout.order.placement import PlaceOrder

    def _place(items=None, adjustments=None, currency_code="USD", **overrides):
        items = items or [{"title": "Walnut desk organizer", "sku": "ORG-1", "quantity": 1, "unit_price": "19.99"}]
        return current_domain.process(
            PlaceOrder(
                customer_id=overrides.pop("customer_id", "cust-001"),
                currency_code=currency_code,
                items=json.dumps(items),
                adjustments=json.dumps(adjustments or []),
                store_name=overrides.pop("store_name", "Acme Store"),
                **overrides,
            ),
            asynchronous=False,
        )

    return _place


@pytest.fixture()
def approved_remote_order(fake_sdk):
    """Create the PayPal order for a local order and approve it as the buyer would."""
    from checkout.order.order import Order
    from checkout.order.snapshot import remote_order_request
    from checkout.payment_gateway.payment_gateway import PaymentGateway

    def _approve(order_id, payment_gateway_id="paypal", payer=None, shipping=None):
        order = current_domain.repository_for(Order).get(order_id)
        gateway = current_domain.repository_for(PaymentGateway).get(payment_gateway_id)
        remote_order = fake_sdk.create_order(remote_order_request(order, gateway))
        return fake_sdk.approve(remote_order["id"], payer=payer, shipping=shipping)

    return _approve


@pytest.fixture()
def shortcut_approval(configure_gateway, place_order, approved_remote_order):
    """An order approved from the cart, ready to be paid. Returns ``(order_id, remote_order)``."""
    from checkout.payment.approval import approve_order

    def _approve(gateway_settings=None, **order_overrides):
        configure_gateway(**(gateway_settings or {}))
        order_id = place_order(**order_overrides)
        remote_order = approved_remote_order(order_id)
        approve_order(order_id, "paypal", remote_order)
        return order_id, remote_order

    return _approve
