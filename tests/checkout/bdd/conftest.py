"""Shared BDD fixtures and step definitions for the checkout context."""

from decimal import Decimal

import pytest
from checkout.order.order import Order
from checkout.payment.creation import CreatePayment
from checkout.payment.payment import Payment
from protean import current_domain
from pytest_bdd import given, parsers, then


@pytest.fixture()
def error():
    """Container for the exception a When step ran into."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the "{gateway_id}" gateway is configured'), target_fixture="gateway_id")
def _(configure_gateway, gateway_id):
    return configure_gateway(payment_gateway_id=gateway_id)


@given(
    parsers.cfparse('the "{gateway_id}" gateway is configured with the "{intent}" intent'),
    target_fixture="gateway_id",
)
def _(configure_gateway, gateway_id, intent):
    return configure_gateway(payment_gateway_id=gateway_id, intent=intent)


@given(parsers.cfparse("an order of {total} {currency} was placed"), target_fixture="order_id")
def _(place_order, total, currency):
    return place_order(
        items=[{"title": "Walnut desk organizer", "sku": "ORG-1", "quantity": 1, "unit_price": total}],
        currency_code=currency,
    )


@given(parsers.cfparse("an approved order of {total} {currency}"), target_fixture="order_id")
def _(place_order, approved_remote_order, gateway_id, total, currency):
    from checkout.payment.approval import approve_order

    order_id = place_order(
        items=[{"title": "Walnut desk organizer", "sku": "ORG-1", "quantity": 1, "unit_price": total}],
        currency_code=currency,
    )
    approve_order(order_id, gateway_id, approved_remote_order(order_id, payment_gateway_id=gateway_id))
    return order_id


@given("the payment was created", target_fixture="payment_id")
def _(order_id):
    return current_domain.process(CreatePayment(order_id=order_id), asynchronous=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order uses the "{flow}" checkout flow'))
def _(order_id, flow):
    assert current_domain.repository_for(Order).get(order_id).checkout_flow == flow


@then(parsers.cfparse('the payment state is "{state}"'))
def _(payment_id, state):
    assert current_domain.repository_for(Payment).get(payment_id).state == state


@then(parsers.cfparse("the refunded amount is {amount}"))
def _(payment_id, amount):
    payment = current_domain.repository_for(Payment).get(payment_id)
    assert payment.refunded_amount.to_decimal() == Decimal(amount)
