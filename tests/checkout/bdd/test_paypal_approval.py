"""BDD tests for approving PayPal orders."""

from checkout.exceptions import OrderMismatchError
from checkout.order.order import Order
from checkout.order.snapshot import remote_order_request
from checkout.payment.approval import approve_order
from checkout.payment_gateway.payment_gateway import PaymentGateway
from protean import current_domain
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/paypal_approval.feature")


def _approve(order_id, gateway_id, remote_order, error):
    try:
        approve_order(order_id, gateway_id, remote_order)
    except OrderMismatchError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the buyer approves the PayPal order")
def _(order_id, gateway_id, approved_remote_order, error):
    _approve(order_id, gateway_id, approved_remote_order(order_id, payment_gateway_id=gateway_id), error)


@when(parsers.cfparse("the buyer approves a PayPal order for {value}"))
def _(order_id, gateway_id, approved_remote_order, error, value):
    remote_order = approved_remote_order(order_id, payment_gateway_id=gateway_id)
    remote_order["purchase_units"][0]["amount"]["value"] = value
    _approve(order_id, gateway_id, remote_order, error)


@when("the PayPal order is submitted before the buyer approved it")
def _(order_id, gateway_id, fake_sdk, error):
    order = current_domain.repository_for(Order).get(order_id)
    gateway = current_domain.repository_for(PaymentGateway).get(gateway_id)
    _approve(order_id, gateway_id, fake_sdk.create_order(remote_order_request(order, gateway)), error)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order email is "{email}"'))
def _(order_id, email):
    assert current_domain.repository_for(Order).get(order_id).email == email


@then("the order has a PayPal payment method")
def _(order_id, error):
    assert error["exc"] is None
    assert current_domain.repository_for(Order).get(order_id).payment_method_id is not None


@then("the order has no PayPal payment method")
def _(order_id):
    assert current_domain.repository_for(Order).get(order_id).payment_method_id is None


@then("the approval is refused")
def _(error):
    assert isinstance(error["exc"], OrderMismatchError)
