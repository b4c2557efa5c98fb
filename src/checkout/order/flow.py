"""Checkout flows: ordered step ids an order walks through before completion.

The ``paypal_checkout`` flow is forced onto orders approved from the cart
("shortcut" flow): the buyer already chose PayPal and entered addresses in
the PayPal popup, so only review and payment remain.
"""

from protean.exceptions import ValidationError

DEFAULT_FLOW = "default"
PAYPAL_CHECKOUT_FLOW = "paypal_checkout"

CHECKOUT_FLOWS = {
    DEFAULT_FLOW: ("login", "order_information", "review", "payment", "complete"),
    PAYPAL_CHECKOUT_FLOW: ("review", "payment", "complete"),
}


def steps_for(flow_id: str) -> tuple[str, ...]:
    try:
        return CHECKOUT_FLOWS[flow_id]
    except KeyError:
        raise ValidationError({"checkout_flow": [f"Unknown checkout flow: {flow_id}"]}) from None


def first_step_id(flow_id: str) -> str:
    return steps_for(flow_id)[0]


def next_step_id(flow_id: str, step_id: str | None) -> str:
    """Step following ``step_id``; an unknown or empty step starts the flow."""
    steps = steps_for(flow_id)
    if step_id not in steps:
        return steps[0]
    index = steps.index(step_id)
    return steps[min(index + 1, len(steps) - 1)]


def checkout_url(order_id: str, step_id: str | None = None) -> str:
    """URL of the checkout form for an order, optionally at a given step."""
    if step_id:
        return f"/checkout/{order_id}/{step_id}"
    return f"/checkout/{order_id}"
