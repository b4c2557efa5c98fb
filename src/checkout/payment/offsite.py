"""Off-site payment for gateways configured with the redirect solution.

No widget is rendered: the payment is created straight away from the
approved PayPal order and the customer continues after the payment step.
"""

from protean.utils.globals import current_domain

from checkout.order.checkout_step import AdvanceCheckoutStep
from checkout.order.flow import checkout_url
from checkout.payment.creation import CreatePayment


def complete_offsite_payment(order_id: str) -> tuple[str, str]:
    """Returns ``(payment_id, redirect_uri)``."""
    payment_id = current_domain.process(CreatePayment(order_id=order_id), asynchronous=False)
    current_domain.process(AdvanceCheckoutStep(order_id=order_id, from_step="payment"), asynchronous=False)
    return payment_id, checkout_url(order_id)
