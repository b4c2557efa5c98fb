"""Domain events for the Payment aggregate.

Amounts travel as decimal strings with a separate currency code.
"""

from protean.fields import Boolean, DateTime, Identifier, String

from checkout.domain import checkout


@checkout.event(part_of="Payment")
class PaymentReconciled:
    """The PayPal order was captured or authorized and mapped to a local state."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    state = String(required=True)
    remote_id = String(required=True)
    remote_state = String(required=True)
    amount = String(required=True)
    currency_code = String(required=True)
    expires_at = DateTime()
    reconciled_at = DateTime(required=True)


@checkout.event(part_of="Payment")
class PaymentCaptured:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    remote_id = String(required=True)
    remote_state = String(required=True)
    amount = String(required=True)
    currency_code = String(required=True)
    reauthorized = Boolean(default=False)
    captured_at = DateTime(required=True)


@checkout.event(part_of="Payment")
class PaymentVoided:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    remote_id = String(required=True)
    voided_at = DateTime(required=True)


@checkout.event(part_of="Payment")
class PaymentRefunded:
    """A (partial) refund was confirmed by PayPal."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    amount = String(required=True)
    refunded_amount = String(required=True)
    currency_code = String(required=True)
    state = String(required=True)
    refunded_at = DateTime(required=True)
