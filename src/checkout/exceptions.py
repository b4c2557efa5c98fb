"""Gateway-level exceptions raised by the checkout context.

Invalid local state transitions are not listed here: aggregates raise
``protean.exceptions.ValidationError`` for those, like every other
aggregate rule.
"""


class RemoteCallError(Exception):
    """PayPal answered with a non-2xx status."""

    def __init__(self, status_code: int, body=None, message: str | None = None) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"PayPal request failed with HTTP {status_code}")


class PaymentGatewayError(Exception):
    """A payment operation failed at the gateway.

    The message is safe to log but is never shown verbatim to customers.
    """


class HardDeclineError(PaymentGatewayError):
    """The payment was declined and must not be retried with the same method."""


class UnhandledPaymentStateError(PaymentGatewayError):
    """PayPal reported a payment state with no local counterpart."""


class OrderMismatchError(Exception):
    """The approved PayPal order does not match the local order."""

    def __init__(self, order_id: str, reason: str) -> None:
        self.order_id = order_id
        self.reason = reason
        super().__init__(f"PayPal order does not match order {order_id}: {reason}")
