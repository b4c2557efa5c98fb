"""Local payment states and the PayPal → local state mapping.

State machine:
    NEW → AUTHORIZATION → AUTHORIZATION_VOIDED | AUTHORIZATION_EXPIRED | COMPLETED
    NEW → COMPLETED | PARTIALLY_REFUNDED (capture intent)
    COMPLETED → PARTIALLY_REFUNDED | REFUNDED
    PARTIALLY_REFUNDED → PARTIALLY_REFUNDED | REFUNDED
"""

from enum import Enum

from checkout.exceptions import HardDeclineError, UnhandledPaymentStateError


class PaymentState(Enum):
    NEW = "new"
    AUTHORIZATION = "authorization"
    AUTHORIZATION_VOIDED = "authorization_voided"
    AUTHORIZATION_EXPIRED = "authorization_expired"
    COMPLETED = "completed"
    PARTIALLY_REFUNDED = "partially_refunded"
    REFUNDED = "refunded"


VALID_TRANSITIONS = {
    PaymentState.NEW: {
        PaymentState.AUTHORIZATION,
        PaymentState.AUTHORIZATION_VOIDED,
        PaymentState.AUTHORIZATION_EXPIRED,
        PaymentState.COMPLETED,
        PaymentState.PARTIALLY_REFUNDED,
    },
    PaymentState.AUTHORIZATION: {
        PaymentState.AUTHORIZATION_VOIDED,
        PaymentState.AUTHORIZATION_EXPIRED,
        PaymentState.COMPLETED,
    },
    PaymentState.COMPLETED: {PaymentState.PARTIALLY_REFUNDED, PaymentState.REFUNDED},
    PaymentState.PARTIALLY_REFUNDED: {PaymentState.PARTIALLY_REFUNDED, PaymentState.REFUNDED},
    PaymentState.AUTHORIZATION_VOIDED: set(),  # Terminal
    PaymentState.AUTHORIZATION_EXPIRED: set(),  # Terminal
    PaymentState.REFUNDED: set(),  # Terminal
}

REFUNDABLE_STATES = frozenset({PaymentState.COMPLETED, PaymentState.PARTIALLY_REFUNDED})

PAYMENT_STATE_MAP = {
    ("authorize", "created"): PaymentState.AUTHORIZATION,
    ("authorize", "voided"): PaymentState.AUTHORIZATION_VOIDED,
    ("authorize", "expired"): PaymentState.AUTHORIZATION_EXPIRED,
    ("capture", "completed"): PaymentState.COMPLETED,
    ("capture", "partially_refunded"): PaymentState.PARTIALLY_REFUNDED,
}

HARD_DECLINE_STATES = frozenset({"denied", "expired", "declined"})


def map_payment_state(intent: str, remote_state: str) -> PaymentState:
    """Local state for a PayPal capture/authorization status.

    ``intent`` is "capture" or "authorize". Declines are checked before the
    table, so an expired authorization is reported as a hard decline.
    """
    intent = (intent or "").lower()
    remote_state = (remote_state or "").lower()

    if remote_state in HARD_DECLINE_STATES:
        raise HardDeclineError(
            f"The payment was declined (remote state: {remote_state}), use a different payment method."
        )
    try:
        return PAYMENT_STATE_MAP[(intent, remote_state)]
    except KeyError:
        raise UnhandledPaymentStateError(
            f"The payment is in a state we cannot handle (intent: {intent}, remote state: {remote_state})."
        ) from None
