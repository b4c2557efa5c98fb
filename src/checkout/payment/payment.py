"""Payment aggregate: one PayPal capture or authorization for an order.

The aggregate enforces local transition rules and refund accounting; the
command handlers in this package talk to PayPal and feed the outcome in.

``remote_id`` is the PayPal authorization id while the payment is in
``authorization`` and the capture id once it is completed, so refunds always
target a capture.
"""

from datetime import UTC, datetime, timedelta

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String, ValueObject

from checkout.domain import checkout
from checkout.payment.events import PaymentCaptured, PaymentReconciled, PaymentRefunded, PaymentVoided
from checkout.payment.states import REFUNDABLE_STATES, VALID_TRANSITIONS, PaymentState
from checkout.shared.money import Price

# PayPal honours an authorization for 3 days; after that it must be
# reauthorized before capture.
AUTHORIZATION_HONOR_PERIOD = timedelta(days=3)


@checkout.aggregate
class Payment:
    order_id = Identifier(required=True)
    payment_gateway_id = Identifier(required=True)
    payment_method_id = Identifier()
    amount = ValueObject(Price, required=True)
    refunded_amount = ValueObject(Price)
    state = String(choices=PaymentState, default=PaymentState.NEW.value)
    remote_id = String(max_length=255)
    remote_state = String(max_length=255)
    authorized_at = DateTime()
    expires_at = DateTime()
    completed_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def refunds_cannot_exceed_amount(self):
        if self.refunded_amount is None or self.amount is None:
            return
        if self.refunded_amount.currency_code != self.amount.currency_code:
            return
        if self.refunded_amount.greater_than(self.amount):
            raise ValidationError({"refunded_amount": ["Refunded amount cannot exceed the payment amount"]})

    @classmethod
    def create(cls, order_id, payment_gateway_id, amount: Price, payment_method_id=None):
        now = datetime.now(UTC)
        return cls(
            order_id=order_id,
            payment_gateway_id=payment_gateway_id,
            payment_method_id=payment_method_id,
            amount=amount,
            refunded_amount=Price.zero(amount.currency_code),
            state=PaymentState.NEW.value,
            created_at=now,
            updated_at=now,
        )

    @property
    def current_state(self) -> PaymentState:
        return PaymentState(self.state)

    def assert_state(self, *allowed: PaymentState) -> None:
        """Fail loudly when an operation is attempted from the wrong state."""
        if self.current_state not in allowed:
            expected = ", ".join(state.value for state in allowed)
            raise ValidationError(
                {"state": [f"The provided payment is in an invalid state ({self.state}), expected: {expected}"]}
            )

    def _transition_to(self, target: PaymentState) -> None:
        current = self.current_state
        if target not in VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"state": [f"Cannot transition from {current.value} to {target.value}"]})
        self.state = target.value

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return (now or datetime.now(UTC)) >= self.expires_at

    def needs_reauthorization(self, now: datetime | None = None) -> bool:
        """True once the authorization honor period is over but before expiry."""
        if self.authorized_at is None:
            return False
        now = now or datetime.now(UTC)
        return now >= self.authorized_at + AUTHORIZATION_HONOR_PERIOD and not self.is_expired(now)

    def record_remote_payment(
        self,
        state: PaymentState,
        remote_id: str,
        remote_state: str,
        amount: Price,
        expires_at: datetime | None = None,
    ) -> None:
        """Store the outcome of capturing or authorizing the PayPal order."""
        self.assert_state(PaymentState.NEW)
        self._transition_to(state)
        now = datetime.now(UTC)
        with atomic_change(self):
            self.amount = amount
            self.refunded_amount = Price.zero(amount.currency_code)
        self.remote_id = remote_id
        self.remote_state = remote_state
        if expires_at is not None:
            self.expires_at = expires_at
        if state == PaymentState.AUTHORIZATION:
            self.authorized_at = now
        elif state in REFUNDABLE_STATES:
            self.completed_at = now
        self.updated_at = now

        self.raise_(
            PaymentReconciled(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                state=self.state,
                remote_id=remote_id,
                remote_state=remote_state,
                amount=amount.number,
                currency_code=amount.currency_code,
                expires_at=self.expires_at,
                reconciled_at=now,
            )
        )

    def capture_params(self, amount: Price | None = None) -> dict:
        """PayPal capture request for ``amount`` (the full amount by default)."""
        amount = amount or self.amount
        if not amount.is_positive():
            raise ValidationError({"amount": ["Capture amount must be positive"]})
        if not amount.fits_minor_units():
            raise ValidationError(
                {"amount": [f"Capture amount has more decimal places than {amount.currency_code} allows"]}
            )
        if amount.greater_than(self.amount):
            raise ValidationError({"amount": ["Cannot capture more than the authorized amount"]})
        params = {"amount": amount.to_remote()}
        if amount.equals(self.amount):
            params["final_capture"] = True
        return params

    def record_capture(self, amount: Price, remote_id: str, remote_state: str, reauthorized: bool = False) -> None:
        self.assert_state(PaymentState.AUTHORIZATION)
        self._transition_to(PaymentState.COMPLETED)
        now = datetime.now(UTC)
        with atomic_change(self):
            self.amount = amount
            self.refunded_amount = Price.zero(amount.currency_code)
        self.remote_id = remote_id
        self.remote_state = remote_state
        self.completed_at = now
        self.updated_at = now

        self.raise_(
            PaymentCaptured(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                remote_id=remote_id,
                remote_state=remote_state,
                amount=amount.number,
                currency_code=amount.currency_code,
                reauthorized=reauthorized,
                captured_at=now,
            )
        )

    def record_void(self) -> None:
        self.assert_state(PaymentState.AUTHORIZATION)
        self._transition_to(PaymentState.AUTHORIZATION_VOIDED)
        now = datetime.now(UTC)
        self.remote_state = "voided"
        self.updated_at = now
        self.raise_(
            PaymentVoided(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                remote_id=self.remote_id or "",
                voided_at=now,
            )
        )

    def refundable_amount(self) -> Price:
        refunded = self.refunded_amount or Price.zero(self.amount.currency_code)
        return self.amount.subtract(refunded)

    def plan_refund(self, amount: Price | None = None) -> tuple[Price, Price, PaymentState]:
        """Validate a refund and compute its outcome without changing anything.

        Returns ``(amount, new_refunded_amount, target_state)``.
        """
        self.assert_state(*REFUNDABLE_STATES)
        balance = self.refundable_amount()
        amount = amount or balance
        if amount.currency_code != self.amount.currency_code:
            raise ValidationError({"amount": ["Refunds must be in the payment currency"]})
        if not amount.is_positive():
            raise ValidationError({"amount": ["Refund amount must be positive"]})
        if not amount.fits_minor_units():
            raise ValidationError(
                {"amount": [f"Refund amount has more decimal places than {amount.currency_code} allows"]}
            )
        if amount.greater_than(balance):
            raise ValidationError(
                {"amount": [f"Can't refund more than {balance.number} {balance.currency_code}."]}
            )

        new_refunded = (self.refunded_amount or Price.zero(amount.currency_code)).add(amount)
        if new_refunded.less_than(self.amount):
            target = PaymentState.PARTIALLY_REFUNDED
        else:
            target = PaymentState.REFUNDED
        return amount, new_refunded, target

    def record_refund(self, amount: Price | None = None) -> Price:
        """Apply a refund PayPal confirmed. Returns the amount refunded."""
        amount, new_refunded, target = self.plan_refund(amount)
        self._transition_to(target)
        now = datetime.now(UTC)
        self.refunded_amount = new_refunded
        self.updated_at = now
        self.raise_(
            PaymentRefunded(
                payment_id=str(self.id),
                order_id=str(self.order_id),
                amount=amount.number,
                refunded_amount=new_refunded.number,
                currency_code=amount.currency_code,
                state=self.state,
                refunded_at=now,
            )
        )
        return amount
