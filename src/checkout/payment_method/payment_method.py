"""PaymentMethod aggregate: a single-use PayPal Checkout payment method.

The remote id is the id of the approved PayPal order. Methods are never
reusable: a PayPal order can be paid once. Two creation flows exist:

* mark: created when the payment step is submitted, before approval; the
  remote id is filled in by the approval callback.
* shortcut: created by the approval callback itself, when the buyer used
  the PayPal button from the cart.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String

from checkout.domain import checkout
from checkout.payment_method.events import PaymentMethodCreated, PaymentMethodRemoteIdChanged

PAYPAL_CHECKOUT_TYPE = "paypal_checkout"


class PaymentMethodFlow(Enum):
    MARK = "mark"
    SHORTCUT = "shortcut"


@checkout.aggregate
class PaymentMethod:
    method_type = String(max_length=50, default=PAYPAL_CHECKOUT_TYPE)
    payment_gateway_id = Identifier(required=True)
    remote_id = String(max_length=255)
    reusable = Boolean(default=False)
    flow = String(required=True, choices=PaymentMethodFlow)
    billing_profile_id = Identifier()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def paypal_methods_are_single_use(self):
        if self.method_type == PAYPAL_CHECKOUT_TYPE and self.reusable:
            raise ValidationError({"reusable": ["PayPal Checkout payment methods cannot be reused"]})

    @classmethod
    def _create(cls, payment_gateway_id, flow: PaymentMethodFlow, remote_id=None, billing_profile_id=None):
        now = datetime.now(UTC)
        method = cls(
            method_type=PAYPAL_CHECKOUT_TYPE,
            payment_gateway_id=payment_gateway_id,
            remote_id=remote_id,
            reusable=False,
            flow=flow.value,
            billing_profile_id=billing_profile_id,
            created_at=now,
            updated_at=now,
        )
        method.raise_(
            PaymentMethodCreated(
                payment_method_id=str(method.id),
                payment_gateway_id=str(payment_gateway_id),
                flow=flow.value,
                remote_id=remote_id,
                created_at=now,
            )
        )
        return method

    @classmethod
    def for_mark_flow(cls, payment_gateway_id: str, billing_profile_id: str | None = None):
        return cls._create(payment_gateway_id, PaymentMethodFlow.MARK, billing_profile_id=billing_profile_id)

    @classmethod
    def for_shortcut_flow(cls, payment_gateway_id: str, remote_id: str):
        return cls._create(payment_gateway_id, PaymentMethodFlow.SHORTCUT, remote_id=remote_id)

    @property
    def is_paypal_checkout(self) -> bool:
        return self.method_type == PAYPAL_CHECKOUT_TYPE

    def set_remote_id(self, remote_id: str) -> bool:
        """Point the method at a new PayPal order. Returns False when unchanged."""
        if self.remote_id == remote_id:
            return False
        now = datetime.now(UTC)
        previous = self.remote_id
        self.remote_id = remote_id
        self.updated_at = now
        self.raise_(
            PaymentMethodRemoteIdChanged(
                payment_method_id=str(self.id),
                previous_remote_id=previous,
                remote_id=remote_id,
                changed_at=now,
            )
        )
        return True
