"""PaymentGateway aggregate: the configuration of one PayPal Checkout gateway.

A deployment may configure several gateways (sandbox and live, different
PayPal accounts). Orders, payment methods and payments reference the
gateway that handled them by id.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, String

from checkout.domain import checkout
from checkout.payment_gateway.events import GatewayConfigured
from checkout.widget.solutions import PaymentSolution


class Mode(Enum):
    LIVE = "live"
    TEST = "test"


class Intent(Enum):
    CAPTURE = "capture"
    AUTHORIZE = "authorize"


class ShippingPreference(Enum):
    NO_SHIPPING = "no_shipping"
    GET_FROM_FILE = "get_from_file"
    SET_PROVIDED_ADDRESS = "set_provided_address"


_CONFIGURABLE_FIELDS = (
    "label",
    "client_id",
    "secret",
    "mode",
    "intent",
    "shipping_preference",
    "payment_solution",
    "update_billing_profile",
    "update_shipping_profile",
    "shipping_enabled",
)


@checkout.aggregate
class PaymentGateway:
    label = String(max_length=255, default="PayPal")
    client_id = String(required=True, max_length=255)
    secret = String(required=True, max_length=255)
    mode = String(choices=Mode, default=Mode.TEST.value)
    intent = String(choices=Intent, default=Intent.CAPTURE.value)
    shipping_preference = String(
        choices=ShippingPreference,
        default=ShippingPreference.GET_FROM_FILE.value,
    )
    payment_solution = String(
        choices=PaymentSolution,
        default=PaymentSolution.SMART_PAYMENT_BUTTONS.value,
    )
    update_billing_profile = Boolean(default=True)
    update_shipping_profile = Boolean(default=True)
    shipping_enabled = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def credentials_must_not_be_blank(self):
        if not (self.client_id or "").strip() or not (self.secret or "").strip():
            raise ValidationError({"client_id": ["Client ID and secret are required"]})

    @classmethod
    def register(cls, gateway_id: str, **configuration):
        now = datetime.now(UTC)
        gateway = cls(id=gateway_id, created_at=now, updated_at=now, **configuration)
        gateway.raise_(
            GatewayConfigured(
                payment_gateway_id=str(gateway.id),
                client_id=gateway.client_id,
                mode=gateway.mode,
                intent=gateway.intent,
                payment_solution=gateway.payment_solution,
                configured_at=now,
            )
        )
        return gateway

    def reconfigure(self, **configuration) -> None:
        """Overwrite the provided configuration keys, leaving the rest untouched."""
        for key in _CONFIGURABLE_FIELDS:
            value = configuration.get(key)
            if value is not None:
                setattr(self, key, value)

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            GatewayConfigured(
                payment_gateway_id=str(self.id),
                client_id=self.client_id,
                mode=self.mode,
                intent=self.intent,
                payment_solution=self.payment_solution,
                configured_at=now,
            )
        )

    def ships_orders(self) -> bool:
        """Whether orders handled by this gateway can carry shipments."""
        return bool(self.shipping_enabled)
