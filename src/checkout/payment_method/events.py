"""Domain events for the PaymentMethod aggregate."""

from protean.fields import DateTime, Identifier, String

from checkout.domain import checkout


@checkout.event(part_of="PaymentMethod")
class PaymentMethodCreated:
    __version__ = 1

    payment_method_id = Identifier(required=True)
    payment_gateway_id = Identifier(required=True)
    flow = String(required=True)
    remote_id = String()
    created_at = DateTime(required=True)


@checkout.event(part_of="PaymentMethod")
class PaymentMethodRemoteIdChanged:
    """The PayPal order backing this payment method changed (buyer re-approved)."""

    __version__ = 1

    payment_method_id = Identifier(required=True)
    previous_remote_id = String()
    remote_id = String(required=True)
    changed_at = DateTime(required=True)
