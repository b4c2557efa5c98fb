"""Domain events for the PaymentGateway aggregate."""

from protean.fields import DateTime, Identifier, String

from checkout.domain import checkout


@checkout.event(part_of="PaymentGateway")
class GatewayConfigured:
    """A gateway was registered or its configuration changed."""

    __version__ = 1

    payment_gateway_id = Identifier(required=True)
    client_id = String(required=True)
    mode = String(required=True)
    intent = String(required=True)
    payment_solution = String(required=True)
    configured_at = DateTime(required=True)
