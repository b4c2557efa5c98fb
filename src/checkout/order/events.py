"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Identifier, String

from checkout.domain import checkout


@checkout.event(part_of="Order")
class OrderPlaced:
    """A cart was turned into an order and entered checkout."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    total = String(required=True)
    currency_code = String(required=True)
    checkout_flow = String(required=True)
    placed_at = DateTime(required=True)


@checkout.event(part_of="Order")
class CheckoutStepChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    checkout_flow = String(required=True)
    previous_step = String()
    checkout_step = String(required=True)
    changed_at = DateTime(required=True)


@checkout.event(part_of="Order")
class PaymentMethodSelected:
    """The order will be paid with the given gateway and payment method."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_gateway_id = Identifier(required=True)
    payment_method_id = Identifier(required=True)
    selected_at = DateTime(required=True)
