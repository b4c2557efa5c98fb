"""Move an order forward in its checkout flow."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.order.order import Order


@checkout.command(part_of="Order")
class AdvanceCheckoutStep:
    order_id = Identifier(required=True)
    from_step = String(max_length=50)


@checkout.command_handler(part_of=Order)
class AdvanceCheckoutStepHandler:
    @handle(AdvanceCheckoutStep)
    def advance_checkout_step(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        step = order.advance_checkout_step(command.from_step)
        repo.add(order)
        return step
