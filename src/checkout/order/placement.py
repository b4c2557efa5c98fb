"""Place an order from cart contents so it can be paid with PayPal."""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from checkout.domain import checkout, logger
from checkout.order.order import Order


@checkout.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    currency_code = String(required=True, max_length=3)
    items = Text(required=True)  # JSON list of item dicts
    adjustments = Text()  # JSON list of adjustment dicts
    store_name = String(max_length=255)
    email = String(max_length=254)


@checkout.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        order = Order.place(
            customer_id=command.customer_id,
            currency_code=command.currency_code,
            items_data=json.loads(command.items),
            adjustments_data=json.loads(command.adjustments) if command.adjustments else None,
            store_name=command.store_name or "",
            email=command.email,
        )
        current_domain.repository_for(Order).add(order)
        logger.info("order_placed", order_id=str(order.id), total=order.total_price.number)
        return str(order.id)
