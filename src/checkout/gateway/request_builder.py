"""Turns a local Order into the body of a PayPal create/update order call.

PayPal rejects a purchase unit whose breakdown does not add up to the
amount, and has no discount field in the breakdown. Items are therefore
sent with promotion-adjusted prices, and only tax and shipping adjustments
are broken out.
"""

import time
from collections.abc import Callable, Sequence

from checkout.gateway.port import DEFAULT_REFERENCE_ID
from checkout.order.order import AdjustmentType
from checkout.shared.address import Address, format_remote_address, format_remote_name
from checkout.shared.money import Price, sum_prices

MAX_TEXT_LENGTH = 127


def round_adjustments(adjustments: Sequence) -> list[Price]:
    """Default adjustment transformer: each amount rounded to minor units."""
    return [adjustment.amount.round() for adjustment in adjustments]


def adjustments_total(
    adjustments: Sequence,
    adjustment_type: AdjustmentType,
    transformer: Callable[[Sequence], list[Price]],
) -> Price | None:
    """Sum of the non-included adjustments of one type, or None when there are none."""
    matching = [
        adjustment
        for adjustment in adjustments
        if adjustment.adjustment_type == adjustment_type.value and not adjustment.included
    ]
    if not matching:
        return None
    amounts = transformer(matching)
    return sum_prices(amounts, amounts[0].currency_code)


class OrderRequestBuilder:
    def __init__(
        self,
        gateway,
        adjustment_transformer: Callable[[Sequence], list[Price]] = round_adjustments,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.gateway = gateway
        self.adjustment_transformer = adjustment_transformer
        self.clock = clock

    def build_items(self, order) -> list[dict]:
        items = []
        for order_item in order.items:
            item = {
                "name": order_item.title[:MAX_TEXT_LENGTH],
                "unit_amount": order_item.adjusted_unit_price().to_remote(),
                "quantity": str(order_item.quantity),
            }
            if order_item.sku:
                item["sku"] = order_item.sku[:MAX_TEXT_LENGTH]
            items.append(item)
        return items

    def build_breakdown(self, order) -> dict:
        item_total = sum_prices(
            [order_item.adjusted_total_price() for order_item in order.items],
            order.currency_code,
        )
        breakdown = {"item_total": item_total.to_remote()}

        tax_total = adjustments_total(order.adjustments, AdjustmentType.TAX, self.adjustment_transformer)
        if tax_total is not None:
            breakdown["tax_total"] = tax_total.to_remote()

        shipping_total = adjustments_total(order.adjustments, AdjustmentType.SHIPPING, self.adjustment_transformer)
        if shipping_total is not None:
            breakdown["shipping"] = shipping_total.to_remote()

        return breakdown

    def shipping_preference(self, shipping_address: Address | None) -> str:
        if not self.gateway.ships_orders():
            return "NO_SHIPPING"
        preference = (self.gateway.shipping_preference or "get_from_file").lower()
        if preference == "set_provided_address" and shipping_address is None:
            return "GET_FROM_FILE"
        return preference.upper()

    def build_payer(self, order, billing_address: Address | None) -> dict:
        payer = {}
        if order.email:
            payer["email_address"] = order.email
        if billing_address is not None:
            name = format_remote_name(billing_address)
            if name:
                payer["name"] = name
            remote_address = format_remote_address(billing_address)
            if remote_address:
                payer["address"] = remote_address
        return payer

    def build(self, order, billing_address: Address | None = None, shipping_address: Address | None = None) -> dict:
        order_id = str(order.id)
        amount = order.total_price.to_remote()
        amount["breakdown"] = self.build_breakdown(order)

        purchase_unit = {
            "reference_id": DEFAULT_REFERENCE_ID,
            "custom_id": order_id,
            "invoice_id": f"{order_id}-{int(self.clock())}",
            "amount": amount,
            "items": self.build_items(order),
        }

        shipping_preference = self.shipping_preference(shipping_address)
        if shipping_preference == "SET_PROVIDED_ADDRESS":
            purchase_unit["shipping"] = {
                "name": {"full_name": shipping_address.full_name()},
                "address": format_remote_address(shipping_address),
            }

        params = {
            "intent": (self.gateway.intent or "capture").upper(),
            "purchase_units": [purchase_unit],
            "application_context": {
                "brand_name": (order.store_name or "")[:MAX_TEXT_LENGTH],
                "shipping_preference": shipping_preference,
            },
        }

        payer = self.build_payer(order, billing_address)
        if payer:
            params["payer"] = payer

        return params


def build_order_request(order, gateway, billing_address=None, shipping_address=None, **options) -> dict:
    """Shortcut for ``OrderRequestBuilder(gateway, **options).build(...)``."""
    return OrderRequestBuilder(gateway, **options).build(order, billing_address, shipping_address)
