"""Order aggregate: the local order as seen by the checkout context.

The Order is a plain (non event-sourced) aggregate. Line items carry their
own promotion total so PayPal can be sent promotion-adjusted prices: the
Orders API has no discount field in the amount breakdown. Order-level
adjustments (tax, shipping, fees, promotions) are kept separately; an
``included`` adjustment is already part of the item prices and never added
to the total again.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer, String, ValueObject

from checkout.domain import checkout
from checkout.order.events import CheckoutStepChanged, OrderPlaced, PaymentMethodSelected
from checkout.order.flow import DEFAULT_FLOW, first_step_id, next_step_id, steps_for
from checkout.shared.money import Price, sum_prices, to_decimal


class AdjustmentType(Enum):
    TAX = "tax"
    SHIPPING = "shipping"
    FEE = "fee"
    PROMOTION = "promotion"


@checkout.entity(part_of="Order")
class OrderItem:
    title = String(required=True, max_length=512)
    sku = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = ValueObject(Price, required=True)
    # Sum of promotions applied to the whole line, zero or negative.
    promotion_total = ValueObject(Price)

    def total_price(self) -> Price:
        return self.unit_price.multiply(self.quantity)

    def adjusted_total_price(self) -> Price:
        """Line total after promotions."""
        total = self.total_price()
        if self.promotion_total is not None:
            total = total.add(self.promotion_total)
        return total

    def adjusted_unit_price(self) -> Price:
        adjusted = self.adjusted_total_price()
        return Price.of(adjusted.to_decimal() / self.quantity, adjusted.currency_code).round()


@checkout.entity(part_of="Order")
class Adjustment:
    adjustment_type = String(required=True, choices=AdjustmentType)
    label = String(max_length=255)
    amount = ValueObject(Price, required=True)
    included = Boolean(default=False)


@checkout.entity(part_of="Order")
class Shipment:
    shipping_profile_id = Identifier()
    amount = ValueObject(Price)


@checkout.aggregate
class Order:
    customer_id = Identifier(required=True)
    store_name = String(max_length=255, default="")
    email = String(max_length=254)
    items = HasMany(OrderItem)
    adjustments = HasMany(Adjustment)
    total_price = ValueObject(Price, required=True)
    billing_profile_id = Identifier()
    shipments = HasMany(Shipment)
    checkout_flow = String(max_length=50, default=DEFAULT_FLOW)
    checkout_step = String(max_length=50)
    payment_gateway_id = Identifier()
    payment_method_id = Identifier()
    placed_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def place(
        cls,
        customer_id: str,
        currency_code: str,
        items_data: list[dict],
        adjustments_data: list[dict] | None = None,
        store_name: str = "",
        email: str | None = None,
        total=None,
    ):
        """Create an order from cart data.

        Items are dicts with ``title``, ``quantity``, ``unit_price`` and optional
        ``sku`` / ``promotion_total``; adjustments are dicts with ``type``,
        ``amount`` and optional ``label`` / ``included``. When ``total`` is not
        given it is the sum of adjusted line totals plus non-included
        adjustments.
        """
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        items = []
        for item_data in items_data:
            promotion = item_data.get("promotion_total")
            items.append(
                OrderItem(
                    title=item_data["title"],
                    sku=item_data.get("sku"),
                    quantity=item_data["quantity"],
                    unit_price=Price.of(item_data["unit_price"], currency_code),
                    promotion_total=Price.of(promotion, currency_code) if promotion is not None else None,
                )
            )

        adjustments = [
            Adjustment(
                adjustment_type=adjustment_data["type"],
                label=adjustment_data.get("label"),
                amount=Price.of(adjustment_data["amount"], currency_code),
                included=adjustment_data.get("included", False),
            )
            for adjustment_data in adjustments_data or []
        ]

        if total is None:
            total_price = sum_prices([item.adjusted_total_price() for item in items], currency_code.upper())
            total_price = total_price.add(
                sum_prices(
                    [adjustment.amount for adjustment in adjustments if not adjustment.included],
                    currency_code.upper(),
                )
            )
        else:
            total_price = Price.of(total, currency_code)

        order = cls(
            customer_id=customer_id,
            store_name=store_name,
            email=email,
            total_price=total_price,
            checkout_flow=DEFAULT_FLOW,
            checkout_step=first_step_id(DEFAULT_FLOW),
            placed_at=now,
            updated_at=now,
        )
        for item in items:
            order.add_items(item)
        for adjustment in adjustments:
            order.add_adjustments(adjustment)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id),
                total=str(to_decimal(total_price.number)),
                currency_code=total_price.currency_code,
                checkout_flow=order.checkout_flow,
                placed_at=now,
            )
        )
        return order

    @property
    def currency_code(self) -> str:
        return self.total_price.currency_code

    def backfill_email(self, email: str | None) -> bool:
        """Set the email only when the order has none yet."""
        if self.email or not email:
            return False
        self.email = email
        self.updated_at = datetime.now(UTC)
        return True

    def set_billing_profile(self, profile_id: str) -> None:
        self.billing_profile_id = profile_id
        self.updated_at = datetime.now(UTC)

    @property
    def shipping_profile_id(self) -> str | None:
        for shipment in self.shipments:
            if shipment.shipping_profile_id:
                return shipment.shipping_profile_id
        return None

    def pack_shipment(self) -> Shipment:
        """Ensure the order has a shipment, with a zero amount when none is known."""
        if not self.shipments:
            self.add_shipments(Shipment(amount=Price.zero(self.currency_code)))
        first_shipment = self.shipments[0]
        if first_shipment.amount is None:
            first_shipment.amount = Price.zero(self.currency_code)
        return first_shipment

    def attach_shipping_profile(self, profile_id: str) -> None:
        self.pack_shipment()
        for shipment in self.shipments:
            shipment.shipping_profile_id = profile_id
        self.updated_at = datetime.now(UTC)

    def _change_step(self, checkout_step: str) -> None:
        previous = self.checkout_step
        now = datetime.now(UTC)
        self.checkout_step = checkout_step
        self.updated_at = now
        self.raise_(
            CheckoutStepChanged(
                order_id=str(self.id),
                checkout_flow=self.checkout_flow,
                previous_step=previous,
                checkout_step=checkout_step,
                changed_at=now,
            )
        )

    def advance_checkout_step(self, from_step: str | None = None) -> str:
        """Move to the step following ``from_step`` (default: the current step)."""
        self._change_step(next_step_id(self.checkout_flow, from_step or self.checkout_step))
        return self.checkout_step

    def switch_checkout_flow(self, flow_id: str) -> None:
        steps = steps_for(flow_id)
        self.checkout_flow = flow_id
        if self.checkout_step not in steps:
            self._change_step(steps[0])
        else:
            self.updated_at = datetime.now(UTC)

    def select_payment_gateway(self, payment_gateway_id: str) -> None:
        self.payment_gateway_id = payment_gateway_id
        self.updated_at = datetime.now(UTC)

    def assign_payment_method(self, payment_gateway_id: str, payment_method_id: str) -> None:
        now = datetime.now(UTC)
        self.payment_gateway_id = payment_gateway_id
        self.payment_method_id = payment_method_id
        self.updated_at = now
        self.raise_(
            PaymentMethodSelected(
                order_id=str(self.id),
                payment_gateway_id=str(payment_gateway_id),
                payment_method_id=str(payment_method_id),
                selected_at=now,
            )
        )
