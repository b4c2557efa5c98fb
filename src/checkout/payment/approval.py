"""Approval callback: the buyer approved the PayPal order in the widget.

Checks the PayPal order against the local order, then brings the local
order up to date: email, billing and shipping profiles, payment method and
checkout step. Everything happens inside the command's unit of work, so
either all of it is stored or nothing is. Approvals of the same order are
serialized by ``approve_order``.
"""

import json

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from checkout.domain import checkout, logger
from checkout.exceptions import OrderMismatchError
from checkout.gateway.remote_order import APPROVABLE_STATUSES, RemoteOrder
from checkout.order.flow import PAYPAL_CHECKOUT_FLOW, checkout_url
from checkout.order.order import Order
from checkout.payment_gateway.payment_gateway import PaymentGateway
from checkout.payment_method.payment_method import PaymentMethod
from checkout.profile.profile import CustomerProfile
from checkout.utils.locks import KeyedLock

_approval_locks = KeyedLock()


@checkout.command(part_of="Order")
class ApproveOrder:
    order_id = Identifier(required=True)
    payment_gateway_id = Identifier(required=True)
    paypal_order = Text(required=True)  # JSON of the PayPal order


def verify_remote_order(order, remote_order: RemoteOrder) -> None:
    """Raise OrderMismatchError unless PayPal approved exactly the order total."""
    remote_amount = remote_order.amount
    if remote_amount is None or not remote_amount.equals(order.total_price):
        raise OrderMismatchError(
            str(order.id),
            f"amount {remote_amount.number if remote_amount else None} "
            f"{remote_amount.currency_code if remote_amount else ''} "
            f"differs from order total {order.total_price.number} {order.total_price.currency_code}",
        )
    if remote_order.status not in APPROVABLE_STATUSES:
        raise OrderMismatchError(str(order.id), f"unexpected status {remote_order.status}")


def _profile_or_new(profile_repo, profile_id, customer_id):
    if profile_id:
        return profile_repo.get(profile_id)
    return CustomerProfile.build(customer_id=customer_id)


@checkout.command_handler(part_of=Order)
class ApproveOrderHandler:
    @handle(ApproveOrder)
    def approve_order(self, command):
        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(command.order_id)
        gateway = current_domain.repository_for(PaymentGateway).get(command.payment_gateway_id)
        remote_order = RemoteOrder.from_response(json.loads(command.paypal_order))

        verify_remote_order(order, remote_order)

        order.backfill_email(remote_order.payer_email)

        profile_repo = current_domain.repository_for(CustomerProfile)
        if gateway.update_billing_profile and remote_order.payer:
            billing_profile = _profile_or_new(profile_repo, order.billing_profile_id, order.customer_id)
            billing_profile.populate_from_payer(remote_order.payer)
            profile_repo.add(billing_profile)
            order.set_billing_profile(str(billing_profile.id))

        if gateway.update_shipping_profile and gateway.ships_orders() and remote_order.shipping:
            order.pack_shipment()
            shipping_profile = _profile_or_new(profile_repo, order.shipping_profile_id, order.customer_id)
            shipping_profile.populate_from_shipping(remote_order.shipping)
            profile_repo.add(shipping_profile)
            order.attach_shipping_profile(str(shipping_profile.id))

        method_repo = current_domain.repository_for(PaymentMethod)
        payment_method = method_repo.get(order.payment_method_id) if order.payment_method_id else None

        if payment_method is not None and payment_method.is_paypal_checkout:
            # Mark flow: the method exists since the payment step was submitted.
            if payment_method.set_remote_id(remote_order.id):
                method_repo.add(payment_method)
            order.select_payment_gateway(str(gateway.id))
            order.advance_checkout_step()
            flow = "mark"
        else:
            payment_method = PaymentMethod.for_shortcut_flow(str(gateway.id), remote_order.id)
            method_repo.add(payment_method)
            order.switch_checkout_flow(PAYPAL_CHECKOUT_FLOW)
            order.assign_payment_method(str(gateway.id), str(payment_method.id))
            flow = "shortcut"

        order_repo.add(order)

        logger.info(
            "paypal_order_approved",
            order_id=str(order.id),
            remote_id=remote_order.id,
            flow=flow,
            checkout_step=order.checkout_step,
        )
        return checkout_url(str(order.id))


def approve_order(order_id: str, payment_gateway_id: str, paypal_order: dict) -> str:
    """Process an approval callback, one at a time per order. Returns the redirect URI."""
    with _approval_locks.hold(str(order_id)):
        return current_domain.process(
            ApproveOrder(
                order_id=order_id,
                payment_gateway_id=payment_gateway_id,
                paypal_order=json.dumps(paypal_order),
            ),
            asynchronous=False,
        )
