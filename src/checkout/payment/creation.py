"""Pay for an order with its approved PayPal order.

Pushes the latest order snapshot to PayPal (totals may have changed since
approval), re-reads the PayPal order, then captures or authorizes it
according to the PayPal order's intent and maps the result onto a new
local Payment.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from checkout.domain import checkout, logger
from checkout.exceptions import PaymentGatewayError, RemoteCallError
from checkout.gateway.remote_order import PAYABLE_STATUSES, RemoteOrder
from checkout.order.order import Order
from checkout.order.snapshot import remote_order_request
from checkout.payment.payment import Payment
from checkout.payment.remote import gateway_and_sdk, gateway_failure, parse_remote_time
from checkout.payment.states import PaymentState, map_payment_state
from checkout.payment_method.payment_method import PaymentMethod
from checkout.shared.money import Price


@checkout.command(part_of="Payment")
class CreatePayment:
    order_id = Identifier(required=True)


@checkout.command_handler(part_of=Payment)
class CreatePaymentHandler:
    @handle(CreatePayment)
    def create_payment(self, command):
        order = current_domain.repository_for(Order).get(command.order_id)
        if not order.payment_method_id or not order.payment_gateway_id:
            raise ValidationError({"order_id": ["The order has no PayPal payment method"]})

        payment_method = current_domain.repository_for(PaymentMethod).get(order.payment_method_id)
        gateway, sdk = gateway_and_sdk(order.payment_gateway_id)
        remote_id = payment_method.remote_id
        if not remote_id:
            raise PaymentGatewayError("The payment method was never approved in PayPal.")

        log = logger.bind(order_id=str(order.id), remote_id=remote_id)
        try:
            sdk.update_order(remote_id, remote_order_request(order, gateway))
            remote_order = RemoteOrder.from_response(sdk.get_order(remote_id))
        except RemoteCallError as exc:
            raise gateway_failure("Could not retrieve the order in PayPal.", exc, order_id=str(order.id)) from exc

        if remote_order.status not in PAYABLE_STATUSES:
            log.warning("paypal_order_not_payable", status=remote_order.status)
            raise PaymentGatewayError("Wrong remote order status.")

        intent = (remote_order.intent or gateway.intent).lower()
        try:
            if intent == "capture":
                remote_payment = RemoteOrder.from_response(sdk.capture_order(remote_id)).first_capture()
            else:
                remote_payment = RemoteOrder.from_response(sdk.authorize_order(remote_id)).first_authorization()
        except RemoteCallError as exc:
            raise gateway_failure(
                "The provided payment method is no longer valid.", exc, order_id=str(order.id)
            ) from exc

        if remote_payment is None:
            raise PaymentGatewayError(f"PayPal returned no {intent} for the order.")

        remote_state = remote_payment["status"].lower()
        state = map_payment_state(intent, remote_state)

        payment = Payment.create(
            order_id=str(order.id),
            payment_gateway_id=str(gateway.id),
            amount=order.total_price,
            payment_method_id=str(payment_method.id),
        )
        payment.record_remote_payment(
            state=state,
            remote_id=remote_payment["id"],
            remote_state=remote_state,
            amount=Price.from_remote(remote_payment["amount"]),
            expires_at=parse_remote_time(remote_payment.get("expiration_time")),
        )
        current_domain.repository_for(Payment).add(payment)

        log.info(
            "payment_created",
            payment_id=str(payment.id),
            state=payment.state,
            authorized=state == PaymentState.AUTHORIZATION,
        )
        return str(payment.id)
