"""Capture an authorized payment, reauthorizing it first when it went stale."""

from datetime import UTC, datetime

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from checkout.domain import checkout, logger
from checkout.exceptions import RemoteCallError
from checkout.payment.payment import Payment
from checkout.payment.remote import gateway_and_sdk, gateway_failure
from checkout.payment.states import PaymentState, map_payment_state
from checkout.shared.money import Price


@checkout.command(part_of="Payment")
class CapturePayment:
    """Capture all (default) or part of an authorization."""

    payment_id = Identifier(required=True)
    amount = String(max_length=32)


@checkout.command_handler(part_of=Payment)
class CapturePaymentHandler:
    @handle(CapturePayment)
    def capture_payment(self, command):
        repo = current_domain.repository_for(Payment)
        payment = repo.get(command.payment_id)
        payment.assert_state(PaymentState.AUTHORIZATION)

        amount = Price.of(command.amount, payment.amount.currency_code) if command.amount else payment.amount
        params = payment.capture_params(amount)
        gateway, sdk = gateway_and_sdk(payment.payment_gateway_id)

        reauthorized = payment.needs_reauthorization(datetime.now(UTC))
        try:
            if reauthorized:
                logger.info("paypal_reauthorize", payment_id=str(payment.id), remote_id=payment.remote_id)
                sdk.reauthorize_payment(payment.remote_id, {"amount": params["amount"]})
            response = sdk.capture_payment(payment.remote_id, params)
        except RemoteCallError as exc:
            raise gateway_failure(
                "An error occurred while capturing the authorized payment.",
                exc,
                payment_id=str(payment.id),
            ) from exc

        remote_state = response["status"].lower()
        # Raises for declines and states we cannot handle; success is always "completed".
        map_payment_state("capture", remote_state)

        payment.record_capture(
            amount=amount,
            remote_id=response.get("id") or payment.remote_id,
            remote_state=remote_state,
            reauthorized=reauthorized,
        )
        repo.add(payment)
        logger.info("payment_captured", payment_id=str(payment.id), amount=amount.number, reauthorized=reauthorized)
