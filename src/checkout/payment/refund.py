"""Refund all or part of a captured payment."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from checkout.domain import checkout, logger
from checkout.exceptions import PaymentGatewayError, RemoteCallError
from checkout.payment.payment import Payment
from checkout.payment.remote import gateway_and_sdk, gateway_failure
from checkout.shared.money import Price


@checkout.command(part_of="Payment")
class RefundPayment:
    """Refund ``amount``, or whatever has not been refunded yet."""

    payment_id = Identifier(required=True)
    amount = String(max_length=32)


@checkout.command_handler(part_of=Payment)
class RefundPaymentHandler:
    @handle(RefundPayment)
    def refund_payment(self, command):
        repo = current_domain.repository_for(Payment)
        payment = repo.get(command.payment_id)

        requested = Price.of(command.amount, payment.amount.currency_code) if command.amount else None
        # Validates state and balance before PayPal is contacted.
        amount, refunded_total, target_state = payment.plan_refund(requested)

        _, sdk = gateway_and_sdk(payment.payment_gateway_id)
        try:
            response = sdk.refund_payment(payment.remote_id, {"amount": amount.to_remote()})
        except RemoteCallError as exc:
            raise gateway_failure(
                "An error occurred while refunding the payment.", exc, payment_id=str(payment.id)
            ) from exc

        remote_state = (response.get("status") or "").upper()
        if remote_state != "COMPLETED":
            raise PaymentGatewayError(
                f'Invalid state returned by PayPal. Expected: ("COMPLETED"), Actual: ("{remote_state}").'
            )

        payment.record_refund(amount)
        repo.add(payment)
        logger.info(
            "payment_refunded",
            payment_id=str(payment.id),
            amount=amount.number,
            refunded_amount=refunded_total.number,
            state=target_state.value,
        )
