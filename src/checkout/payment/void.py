"""Void an authorization that will not be captured."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from checkout.domain import checkout, logger
from checkout.exceptions import PaymentGatewayError, RemoteCallError
from checkout.payment.payment import Payment
from checkout.payment.remote import gateway_and_sdk, gateway_failure
from checkout.payment.states import PaymentState

VOID_SUCCESS_STATUS = 204


@checkout.command(part_of="Payment")
class VoidPayment:
    payment_id = Identifier(required=True)


@checkout.command_handler(part_of=Payment)
class VoidPaymentHandler:
    @handle(VoidPayment)
    def void_payment(self, command):
        repo = current_domain.repository_for(Payment)
        payment = repo.get(command.payment_id)
        payment.assert_state(PaymentState.AUTHORIZATION)

        _, sdk = gateway_and_sdk(payment.payment_gateway_id)
        try:
            status_code = sdk.void_payment(payment.remote_id)
        except RemoteCallError as exc:
            raise gateway_failure(
                "An error occurred while voiding the payment.", exc, payment_id=str(payment.id)
            ) from exc

        if status_code != VOID_SUCCESS_STATUS:
            logger.error("paypal_void_unexpected_status", payment_id=str(payment.id), status_code=status_code)
            raise PaymentGatewayError("An error occurred while voiding the payment.")

        payment.record_void()
        repo.add(payment)
        logger.info("payment_voided", payment_id=str(payment.id))
