"""Create a PayPal payment method when the payment step is submitted ("mark" flow)."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from checkout.domain import checkout, logger
from checkout.order.order import Order
from checkout.payment_gateway.payment_gateway import PaymentGateway
from checkout.payment_method.payment_method import PaymentMethod
from checkout.profile.profile import CustomerProfile


@checkout.command(part_of="PaymentMethod")
class CreatePaymentMethod:
    order_id = Identifier(required=True)
    payment_gateway_id = Identifier(required=True)


@checkout.command_handler(part_of=PaymentMethod)
class CreatePaymentMethodHandler:
    @handle(CreatePaymentMethod)
    def create_payment_method(self, command):
        order_repo = current_domain.repository_for(Order)
        order = order_repo.get(command.order_id)
        gateway = current_domain.repository_for(PaymentGateway).get(command.payment_gateway_id)

        # The billing address is collected by PayPal, so the profile starts empty.
        profile = CustomerProfile.build(customer_id=order.customer_id)
        current_domain.repository_for(CustomerProfile).add(profile)

        payment_method = PaymentMethod.for_mark_flow(str(gateway.id), billing_profile_id=str(profile.id))
        current_domain.repository_for(PaymentMethod).add(payment_method)

        order.assign_payment_method(str(gateway.id), str(payment_method.id))
        order_repo.add(order)

        logger.info(
            "payment_method_created",
            order_id=str(order.id),
            payment_method_id=str(payment_method.id),
            flow=payment_method.flow,
        )
        return str(payment_method.id)
