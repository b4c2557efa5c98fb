"""Register or reconfigure a PayPal gateway, checking the credentials first."""

from types import SimpleNamespace

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from checkout.domain import checkout, logger
from checkout.exceptions import RemoteCallError
from checkout.gateway import get_sdk_factory
from checkout.payment_gateway.payment_gateway import PaymentGateway

_OPTIONAL_SETTINGS = (
    "label",
    "mode",
    "intent",
    "shipping_preference",
    "payment_solution",
    "update_billing_profile",
    "update_shipping_profile",
    "shipping_enabled",
)


@checkout.command(part_of="PaymentGateway")
class ConfigureGateway:
    payment_gateway_id = Identifier(required=True)
    client_id = String(required=True, max_length=255)
    secret = String(required=True, max_length=255)
    label = String(max_length=255)
    mode = String(max_length=10)
    intent = String(max_length=10)
    shipping_preference = String(max_length=30)
    payment_solution = String(max_length=30)
    update_billing_profile = Boolean()
    update_shipping_profile = Boolean()
    shipping_enabled = Boolean()
    verify_credentials = Boolean(default=True)


def verify_credentials(client_id: str, secret: str, mode: str) -> None:
    """Fetch an access token; ValidationError when PayPal refuses the credentials."""
    factory = get_sdk_factory()
    factory.forget(client_id)
    probe = SimpleNamespace(client_id=client_id, secret=secret, mode=mode)
    try:
        factory.get(probe).get_access_token()
    except RemoteCallError as exc:
        logger.error("paypal_credentials_rejected", client_id=client_id, status_code=exc.status_code, body=exc.body)
        raise ValidationError({"client_id": ["Invalid client_id or secret specified."]}) from exc
    finally:
        # Never keep an SDK built from unsaved credentials.
        factory.forget(client_id)


@checkout.command_handler(part_of=PaymentGateway)
class ConfigureGatewayHandler:
    @handle(ConfigureGateway)
    def configure_gateway(self, command):
        settings = {
            key: getattr(command, key) for key in _OPTIONAL_SETTINGS if getattr(command, key) is not None
        }
        repo = current_domain.repository_for(PaymentGateway)
        try:
            gateway = repo.get(command.payment_gateway_id)
        except ObjectNotFoundError:
            gateway = None

        if command.verify_credentials:
            mode = settings.get("mode") or (gateway.mode if gateway else None) or "test"
            verify_credentials(command.client_id, command.secret, mode)

        if gateway is None:
            gateway = PaymentGateway.register(
                command.payment_gateway_id,
                client_id=command.client_id,
                secret=command.secret,
                **settings,
            )
        else:
            get_sdk_factory().forget(gateway.client_id)
            gateway.reconfigure(client_id=command.client_id, secret=command.secret, **settings)

        repo.add(gateway)
        logger.info("payment_gateway_configured", payment_gateway_id=str(gateway.id), mode=gateway.mode)
        return str(gateway.id)
