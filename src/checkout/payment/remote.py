"""Helpers shared by the handlers that call PayPal."""

from datetime import datetime

from protean.utils.globals import current_domain

from checkout.domain import logger
from checkout.exceptions import PaymentGatewayError, RemoteCallError
from checkout.gateway import sdk_for
from checkout.payment_gateway.payment_gateway import PaymentGateway


def gateway_and_sdk(payment_gateway_id):
    gateway = current_domain.repository_for(PaymentGateway).get(payment_gateway_id)
    return gateway, sdk_for(gateway)


def gateway_failure(message: str, error: RemoteCallError, **context) -> PaymentGatewayError:
    """Log PayPal's raw error body and return a generic gateway error to raise."""
    logger.error(
        "paypal_call_failed",
        status_code=error.status_code,
        body=error.body,
        **context,
    )
    return PaymentGatewayError(message)


def parse_remote_time(value: str | None) -> datetime | None:
    """PayPal timestamps are RFC 3339, usually with a trailing ``Z``."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
