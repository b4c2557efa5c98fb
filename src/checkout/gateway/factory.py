"""Builds and memoizes one PayPal SDK per gateway client id.

The factory is an ordinary object owned by the composition root (see
``checkout.gateway.set_sdk_factory``). SDK instances only hold connection
configuration and a cached access token, so sharing one per client id is
safe.
"""

import threading

import httpx
import structlog

from checkout.gateway.port import CheckoutSdk
from checkout.gateway.sdk import PayPalCheckoutSdk

logger = structlog.get_logger(__name__)


class CheckoutSdkFactory:
    def __init__(self, transport: httpx.BaseTransport | None = None, timeout: float | None = None) -> None:
        self.transport = transport
        self.timeout = timeout
        self._instances: dict[str, CheckoutSdk] = {}
        self._lock = threading.Lock()

    def get(self, gateway) -> CheckoutSdk:
        """Return the SDK for a PaymentGateway, building it on first use."""
        with self._lock:
            sdk = self._instances.get(gateway.client_id)
            if sdk is None:
                sdk = self._build(gateway)
                self._instances[gateway.client_id] = sdk
                logger.info("paypal_sdk_created", client_id=gateway.client_id, mode=gateway.mode)
            return sdk

    def forget(self, client_id: str) -> None:
        """Drop a cached SDK, e.g. after the gateway's credentials changed."""
        with self._lock:
            sdk = self._instances.pop(client_id, None)
        if isinstance(sdk, PayPalCheckoutSdk):
            sdk.close()

    def _build(self, gateway) -> CheckoutSdk:
        return PayPalCheckoutSdk(
            client_id=gateway.client_id,
            secret=gateway.secret,
            mode=gateway.mode,
            transport=self.transport,
            timeout=self.timeout,
        )
