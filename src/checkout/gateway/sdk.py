"""httpx adapter for the PayPal Checkout REST API.

Authentication is the OAuth2 client-credentials grant. ``ClientCredentialsAuth``
is an ``httpx.Auth`` flow that fetches a bearer token on first use, reuses it
until shortly before it expires, and refreshes it once when PayPal answers
401 (revoked or rotated token).
"""

import time

import httpx
import structlog

from checkout.exceptions import RemoteCallError
from checkout.gateway.port import DEFAULT_REFERENCE_ID, CheckoutSdk, base_url_for

logger = structlog.get_logger(__name__)

TOKEN_PATH = "/v1/oauth2/token"
CLIENT_TOKEN_PATH = "/v1/identity/generate-token"

# Renew tokens this many seconds before PayPal considers them expired.
TOKEN_EXPIRY_LEEWAY = 60


def _decode(response: httpx.Response):
    if not response.content:
        return {}
    try:
        return response.json()
    except ValueError:
        return response.text


def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    raise RemoteCallError(response.status_code, body=_decode(response))


class ClientCredentialsAuth(httpx.Auth):
    """Bearer auth backed by PayPal's client-credentials token endpoint."""

    requires_response_body = True

    def __init__(self, client_id: str, secret: str, clock=time.monotonic) -> None:
        self.client_id = client_id
        self.secret = secret
        self._clock = clock
        self._access_token: str | None = None
        self._expires_at = 0.0

    def _token_request(self, request: httpx.Request) -> httpx.Request:
        token_request = httpx.Request(
            "POST",
            request.url.join(TOKEN_PATH),
            data={"grant_type": "client_credentials"},
            headers={"Accept": "application/json"},
        )
        return next(httpx.BasicAuth(self.client_id, self.secret).auth_flow(token_request))

    def _store_token(self, response: httpx.Response) -> None:
        _raise_for_status(response)
        payload = response.json()
        self._access_token = payload["access_token"]
        expires_in = int(payload.get("expires_in", 0))
        self._expires_at = self._clock() + max(expires_in - TOKEN_EXPIRY_LEEWAY, 0)

    def _token_is_fresh(self) -> bool:
        return self._access_token is not None and self._clock() < self._expires_at

    def auth_flow(self, request: httpx.Request):
        if not self._token_is_fresh():
            token_response = yield self._token_request(request)
            self._store_token(token_response)

        request.headers["Authorization"] = f"Bearer {self._access_token}"
        response = yield request

        if response.status_code == 401:
            logger.info("paypal_token_refresh", client_id=self.client_id)
            token_response = yield self._token_request(request)
            self._store_token(token_response)
            request.headers["Authorization"] = f"Bearer {self._access_token}"
            yield request


class PayPalCheckoutSdk(CheckoutSdk):
    """Production adapter speaking to api-m.paypal.com (or the sandbox)."""

    def __init__(
        self,
        client_id: str,
        secret: str,
        mode: str = "test",
        transport: httpx.BaseTransport | None = None,
        timeout: float | None = None,
    ) -> None:
        self.client_id = client_id
        self.secret = secret
        self.mode = mode
        self.base_url = base_url_for(mode)
        client_options = {
            "base_url": self.base_url,
            "auth": ClientCredentialsAuth(client_id, secret),
            "headers": {"Content-Type": "application/json"},
        }
        if transport is not None:
            client_options["transport"] = transport
        if timeout is not None:
            client_options["timeout"] = timeout
        self._client = httpx.Client(**client_options)

    def close(self) -> None:
        self._client.close()

    def _send(self, method: str, path: str, **kwargs):
        response = self._client.request(method, path, **kwargs)
        _raise_for_status(response)
        return _decode(response)

    def get_access_token(self) -> dict:
        response = self._client.post(
            TOKEN_PATH,
            data={"grant_type": "client_credentials"},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            auth=(self.client_id, self.secret),
        )
        _raise_for_status(response)
        return response.json()

    def get_client_token(self) -> dict:
        return self._send("POST", CLIENT_TOKEN_PATH)

    def create_order(self, params: dict) -> dict:
        return self._send("POST", "/v2/checkout/orders", json=params)

    def get_order(self, remote_id: str) -> dict:
        return self._send("GET", f"/v2/checkout/orders/{remote_id}")

    def update_order(self, remote_id: str, params: dict) -> dict:
        purchase_unit = params["purchase_units"][0]
        patch = [
            {
                "op": "replace",
                "path": f"/purchase_units/@reference_id=='{DEFAULT_REFERENCE_ID}'",
                "value": purchase_unit,
            }
        ]
        return self._send("PATCH", f"/v2/checkout/orders/{remote_id}", json=patch)

    def authorize_order(self, remote_id: str) -> dict:
        return self._send("POST", f"/v2/checkout/orders/{remote_id}/authorize")

    def capture_order(self, remote_id: str) -> dict:
        return self._send("POST", f"/v2/checkout/orders/{remote_id}/capture")

    def capture_payment(self, authorization_id: str, params: dict) -> dict:
        return self._send("POST", f"/v2/payments/authorizations/{authorization_id}/capture", json=params)

    def reauthorize_payment(self, authorization_id: str, params: dict) -> dict:
        return self._send("POST", f"/v2/payments/authorizations/{authorization_id}/reauthorize", json=params)

    def refund_payment(self, capture_id: str, params: dict) -> dict:
        return self._send("POST", f"/v2/payments/captures/{capture_id}/refund", json=params)

    def void_payment(self, authorization_id: str) -> int:
        response = self._client.post(f"/v2/payments/authorizations/{authorization_id}/void")
        _raise_for_status(response)
        return response.status_code
