"""PayPal Checkout SDK port (abstract interface).

One method per remote action of the Orders v2 / Payments v2 API. Every
method returns the decoded JSON body, except ``void_payment`` which returns
the HTTP status code (a successful void has no body). Non-2xx responses
raise ``checkout.exceptions.RemoteCallError``; adapters never retry.
"""

from abc import ABC, abstractmethod

LIVE_BASE_URL = "https://api-m.paypal.com"
SANDBOX_BASE_URL = "https://api-m.sandbox.paypal.com"

# The single purchase unit every order request carries.
DEFAULT_REFERENCE_ID = "default"


def base_url_for(mode: str | None) -> str:
    return LIVE_BASE_URL if mode == "live" else SANDBOX_BASE_URL


class CheckoutSdk(ABC):
    """Abstract PayPal Checkout API client."""

    @abstractmethod
    def get_access_token(self) -> dict:
        """Fetch an OAuth2 access token with the client credentials."""
        ...

    @abstractmethod
    def get_client_token(self) -> dict:
        """Fetch a client token for the Hosted Fields widget."""
        ...

    @abstractmethod
    def create_order(self, params: dict) -> dict: ...

    @abstractmethod
    def get_order(self, remote_id: str) -> dict: ...

    @abstractmethod
    def update_order(self, remote_id: str, params: dict) -> dict:
        """Replace the default purchase unit of an existing remote order."""
        ...

    @abstractmethod
    def authorize_order(self, remote_id: str) -> dict: ...

    @abstractmethod
    def capture_order(self, remote_id: str) -> dict: ...

    @abstractmethod
    def capture_payment(self, authorization_id: str, params: dict) -> dict: ...

    @abstractmethod
    def reauthorize_payment(self, authorization_id: str, params: dict) -> dict: ...

    @abstractmethod
    def refund_payment(self, capture_id: str, params: dict) -> dict: ...

    @abstractmethod
    def void_payment(self, authorization_id: str) -> int: ...
