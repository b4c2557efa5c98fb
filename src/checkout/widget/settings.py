"""Settings the browser needs to render the PayPal widget for an order."""

from dataclasses import asdict, dataclass
from urllib.parse import urlencode

from checkout.domain import logger
from checkout.exceptions import RemoteCallError
from checkout.widget.solutions import PaymentSolution, capabilities_for

PAYPAL_SDK_URL = "https://www.paypal.com/sdk/js"
CHECKOUT_ROUTE_PREFIX = "/paypal/checkout"


@dataclass(frozen=True)
class WidgetSettings:
    solution: str
    src: str
    onCreateUrl: str
    onApproveUrl: str
    clientToken: str | None = None

    def to_dict(self) -> dict:
        return {key: value for key, value in asdict(self).items() if value is not None}


def create_url(payment_gateway_id: str, order_id: str) -> str:
    return f"{CHECKOUT_ROUTE_PREFIX}/create/{payment_gateway_id}/{order_id}"


def approve_url(payment_gateway_id: str, order_id: str) -> str:
    return f"{CHECKOUT_ROUTE_PREFIX}/approve/{payment_gateway_id}/{order_id}"


def sdk_script_url(gateway, currency_code: str, commit: bool = False) -> str:
    capabilities = capabilities_for(gateway.payment_solution)
    query = {}
    if capabilities.sdk_components:
        query["components"] = capabilities.sdk_components
    query["client-id"] = gateway.client_id
    query["intent"] = gateway.intent
    query["currency"] = currency_code
    if capabilities.renders_buttons:
        query["commit"] = "true" if commit else "false"
    return f"{PAYPAL_SDK_URL}?{urlencode(query)}"


def build_widget_settings(gateway, order, sdk, commit: bool = False) -> WidgetSettings | None:
    """Settings for the gateway's payment solution, or None when nothing is rendered.

    The redirect solution has no widget, and Hosted Fields cannot render
    without a client token, so a failed token request also yields None.
    """
    capabilities = capabilities_for(gateway.payment_solution)
    if capabilities.is_offsite:
        return None

    client_token = None
    if capabilities.needs_client_token:
        try:
            client_token = sdk.get_client_token()["client_token"]
        except RemoteCallError as exc:
            logger.error(
                "paypal_client_token_failed",
                payment_gateway_id=str(gateway.id),
                status_code=exc.status_code,
                body=exc.body,
            )
            return None

    return WidgetSettings(
        solution=PaymentSolution(gateway.payment_solution).value,
        src=sdk_script_url(gateway, order.currency_code, commit=commit),
        onCreateUrl=create_url(str(gateway.id), str(order.id)),
        onApproveUrl=approve_url(str(gateway.id), str(order.id)),
        clientToken=client_token,
    )
