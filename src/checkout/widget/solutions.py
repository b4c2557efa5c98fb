"""Payment solutions: how the PayPal widget is presented to the customer.

A gateway is configured with exactly one solution. Behaviour differences are
expressed as capability flags looked up once, not as subclasses.
"""

from dataclasses import dataclass
from enum import Enum


class PaymentSolution(Enum):
    SMART_PAYMENT_BUTTONS = "smart_payment_buttons"
    HOSTED_FIELDS = "hosted_fields"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class SolutionCapabilities:
    needs_client_token: bool
    renders_buttons: bool
    renders_card_fields: bool
    is_offsite: bool
    sdk_components: str | None = None


_CAPABILITIES = {
    PaymentSolution.SMART_PAYMENT_BUTTONS: SolutionCapabilities(
        needs_client_token=False,
        renders_buttons=True,
        renders_card_fields=False,
        is_offsite=False,
    ),
    PaymentSolution.HOSTED_FIELDS: SolutionCapabilities(
        needs_client_token=True,
        renders_buttons=False,
        renders_card_fields=True,
        is_offsite=False,
        sdk_components="hosted-fields",
    ),
    PaymentSolution.REDIRECT: SolutionCapabilities(
        needs_client_token=False,
        renders_buttons=False,
        renders_card_fields=False,
        is_offsite=True,
    ),
}


def capabilities_for(solution: PaymentSolution | str) -> SolutionCapabilities:
    return _CAPABILITIES[PaymentSolution(solution)]
