"""Checkout bounded context: PayPal order approval, payments and refunds.

Bridges the browser-side PayPal widgets (Smart Payment Buttons, Hosted
Fields) to local order, payment method and payment state, and reconciles
the PayPal order/payment lifecycle with the local Payment state machine.
"""

import structlog
from protean.domain import Domain

checkout = Domain(name="checkout")

logger = structlog.get_logger(__name__)
