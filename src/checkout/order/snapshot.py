"""Loads an order's addresses and builds the PayPal order request for it."""

from protean.utils.globals import current_domain

from checkout.gateway.request_builder import build_order_request
from checkout.profile.profile import CustomerProfile


def _profile_address(profile_id):
    if not profile_id:
        return None
    profile = current_domain.repository_for(CustomerProfile).get(profile_id)
    return profile.address


def remote_order_request(order, gateway) -> dict:
    """The order as PayPal should see it, with billing and shipping addresses."""
    shipping_address = _profile_address(order.shipping_profile_id) if gateway.ships_orders() else None
    return build_order_request(
        order,
        gateway,
        billing_address=_profile_address(order.billing_profile_id),
        shipping_address=shipping_address,
    )
