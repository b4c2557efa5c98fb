"""PayPal SDK factory access.

Provides get_sdk_factory() / set_sdk_factory() to swap implementations:
- FakeSdkFactory (in-memory processor) for development and testing
- CheckoutSdkFactory (httpx against PayPal) installed by the app when
  credentials are configured
"""

from checkout.gateway.fake_adapter import FakeSdkFactory

_current_factory = None


def get_sdk_factory():
    """Return the active SDK factory. Defaults to FakeSdkFactory."""
    global _current_factory
    if _current_factory is None:
        _current_factory = FakeSdkFactory()
    return _current_factory


def set_sdk_factory(factory) -> None:
    """Install the SDK factory used by command handlers and endpoints."""
    global _current_factory
    _current_factory = factory


def reset_sdk_factory() -> None:
    """Reset to the default factory."""
    global _current_factory
    _current_factory = None


def sdk_for(gateway):
    """Shortcut for ``get_sdk_factory().get(gateway)``."""
    return get_sdk_factory().get(gateway)
