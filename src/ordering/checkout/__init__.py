"""Checkout provider factory.

``CHECKOUT_PROVIDER`` selects ``fake`` (default) or ``stripe``. The Stripe
adapter reads ``STRIPE_API_KEY``, ``CHECKOUT_SUCCESS_URL``, ``CHECKOUT_CANCEL_URL``,
``CHECKOUT_TIMEOUT`` (seconds) and ``CHECKOUT_MAX_RETRIES``.
"""

import os

from ordering.checkout.port import CheckoutProvider

_current_provider: CheckoutProvider | None = None


def checkout_currency() -> str:
    return os.environ.get("CHECKOUT_CURRENCY", "USD")


def get_checkout_provider() -> CheckoutProvider:
    """Return the configured checkout provider (singleton)."""
    global _current_provider
    if _current_provider is None:
        adapter = os.environ.get("CHECKOUT_PROVIDER", "fake")
        if adapter == "fake":
            from ordering.checkout.fake_adapter import FakeCheckoutProvider

            _current_provider = FakeCheckoutProvider()
        elif adapter == "stripe":
            from ordering.checkout.stripe_adapter import StripeCheckoutProvider

            _current_provider = StripeCheckoutProvider(
                api_key=os.environ["STRIPE_API_KEY"],
                success_url=os.environ.get("CHECKOUT_SUCCESS_URL", "http://localhost:3000/payment/success"),
                cancel_url=os.environ.get("CHECKOUT_CANCEL_URL", "http://localhost:3000/payment/cancel"),
                timeout=float(os.environ.get("CHECKOUT_TIMEOUT", "10")),
                max_network_retries=int(os.environ.get("CHECKOUT_MAX_RETRIES", "2")),
            )
        else:
            raise ValueError(f"Unknown checkout provider: {adapter}")
    return _current_provider


def set_checkout_provider(provider: CheckoutProvider) -> None:
    """Override the active checkout provider (useful for tests)."""
    global _current_provider
    _current_provider = provider


def reset_checkout_provider() -> None:
    global _current_provider
    _current_provider = None
