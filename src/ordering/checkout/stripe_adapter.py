"""Stripe Checkout adapter built on the stripe-python SDK."""

import stripe
import structlog

from ordering.checkout.port import CheckoutProvider, CheckoutSession
from ordering.errors import CollaboratorError

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_MAX_NETWORK_RETRIES = 2


class StripeCheckoutProvider(CheckoutProvider):
    """Creates one-line Stripe Checkout sessions for an order total.

    The SDK's HTTP client is configured with an explicit request timeout (in
    seconds) and a bounded number of network retries.
    """

    def __init__(
        self,
        api_key: str,
        success_url: str,
        cancel_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        max_network_retries: int = DEFAULT_MAX_NETWORK_RETRIES,
    ) -> None:
        self.api_key = api_key
        self.success_url = success_url
        self.cancel_url = cancel_url
        self.timeout = timeout
        self.max_network_retries = max_network_retries

        stripe.default_http_client = stripe.RequestsClient(timeout=timeout)
        stripe.max_network_retries = max_network_retries

    def create_session(self, order_ref: str, amount_minor_units: int, currency: str) -> CheckoutSession:
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                mode="payment",
                client_reference_id=order_ref,
                line_items=[
                    {
                        "price_data": {
                            "currency": currency.lower(),
                            "product_data": {"name": f"Order {order_ref}"},
                            "unit_amount": amount_minor_units,
                        },
                        "quantity": 1,
                    }
                ],
                success_url=self.success_url,
                cancel_url=self.cancel_url,
            )
        except stripe.StripeError as exc:
            logger.error("Stripe checkout session creation failed", order_ref=order_ref, error=str(exc))
            raise CollaboratorError("checkout provider", str(exc)) from exc

        return CheckoutSession(session_id=session.id, redirect_url=session.url)
