"""Hosted-checkout provider port.

The provider creates a payment page for an order; the customer is redirected
there and capture is confirmed out of band.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CheckoutSession:
    """A hosted-checkout session created for one order."""

    session_id: str
    redirect_url: str | None = None


class CheckoutProvider(ABC):
    @abstractmethod
    def create_session(self, order_ref: str, amount_minor_units: int, currency: str) -> CheckoutSession:
        """Create a checkout session charging ``amount_minor_units`` for ``order_ref``.

        Raises ``CollaboratorError`` when the provider cannot be reached.
        """
        ...
