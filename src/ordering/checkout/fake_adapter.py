"""Configurable fake checkout provider for development and testing."""

from uuid import uuid4

from ordering.checkout.port import CheckoutProvider, CheckoutSession
from ordering.errors import CollaboratorError


class FakeCheckoutProvider(CheckoutProvider):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Checkout provider unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Checkout provider unavailable") -> None:
        """Configure provider behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_session(self, order_ref: str, amount_minor_units: int, currency: str) -> CheckoutSession:
        self.calls.append(
            {
                "method": "create_session",
                "order_ref": order_ref,
                "amount_minor_units": amount_minor_units,
                "currency": currency,
            }
        )
        if not self.should_succeed:
            raise CollaboratorError("checkout provider", self.failure_reason)

        session_id = f"cs_fake_{uuid4().hex[:16]}"
        return CheckoutSession(
            session_id=session_id,
            redirect_url=f"https://checkout.example.test/pay/{session_id}",
        )
