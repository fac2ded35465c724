"""Payment method selection: hosted card checkout or bank transfer (T/T)."""

import structlog
from protean.utils.globals import current_domain

from ordering.checkout import checkout_currency, get_checkout_provider
from ordering.checkout.port import CheckoutSession
from ordering.order.order import Order
from ordering.order.payment import RecordCardCheckout, RequestTTPayment
from ordering.shared.money import to_cents

logger = structlog.get_logger(__name__)


def start_card_checkout(actor, order_id) -> CheckoutSession:
    """Create a hosted-checkout session and record it on the order.

    The order is checked before the provider is called, so a rejected request
    never creates a session. If recording fails afterwards the session is
    simply never used.
    """
    order = current_domain.repository_for(Order).get(order_id)
    actor.require_owner_or_admin(order.customer_id, "pay for orders")
    order.assert_card_checkout_allowed()

    session = get_checkout_provider().create_session(
        order_ref=order.order_number,
        amount_minor_units=to_cents(order.pricing.total_amount),
        currency=checkout_currency(),
    )
    current_domain.process(
        RecordCardCheckout(**actor.as_command_fields(), order_id=str(order.id), session_id=session.session_id),
        asynchronous=False,
    )

    logger.info(
        "Card checkout started",
        order_id=str(order.id),
        order_number=order.order_number,
        session_id=session.session_id,
    )
    return session


def request_tt(actor, order_id) -> None:
    """Switch the order to bank transfer. Repeating the request changes nothing."""
    current_domain.process(
        RequestTTPayment(**actor.as_command_fields(), order_id=str(order_id)),
        asynchronous=False,
    )
