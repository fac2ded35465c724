"""Admin line-item correction: command and handler.

Corrections arrive as a JSON list. Each entry names a ``product_id`` and any
of ``quantity``, ``discount_price`` (null removes the discount) or
``line_subtotal`` (back-solves the discount price). Keys left out are left
unchanged on the line.
"""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.shared.principal import Principal

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class CorrectOrderLines:
    actor_id = Identifier(required=True)
    actor_email = String(max_length=255)
    actor_level = Integer(default=0)
    order_id = Identifier(required=True)
    corrections = Text()  # JSON: list of per-line corrections
    shipping_cost = Float(min_value=0.0)  # Unchanged when omitted
    expected_revision = Integer()  # Revision the admin was looking at


@ordering.command_handler(part_of=Order)
class CorrectOrderLinesHandler:
    @handle(CorrectOrderLines)
    def correct_order_lines(self, command):
        actor = Principal.from_command(command)
        actor.require_admin("correct order lines")

        corrections = json.loads(command.corrections) if isinstance(command.corrections, str) else []

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.assert_revision(command.expected_revision)
        order.correct_lines(corrections, actor.label, shipping_cost=command.shipping_cost)
        repo.add(order)

        logger.info(
            "Order lines corrected",
            order_id=str(order.id),
            subtotal=order.pricing.subtotal,
            shipping_cost=order.pricing.shipping_cost,
            total_amount=order.pricing.total_amount,
            updated_by=actor.label,
        )
        return order.pricing.total_amount
