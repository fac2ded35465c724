"""Order summary: the listing view behind "my orders" and the admin order table."""

import json

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.events import (
    CardCheckoutStarted,
    OrderCancelled,
    OrderLinesCorrected,
    OrderPlaced,
    OrderStatusChanged,
    PaymentConfirmed,
    PaymentRejected,
    TTPaymentRequested,
)
from ordering.order.order import Order


@ordering.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    company_name = String()
    status = String(required=True)
    payment_status = String(required=True)
    payment_method = String()
    shipping_terms = String()
    item_count = Integer(default=0)
    total_amount = Float()
    created_at = DateTime()
    updated_at = DateTime()


@ordering.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else []
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                order_number=event.order_number,
                customer_id=event.customer_id,
                company_name=event.company_name,
                status="pending",
                payment_status="pending",
                shipping_terms=event.shipping_terms,
                item_count=len(items),
                total_amount=event.total_amount,
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    def _update(self, order_id, updated_at, **changes):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(order_id)
        for name, value in changes.items():
            setattr(summary, name, value)
        summary.updated_at = updated_at
        repo.add(summary)

    @on(OrderStatusChanged)
    def on_status_changed(self, event):
        self._update(event.order_id, event.updated_at, status=event.new_status)

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        self._update(event.order_id, event.updated_at, status="cancelled")

    @on(OrderLinesCorrected)
    def on_lines_corrected(self, event):
        items = json.loads(event.items) if isinstance(event.items, str) else []
        self._update(event.order_id, event.updated_at, item_count=len(items), total_amount=event.total_amount)

    @on(CardCheckoutStarted)
    def on_card_checkout_started(self, event):
        self._update(event.order_id, event.updated_at, payment_method="card")

    @on(TTPaymentRequested)
    def on_tt_requested(self, event):
        self._update(event.order_id, event.updated_at, payment_method="tt", payment_status="pending")

    @on(PaymentConfirmed)
    def on_payment_confirmed(self, event):
        self._update(event.order_id, event.updated_at, payment_status="paid")

    @on(PaymentRejected)
    def on_payment_rejected(self, event):
        self._update(event.order_id, event.updated_at, payment_status="failed")


def list_order_summaries(actor, customer_id=None, status=None, limit=100):
    """Newest first. Customers only ever see their own orders."""
    if not actor.is_admin:
        customer_id = actor.id

    filters = {}
    if customer_id is not None:
        filters["customer_id"] = str(customer_id)
    if status is not None:
        filters["status"] = status

    query = current_domain.repository_for(OrderSummary)._dao.query
    if filters:
        query = query.filter(**filters)
    return query.order_by("-created_at").limit(limit).all().items
