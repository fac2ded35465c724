"""Price change log: who changed which negotiated prices, and from what."""

from uuid import uuid4

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.pricing.events import CustomerPricesUpdated
from ordering.pricing.price_list import CustomerPriceList


@ordering.projection
class PriceChangeLog:
    entry_id = Identifier(identifier=True, required=True)
    customer_id = Identifier(required=True)
    changes = Text(required=True)  # JSON: list of {product_id, product_name, previous_price, new_price}
    updated_by = String(required=True)
    updated_at = DateTime(required=True)


@ordering.projector(projector_for=PriceChangeLog, aggregates=[CustomerPriceList])
class PriceChangeLogProjector:
    @on(CustomerPricesUpdated)
    def on_customer_prices_updated(self, event):
        current_domain.repository_for(PriceChangeLog).add(
            PriceChangeLog(
                entry_id=str(uuid4()),
                customer_id=event.customer_id,
                changes=event.changes,
                updated_by=event.updated_by,
                updated_at=event.updated_at,
            )
        )


def price_history(customer_id, limit=50):
    return (
        current_domain.repository_for(PriceChangeLog)
        ._dao.query.filter(customer_id=str(customer_id))
        .order_by("-updated_at")
        .limit(limit)
        .all()
        .items
    )
