"""Repository for the Order aggregate.

Every write asserts the pricing invariant and applies an optimistic
concurrency check: the order's ``revision`` must match the stored one, and is
incremented on each successful write.
"""

import structlog
from protean.core.repository import BaseRepository

from ordering.domain import ordering
from ordering.errors import StaleOrderError
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.repository(part_of=Order)
class OrderRepository(BaseRepository):
    def add(self, order):
        order.assert_pricing_consistent()

        stored = self._dao.query.filter(id=str(order.id)).all().items
        if stored and (stored[0].revision or 0) != (order.revision or 0):
            logger.warning(
                "Rejected stale order write",
                order_id=str(order.id),
                loaded_revision=order.revision,
                stored_revision=stored[0].revision,
            )
            raise StaleOrderError(str(order.id), order.revision, stored[0].revision)

        order.revision = (order.revision or 0) + 1
        return super().add(order)

    def find_by_order_number(self, order_number: str) -> Order | None:
        orders = self._dao.query.filter(order_number=order_number).all().items
        return orders[0] if orders else None

    def latest_for_customer(self, customer_id: str) -> Order | None:
        orders = self._dao.query.filter(customer_id=str(customer_id)).order_by("-created_at").limit(1).all().items
        return orders[0] if orders else None

    def all_orders(self, batch_size: int = 100):
        """Iterate over every order, one page at a time."""
        offset = 0
        while True:
            batch = self._dao.query.order_by("created_at").offset(offset).limit(batch_size).all().items
            yield from batch
            if len(batch) < batch_size:
                return
            offset += batch_size
