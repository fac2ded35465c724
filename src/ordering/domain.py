"""Ordering bounded context: negotiated pricing, carts, orders, payments and invoices.

Carts and orders are standard CQRS aggregates persisted as whole documents.
Customer price lists drive the effective unit price snapshotted into each
cart line, and orders keep that snapshot for life.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
