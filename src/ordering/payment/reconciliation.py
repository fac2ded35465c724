"""Periodic reconciliation between remittance blobs and order references."""

from dataclasses import dataclass, field

import structlog
from protean.utils.globals import current_domain

from ordering.blobstore import get_blob_store
from ordering.order.order import Order
from ordering.order.payment import DetachRemittanceFile
from ordering.payment.remittance import REMITTANCE_PREFIX
from ordering.shared.principal import SYSTEM

logger = structlog.get_logger(__name__)


@dataclass
class ReconciliationReport:
    orphaned_blobs: list[str] = field(default_factory=list)
    dangling_references: list[tuple[str, str]] = field(default_factory=list)  # (order_id, file_id)
    dry_run: bool = False


def reconcile_remittance(dry_run: bool = False, blob_store=None) -> ReconciliationReport:
    """Delete blobs no order references and drop references whose blob is gone.

    An upload still between its two steps looks like an orphan; run this when
    uploads are quiet, or with ``dry_run`` to only report.
    """
    blobs = blob_store or get_blob_store()
    stored = set(blobs.list(REMITTANCE_PREFIX))
    report = ReconciliationReport(dry_run=dry_run)

    referenced = set()
    for order in current_domain.repository_for(Order).all_orders():
        for remittance in order.remittance_files:
            referenced.add(remittance.blob_path)
            if remittance.blob_path not in stored:
                report.dangling_references.append((str(order.id), str(remittance.id)))

    report.orphaned_blobs = sorted(stored - referenced)

    if dry_run:
        logger.info(
            "Remittance reconciliation (dry run)",
            orphaned=len(report.orphaned_blobs),
            dangling=len(report.dangling_references),
        )
        return report

    for path in report.orphaned_blobs:
        blobs.delete(path)
        logger.info("Deleted orphaned remittance blob", path=path)

    for order_id, file_id in report.dangling_references:
        current_domain.process(
            DetachRemittanceFile(**SYSTEM.as_command_fields(), order_id=order_id, file_id=file_id, dangling=True),
            asynchronous=False,
        )
        logger.info("Dropped dangling remittance reference", order_id=order_id, file_id=file_id)

    return report
