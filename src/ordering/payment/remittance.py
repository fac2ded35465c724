"""Remittance evidence for bank transfer payments.

The blob store and the order live in different stores, so upload and delete
run as two steps. Uploads store the blob first and remove it again if the
order refuses the attachment; deletes remove the blob before the order
reference. Anything a crash leaves behind is picked up by
``reconcile_remittance``.
"""

from uuid import uuid4

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.blobstore import get_blob_store
from ordering.errors import CollaboratorError
from ordering.order.order import Order
from ordering.order.payment import AttachRemittanceFile, DetachRemittanceFile

logger = structlog.get_logger(__name__)

REMITTANCE_PREFIX = "remittance/"


def remittance_path(order_id, file_id, filename) -> str:
    safe_name = filename.replace("/", "_").replace("\\", "_")
    return f"{REMITTANCE_PREFIX}{order_id}/{file_id}_{safe_name}"


def upload_remittance(actor, order_id, filename: str, data: bytes, content_type: str | None = None) -> str:
    """Store the evidence and attach it to the order. Returns the new file id."""
    if not filename or not filename.strip():
        raise ValidationError({"name": ["File name is required"]})
    if not data:
        raise ValidationError({"content": ["File is empty"]})

    order = current_domain.repository_for(Order).get(order_id)
    actor.require_owner_or_admin(order.customer_id, "upload remittance evidence")
    order.assert_accepts_remittance()

    file_id = uuid4().hex
    path = remittance_path(order.id, file_id, filename.strip())
    blobs = get_blob_store()
    url = blobs.upload(path, data, content_type=content_type)

    try:
        current_domain.process(
            AttachRemittanceFile(
                **actor.as_command_fields(),
                order_id=str(order.id),
                file_id=file_id,
                name=filename.strip(),
                url=url,
                blob_path=path,
            ),
            asynchronous=False,
        )
    except Exception:
        logger.warning("Attaching remittance failed; removing uploaded blob", order_id=str(order.id), path=path)
        try:
            blobs.delete(path)
        except CollaboratorError as exc:
            logger.error("Orphaned remittance blob left for reconciliation", path=path, error=str(exc))
        raise

    logger.info("Remittance evidence uploaded", order_id=str(order.id), file_id=file_id, path=path)
    return file_id


def delete_remittance(actor, order_id, file_id) -> None:
    """Delete the blob, then drop the order's reference to it."""
    order = current_domain.repository_for(Order).get(order_id)
    actor.require_owner_or_admin(order.customer_id, "delete remittance evidence")
    order.assert_accepts_remittance()

    remittance = order.remittance_file(file_id)
    if remittance is None:
        raise ValidationError({"file_id": [f"Remittance file {file_id} not found"]})

    get_blob_store().delete(remittance.blob_path)
    current_domain.process(
        DetachRemittanceFile(**actor.as_command_fields(), order_id=str(order.id), file_id=str(file_id)),
        asynchronous=False,
    )
    logger.info("Remittance evidence deleted", order_id=str(order.id), file_id=str(file_id))
