"""Payment state changes on an order: commands and handler.

Checkout and remittance commands are issued by the payment orchestration
services once the external provider or blob store has done its part; review
and confirmation commands are issued by administrators.
"""

from protean import handle
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.shared.principal import Principal


@ordering.command(part_of="Order")
class RecordCardCheckout:
    actor_id = Identifier(required=True)
    actor_email = String(max_length=255)
    actor_level = Integer(default=0)
    order_id = Identifier(required=True)
    session_id = String(required=True, max_length=255)


@ordering.command(part_of="Order")
class RequestTTPayment:
    actor_id = Identifier(required=True)
    actor_email = String(max_length=255)
    actor_level = Integer(default=0)
    order_id = Identifier(required=True)


@ordering.command(part_of="Order")
class AttachRemittanceFile:
    actor_id = Identifier(required=True)
    actor_email = String(max_length=255)
    actor_level = Integer(default=0)
    order_id = Identifier(required=True)
    file_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    url = String(required=True, max_length=2048)
    blob_path = String(required=True, max_length=1024)


@ordering.command(part_of="Order")
class DetachRemittanceFile:
    actor_id = Identifier(required=True)
    actor_email = String(max_length=255)
    actor_level = Integer(default=0)
    order_id = Identifier(required=True)
    file_id = Identifier(required=True)
    dangling = Boolean(default=False)  # Blob already gone; skip the payment window check


@ordering.command(part_of="Order")
class ReviewTTPayment:
    actor_id = Identifier(required=True)
    actor_email = String(max_length=255)
    actor_level = Integer(default=0)
    order_id = Identifier(required=True)
    approved = Boolean(required=True)
    admin_note = Text()


@ordering.command(part_of="Order")
class ConfirmPayment:
    actor_id = Identifier(required=True)
    actor_email = String(max_length=255)
    actor_level = Integer(default=0)
    order_id = Identifier(required=True)
    payment_reference = String(max_length=255)


@ordering.command(part_of="Order")
class RejectPayment:
    actor_id = Identifier(required=True)
    actor_email = String(max_length=255)
    actor_level = Integer(default=0)
    order_id = Identifier(required=True)
    reason = Text()


@ordering.command_handler(part_of=Order)
class OrderPaymentHandler:
    @staticmethod
    def _load_for(command, action, admin_only=False):
        actor = Principal.from_command(command)
        if admin_only:
            actor.require_admin(action)
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        actor.require_owner_or_admin(order.customer_id, action)
        return actor, repo, order

    @handle(RecordCardCheckout)
    def record_card_checkout(self, command):
        actor, repo, order = self._load_for(command, "pay for orders")
        order.record_card_checkout(command.session_id, actor.label)
        repo.add(order)

    @handle(RequestTTPayment)
    def request_tt_payment(self, command):
        actor, repo, order = self._load_for(command, "pay for orders")
        if order.request_tt(actor.label):
            repo.add(order)

    @handle(AttachRemittanceFile)
    def attach_remittance_file(self, command):
        actor, repo, order = self._load_for(command, "upload remittance evidence")
        order.attach_remittance(
            file_id=command.file_id,
            name=command.name,
            url=command.url,
            blob_path=command.blob_path,
            actor_label=actor.label,
        )
        repo.add(order)

    @handle(DetachRemittanceFile)
    def detach_remittance_file(self, command):
        if command.dangling:
            actor, repo, order = self._load_for(command, "reconcile remittance evidence", admin_only=True)
            order.drop_dangling_remittance(command.file_id, actor.label)
        else:
            actor, repo, order = self._load_for(command, "delete remittance evidence")
            order.detach_remittance(command.file_id, actor.label)
        repo.add(order)

    @handle(ReviewTTPayment)
    def review_tt_payment(self, command):
        actor, repo, order = self._load_for(command, "review bank transfers", admin_only=True)
        order.review_tt(command.approved, actor.label, note=command.admin_note)
        repo.add(order)

    @handle(ConfirmPayment)
    def confirm_payment(self, command):
        actor, repo, order = self._load_for(command, "confirm payments", admin_only=True)
        order.confirm_payment(actor.label, reference=command.payment_reference)
        repo.add(order)

    @handle(RejectPayment)
    def reject_payment(self, command):
        actor, repo, order = self._load_for(command, "reject payments", admin_only=True)
        order.reject_payment(actor.label, reason=command.reason)
        repo.add(order)
