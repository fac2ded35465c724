"""Fulfillment status changes made by administrators: command and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order, OrderStatus
from ordering.shared.principal import Principal


@ordering.command(part_of="Order")
class ChangeOrderStatus:
    actor_id = Identifier(required=True)
    actor_email = String(max_length=255)
    actor_level = Integer(default=0)
    order_id = Identifier(required=True)
    new_status = String(required=True, choices=OrderStatus)
    expected_revision = Integer()  # Revision the admin was looking at


@ordering.command_handler(part_of=Order)
class ChangeOrderStatusHandler:
    @handle(ChangeOrderStatus)
    def change_order_status(self, command):
        actor = Principal.from_command(command)
        actor.require_admin("change order status")

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.assert_revision(command.expected_revision)
        order.change_status(command.new_status, actor.label)
        repo.add(order)
