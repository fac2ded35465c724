"""Order cancellation: command and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.shared.principal import Principal


@ordering.command(part_of="Order")
class CancelOrder:
    """Cancel a pending order. Allowed for the ordering customer and administrators."""

    actor_id = Identifier(required=True)
    actor_email = String(max_length=255)
    actor_level = Integer(default=0)
    order_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        actor = Principal.from_command(command)
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        actor.require_owner_or_admin(order.customer_id, "cancel orders")

        order.cancel(actor.label)
        repo.add(order)
