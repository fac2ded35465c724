"""Order placement: turn a customer's cart into a pending order.

``PlaceOrder`` is strict: any failure leaves no order behind and the cart
untouched. ``place_order()`` then clears the cart leniently; if that clear is
lost, the cart store recognises the converted cart on its next load.
"""

import json
import secrets
import string
from datetime import UTC, datetime
from enum import Enum

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.store import CartStore
from ordering.directory import get_customer_directory
from ordering.domain import ordering
from ordering.errors import EmptyCartError, MissingShippingAddressError
from ordering.order.order import Order, ShippingTerms
from ordering.shared import money
from ordering.shared.principal import Principal

logger = structlog.get_logger(__name__)

CFR_ESTIMATE_RATE = 0.05

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


class AddressType(Enum):
    DEFAULT = "default"  # Company address from the customer directory
    NEW = "new"  # Address entered at checkout


def generate_order_number(now: datetime | None = None) -> str:
    """``ORD-YYMMDD-HHMMSS-xx``: readable, not guaranteed unique."""
    now = now or datetime.now(UTC)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(2))
    return f"ORD-{now:%y%m%d}-{now:%H%M%S}-{suffix}"


def estimate_cfr_shipping(total_amount: float) -> float:
    """Display-only CFR freight quote. Never written to an order."""
    return money.round_to_cents(total_amount * CFR_ESTIMATE_RATE)


@ordering.command(part_of="Order")
class PlaceOrder:
    actor_id = Identifier(required=True)
    actor_email = String(max_length=255)
    actor_level = Integer(default=0)
    customer_id = Identifier(required=True)
    order_number = String(required=True, max_length=32)  # Idempotency key
    address_type = String(choices=AddressType, default=AddressType.DEFAULT.value)
    ship_to = Text()  # JSON: address block, required when address_type is "new"
    shipping_terms = String(choices=ShippingTerms, default=ShippingTerms.FOB.value)
    notes = Text()


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        actor = Principal.from_command(command)
        actor.require_owner_or_admin(command.customer_id, "place orders")

        order_repo = current_domain.repository_for(Order)
        existing = order_repo.find_by_order_number(command.order_number)
        if existing is not None:
            if str(existing.customer_id) != str(command.customer_id):
                raise ValidationError({"order_number": ["Order number is already in use"]})
            logger.info(
                "Order already placed for this order number",
                order_id=str(existing.id),
                order_number=command.order_number,
            )
            return str(existing.id)

        try:
            cart = current_domain.repository_for(Cart).get(str(command.customer_id))
        except ObjectNotFoundError:
            raise EmptyCartError() from None
        if not cart.lines:
            raise EmptyCartError()

        # The clear after an earlier placement was lost: that order already covers this cart.
        latest = order_repo.latest_for_customer(command.customer_id)
        if latest is not None and latest.source_cart_revision == cart.revision:
            logger.info(
                "Cart already converted to an order",
                order_id=str(latest.id),
                order_number=latest.order_number,
                cart_revision=cart.revision,
            )
            return str(latest.id)

        profile = get_customer_directory().get_customer(str(command.customer_id))
        ship_to = _resolve_ship_to(command, profile)

        order = Order.place(
            order_number=command.order_number,
            customer_id=command.customer_id,
            items_data=[
                {
                    "product_id": str(line.product_id),
                    "name": line.name,
                    "price": line.unit_price,
                    "discount_price": line.discount_unit_price,
                    "quantity": line.quantity,
                    "image_ref": line.image_ref,
                    "category_name": line.category_name,
                }
                for line in cart.lines
            ],
            ship_to=ship_to,
            placed_by=actor.label,
            shipping_terms=command.shipping_terms or ShippingTerms.FOB.value,
            customer_email=(profile.email if profile else None) or actor.email,
            company_name=profile.company_name if profile else None,
            notes=command.notes,
            source_cart_revision=cart.revision,
        )
        order_repo.add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(command.customer_id),
            total_amount=order.pricing.total_amount,
        )
        return str(order.id)


def _resolve_ship_to(command, profile) -> dict:
    """Copy the ship-to block by value from the profile or the entered address."""
    if command.address_type == AddressType.NEW.value:
        data = json.loads(command.ship_to) if isinstance(command.ship_to, str) else (command.ship_to or {})
        if not (data.get("address") or "").strip():
            raise MissingShippingAddressError()
        return {
            "company_name": data.get("company_name"),
            "contact_name": data.get("contact_name"),
            "tel_no": data.get("tel_no"),
            "mob_no": data.get("mob_no"),
            "address": data["address"].strip(),
            "email": data.get("email"),
        }

    if profile is None or not (profile.company_address or "").strip():
        raise MissingShippingAddressError()
    return {
        "company_name": profile.company_name,
        "contact_name": profile.contact_name,
        "tel_no": profile.tel_no,
        "mob_no": profile.mob_no,
        "address": profile.company_address,
        "email": profile.email,
    }


def place_order(
    actor: Principal,
    customer_id=None,
    address_type=AddressType.DEFAULT.value,
    ship_to=None,
    shipping_terms=ShippingTerms.FOB.value,
    notes=None,
    order_number=None,
):
    """Place an order from the customer's cart, then clear the cart.

    Pass the ``order_number`` returned by an earlier attempt to retry safely:
    the existing order is returned instead of a second one being created.
    Returns the stored order.
    """
    customer_id = str(customer_id or actor.id)
    command = PlaceOrder(
        **actor.as_command_fields(),
        customer_id=customer_id,
        order_number=order_number or generate_order_number(),
        address_type=address_type,
        ship_to=json.dumps(ship_to) if ship_to is not None else None,
        shipping_terms=shipping_terms,
        notes=notes,
    )
    order_id = current_domain.process(command, asynchronous=False)

    order = current_domain.repository_for(Order).get(order_id)
    CartStore(actor, customer_id).release_converted(order)
    return order
