"""Cart store: the customer-facing cart service.

Mutations are applied to the in-memory cart first and then persisted. A
failed write is logged and remembered on ``last_persist_error`` but never
undoes the customer's change. Orders get no such leniency.
"""

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.catalog import get_catalog
from ordering.order.order import Order
from ordering.pricing.resolver import resolve_price

logger = structlog.get_logger(__name__)


class CartStore:
    """One customer's cart as seen by ``actor`` (the customer or an admin)."""

    def __init__(self, actor, customer_id=None):
        self.actor = actor
        self.customer_id = str(customer_id or actor.id)
        actor.require_owner_or_admin(self.customer_id, "edit the cart")

        self.attention = False
        self.last_persist_error = None
        self._cart = None

    @property
    def cart(self) -> Cart:
        if self._cart is None:
            self.load()
        return self._cart

    def load(self) -> Cart:
        """Read the cart, creating an empty one on first use.

        A cart that an order was already placed from is cleared here.
        """
        self._cart = self._fetch()
        latest = current_domain.repository_for(Order).latest_for_customer(self.customer_id)
        if latest is not None:
            self.release_converted(latest)
        return self._cart

    def _fetch(self) -> Cart:
        try:
            return current_domain.repository_for(Cart).get(self.customer_id)
        except ObjectNotFoundError:
            return Cart.create(self.customer_id)

    def release_converted(self, order) -> bool:
        """Clear the cart if ``order`` was placed from its current revision."""
        if self._cart is None:
            self._cart = self._fetch()
        if order.source_cart_revision is None or self._cart.revision != order.source_cart_revision:
            return False
        if not self._cart.lines:
            return False

        logger.info(
            "Clearing cart converted to order",
            customer_id=self.customer_id,
            order_id=str(order.id),
            revision=self._cart.revision,
        )
        self.clear()
        return True

    def _persist(self) -> None:
        try:
            current_domain.repository_for(Cart).add(self._cart)
            self.last_persist_error = None
        except Exception as exc:
            self.last_persist_error = str(exc)
            logger.error(
                "Cart persistence failed; keeping local state",
                customer_id=self.customer_id,
                revision=self._cart.revision,
                error=str(exc),
            )

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity=1):
        """Add a catalog product at the customer's effective price and flag the cart for attention."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        product = get_catalog().get_product(product_id)
        if product is None:
            raise ObjectNotFoundError(f"Product {product_id} does not exist")

        resolved = resolve_price(self.actor, self.customer_id, product)
        line = self.cart.add_line(
            product_id=product.id,
            name=product.name,
            unit_price=resolved.list_price,
            discount_unit_price=resolved.effective_price if resolved.has_override else None,
            quantity=quantity,
            image_ref=product.image_url,
            category_name=product.category_name,
        )
        self.attention = True
        self._persist()
        return line

    def acknowledge(self) -> None:
        """The cart panel was shown; drop the attention flag."""
        self.attention = False

    def update_quantity(self, product_id, quantity) -> bool:
        if not self.cart.update_quantity(product_id, quantity):
            return False
        self._persist()
        return True

    def remove_item(self, product_id) -> bool:
        if not self.cart.remove_line(product_id):
            return False
        self._persist()
        return True

    def clear(self) -> None:
        self.cart.clear()
        self._persist()

    def totals(self):
        return self.cart.totals()
