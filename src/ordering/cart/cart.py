"""Cart aggregate (CQRS): one mutable cart per customer.

The cart's id is the owning customer's id. Every mutation bumps ``revision``,
which an order records at placement so a cart left behind by a failed clear
can be recognised and emptied later.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from ordering.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
)
from ordering.domain import ordering
from ordering.shared import money


@dataclass(frozen=True)
class CartTotals:
    total_items: int
    total_amount: float


@ordering.entity(part_of="Cart")
class CartLine:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    unit_price = Float(required=True, min_value=0.0)
    discount_unit_price = Float(min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    image_ref = String(max_length=1024)
    category_name = String(max_length=100)

    @property
    def effective_price(self):
        return money.effective_unit_price(self.unit_price, self.discount_unit_price)

    @property
    def line_total(self):
        return money.line_total(self.unit_price, self.discount_unit_price, self.quantity)


@ordering.aggregate
class Cart:
    customer_id = Identifier(required=True)
    lines = HasMany(CartLine)
    revision = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(
            id=str(customer_id),
            customer_id=str(customer_id),
            revision=0,
            created_at=now,
            updated_at=now,
        )

    def line_for(self, product_id):
        return next((line for line in self.lines if str(line.product_id) == str(product_id)), None)

    def _touch(self):
        self.revision = (self.revision or 0) + 1
        self.updated_at = datetime.now(UTC)

    def add_line(
        self,
        product_id,
        name,
        unit_price,
        quantity,
        discount_unit_price=None,
        image_ref=None,
        category_name=None,
    ):
        """Append a line, or sum the quantity into the existing line for the product."""
        if quantity is None or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        existing = self.line_for(product_id)
        if existing:
            existing.quantity += quantity
            line = existing
        else:
            line = CartLine(
                product_id=product_id,
                name=name,
                unit_price=unit_price,
                discount_unit_price=discount_unit_price,
                quantity=quantity,
                image_ref=image_ref,
                category_name=category_name,
            )
            self.add_lines(line)

        self._touch()
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                quantity_added=quantity,
                line_quantity=line.quantity,
                revision=self.revision,
            )
        )
        return line

    def update_quantity(self, product_id, quantity):
        """Replace a line's quantity. Quantities below 1 and unknown products are ignored."""
        line = self.line_for(product_id)
        if quantity is None or quantity < 1 or line is None:
            return False

        previous_quantity = line.quantity
        line.quantity = quantity
        self._touch()
        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
                revision=self.revision,
            )
        )
        return True

    def remove_line(self, product_id):
        line = self.line_for(product_id)
        if line is None:
            return False

        self.remove_lines(line)
        self._touch()
        self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id), revision=self.revision))
        return True

    def clear(self):
        line_count = len(self.lines)
        for line in list(self.lines):
            self.remove_lines(line)

        self._touch()
        self.raise_(CartCleared(cart_id=str(self.id), line_count=line_count, revision=self.revision))

    def totals(self) -> CartTotals:
        return CartTotals(
            total_items=sum(line.quantity for line in self.lines),
            total_amount=money.sum_amounts(line.line_total for line in self.lines),
        )
