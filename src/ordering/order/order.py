"""Order aggregate (CQRS): an immutable snapshot of a cart plus its lifecycle.

Identity fields (order number, customer, items as snapshotted, ship-to,
shipping terms, creation stamp) never change after placement. Only the state
machine below and the admin line correction touch the rest, and every change
stamps ``updated_at`` / ``updated_by``.

Status:          pending -> processing -> shipped -> delivered
                 pending -> cancelled
Payment status:  pending -> paid | failed

Payment orchestration (card checkout, bank transfer evidence) is only
possible while the order is pending and its payment is still pending.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.errors import PricingInvariantError, StaleOrderError
from ordering.order.events import (
    CardCheckoutStarted,
    OrderCancelled,
    OrderLinesCorrected,
    OrderPlaced,
    OrderStatusChanged,
    PaymentConfirmed,
    PaymentRejected,
    RemittanceFileAttached,
    RemittanceFileDetached,
    TTPaymentRequested,
    TTPaymentReviewed,
)
from ordering.shared import money


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class PaymentMethod(Enum):
    CARD = "card"
    TT = "tt"


class TTStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ShippingTerms(Enum):
    FOB = "FOB"
    CFR = "CFR"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShipTo:
    """Delivery address block copied by value at placement."""

    company_name = String(max_length=255)
    contact_name = String(max_length=255)
    tel_no = String(max_length=50)
    mob_no = String(max_length=50)
    address = String(required=True, max_length=1000)
    email = String(max_length=255)


@ordering.value_object(part_of="Order")
class OrderPricing:
    """Order totals. ``total_amount`` is always ``subtotal + shipping_cost``."""

    subtotal = Float(default=0.0, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    total_amount = Float(default=0.0, min_value=0.0)

    @invariant.post
    def total_is_subtotal_plus_shipping(self):
        if not money.amounts_equal(self.total_amount, money.sum_amounts([self.subtotal, self.shipping_cost])):
            raise ValidationError({"total_amount": ["Total must equal subtotal plus shipping cost"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """Point-in-time copy of a cart line. Never a live reference to the catalog."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    discount_price = Float(min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    image_ref = String(max_length=1024)
    category_name = String(max_length=100)

    @property
    def effective_price(self):
        return money.effective_unit_price(self.price, self.discount_price)

    @property
    def line_total(self):
        return money.line_total(self.price, self.discount_price, self.quantity)

    def to_dict(self):
        return {
            "product_id": str(self.product_id),
            "name": self.name,
            "price": self.price,
            "discount_price": self.discount_price,
            "quantity": self.quantity,
            "image_ref": self.image_ref,
            "category_name": self.category_name,
        }


@ordering.entity(part_of="Order")
class RemittanceFile:
    """Bank transfer evidence. The entity id is the generated file id."""

    name = String(required=True, max_length=255)
    url = String(required=True, max_length=2048)
    blob_path = String(required=True, max_length=1024)
    uploaded_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    order_number = String(required=True, max_length=32)
    customer_id = Identifier(required=True)
    customer_email = String(max_length=255)
    company_name = String(max_length=255)
    items = HasMany(OrderItem)
    ship_to = ValueObject(ShipTo)
    shipping_terms = String(choices=ShippingTerms, default=ShippingTerms.FOB.value)
    pricing = ValueObject(OrderPricing)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod)
    payment_id = String(max_length=255)
    remittance_files = HasMany(RemittanceFile)
    tt_status = String(choices=TTStatus)
    tt_admin_note = Text()
    notes = Text()
    source_cart_revision = Integer()
    revision = Integer(default=0)
    created_at = DateTime()
    created_by = String(max_length=255)
    updated_at = DateTime()
    updated_by = String(max_length=255)

    @invariant.post
    def subtotal_must_match_items(self):
        if self.pricing is None:
            return
        expected = money.sum_amounts(item.line_total for item in self.items)
        if not money.amounts_equal(self.pricing.subtotal, expected):
            raise ValidationError({"subtotal": ["Subtotal must equal the sum of line totals"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        customer_id,
        items_data,
        ship_to,
        placed_by,
        shipping_terms=ShippingTerms.FOB.value,
        customer_email=None,
        company_name=None,
        notes=None,
        source_cart_revision=None,
    ):
        """Create a pending order from cart line snapshots (dicts)."""
        now = datetime.now(UTC)
        items = [
            OrderItem(
                product_id=data["product_id"],
                name=data["name"],
                price=data["price"],
                discount_price=data.get("discount_price"),
                quantity=data["quantity"],
                image_ref=data.get("image_ref"),
                category_name=data.get("category_name"),
            )
            for data in items_data
        ]
        subtotal = money.sum_amounts(item.line_total for item in items)

        order = cls(
            order_number=order_number,
            customer_id=str(customer_id),
            customer_email=customer_email,
            company_name=company_name,
            items=items,
            ship_to=ShipTo(**ship_to),
            shipping_terms=shipping_terms,
            pricing=OrderPricing(subtotal=subtotal, shipping_cost=0.0, total_amount=subtotal),
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            notes=notes,
            source_cart_revision=source_cart_revision,
            created_at=now,
            created_by=placed_by,
            updated_at=now,
            updated_by=placed_by,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                company_name=company_name,
                items=json.dumps([item.to_dict() for item in items]),
                ship_to=json.dumps(ship_to),
                shipping_terms=shipping_terms,
                subtotal=subtotal,
                total_amount=subtotal,
                source_cart_revision=source_cart_revision,
                created_by=placed_by,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def item_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def remittance_file(self, file_id):
        return next((f for f in self.remittance_files if str(f.id) == str(file_id)), None)

    @property
    def is_terminal(self):
        return OrderStatus(self.status) in TERMINAL_STATES

    def assert_pricing_consistent(self):
        """Raise ``PricingInvariantError`` unless items, subtotal and total agree."""
        expected_subtotal = money.sum_amounts(item.line_total for item in self.items)
        pricing = self.pricing
        if pricing is None or not money.amounts_equal(pricing.subtotal, expected_subtotal):
            raise PricingInvariantError(
                f"Order {self.id}: subtotal {pricing.subtotal if pricing else None} "
                f"does not match line items ({expected_subtotal})"
            )
        if not money.amounts_equal(pricing.total_amount, money.sum_amounts([pricing.subtotal, pricing.shipping_cost])):
            raise PricingInvariantError(
                f"Order {self.id}: total {pricing.total_amount} is not "
                f"subtotal {pricing.subtotal} + shipping {pricing.shipping_cost}"
            )

    def assert_revision(self, expected_revision):
        """Raise ``StaleOrderError`` if the caller edited an older revision. ``None`` skips the check."""
        if expected_revision is not None and expected_revision != (self.revision or 0):
            raise StaleOrderError(str(self.id), expected_revision, self.revision or 0)

    def _assert_can_transition(self, target: OrderStatus):
        current = OrderStatus(self.status)
        if target not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

    def _stamp(self, actor_label):
        now = datetime.now(UTC)
        self.updated_at = now
        self.updated_by = actor_label
        return now

    def _recompute_pricing(self, shipping_cost):
        subtotal = money.sum_amounts(item.line_total for item in self.items)
        shipping_cost = money.round_to_cents(shipping_cost)
        self.pricing = OrderPricing(
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            total_amount=money.sum_amounts([subtotal, shipping_cost]),
        )

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def change_status(self, new_status, actor_label):
        target = OrderStatus(new_status)
        if target == OrderStatus.CANCELLED:
            self.cancel(actor_label)
            return

        self._assert_can_transition(target)
        previous = self.status
        self.status = target.value
        now = self._stamp(actor_label)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous,
                new_status=target.value,
                updated_by=actor_label,
                updated_at=now,
            )
        )

    def cancel(self, actor_label):
        """Cancel a pending order. Payment status is left as it is."""
        if OrderStatus(self.status) != OrderStatus.PENDING:
            raise ValidationError({"status": [f"Only pending orders can be cancelled (order is {self.status})"]})

        self.status = OrderStatus.CANCELLED.value
        now = self._stamp(actor_label)
        self.raise_(OrderCancelled(order_id=str(self.id), updated_by=actor_label, updated_at=now))

    # -------------------------------------------------------------------
    # Admin line correction
    # -------------------------------------------------------------------
    def correct_lines(self, corrections, actor_label, shipping_cost=None):
        """Apply admin corrections and recompute totals in one step.

        Each correction names a ``product_id`` and any of ``quantity``,
        ``discount_price`` (``None`` removes the discount) or ``line_subtotal``.
        A line subtotal back-solves the discount price as
        ``round(line_subtotal / quantity, 2)``; the order subtotal is then
        re-derived from the lines, so both entry points end in the same
        recomputation. All corrections are validated before any is applied.
        """
        if self.is_terminal:
            raise ValidationError({"status": [f"Cannot correct a {self.status} order"]})
        self._validate_corrections(corrections, shipping_cost)

        with atomic_change(self):
            for correction in corrections:
                item = self.item_for(correction["product_id"])
                if correction.get("quantity") is not None:
                    item.quantity = correction["quantity"]

                if "discount_price" in correction:
                    discount_price = correction["discount_price"]
                    item.discount_price = None if discount_price is None else money.round_to_cents(discount_price)
                elif correction.get("line_subtotal") is not None:
                    item.discount_price = money.round_to_cents(correction["line_subtotal"] / item.quantity)

            self._recompute_pricing(self.pricing.shipping_cost if shipping_cost is None else shipping_cost)

        now = self._stamp(actor_label)
        self.raise_(
            OrderLinesCorrected(
                order_id=str(self.id),
                items=json.dumps([item.to_dict() for item in self.items]),
                subtotal=self.pricing.subtotal,
                shipping_cost=self.pricing.shipping_cost,
                total_amount=self.pricing.total_amount,
                updated_by=actor_label,
                updated_at=now,
            )
        )

    def _validate_corrections(self, corrections, shipping_cost):
        errors = []
        for correction in corrections:
            product_id = correction.get("product_id")
            if self.item_for(product_id) is None:
                errors.append(f"Order has no line for product {product_id}")
                continue
            if "discount_price" in correction and correction.get("line_subtotal") is not None:
                errors.append(f"Give either a discount price or a line subtotal for {product_id}, not both")
            quantity = correction.get("quantity")
            if quantity is not None and quantity < 1:
                errors.append(f"Quantity for {product_id} must be at least 1")
            for key in ("discount_price", "line_subtotal"):
                if correction.get(key) is not None and correction[key] < 0:
                    errors.append(f"{key} for {product_id} cannot be negative")

        if shipping_cost is not None and shipping_cost < 0:
            errors.append("Shipping cost cannot be negative")
        if errors:
            raise ValidationError({"items": errors})

    # -------------------------------------------------------------------
    # Payment orchestration
    # -------------------------------------------------------------------
    def assert_awaiting_payment(self):
        if OrderStatus(self.status) != OrderStatus.PENDING:
            raise ValidationError({"status": [f"Payment can only be arranged for pending orders (order is {self.status})"]})
        if PaymentStatus(self.payment_status) != PaymentStatus.PENDING:
            raise ValidationError({"payment_status": [f"Payment is already {self.payment_status}"]})

    def assert_card_checkout_allowed(self):
        self.assert_awaiting_payment()
        if self.payment_method == PaymentMethod.TT.value and self.remittance_files:
            raise ValidationError(
                {"payment_method": ["Bank transfer evidence has been uploaded; card checkout is not available"]}
            )

    def assert_accepts_remittance(self):
        self.assert_awaiting_payment()
        if self.payment_method != PaymentMethod.TT.value:
            raise ValidationError({"payment_method": ["Request bank transfer payment before uploading evidence"]})

    def record_card_checkout(self, session_id, actor_label):
        self.assert_card_checkout_allowed()

        self.payment_method = PaymentMethod.CARD.value
        self.payment_id = session_id
        now = self._stamp(actor_label)
        self.raise_(
            CardCheckoutStarted(
                order_id=str(self.id),
                session_id=session_id,
                amount=self.pricing.total_amount,
                updated_by=actor_label,
                updated_at=now,
            )
        )

    def request_tt(self, actor_label):
        """Switch to bank transfer. A repeat request keeps the evidence trail intact."""
        self.assert_awaiting_payment()
        if self.payment_method == PaymentMethod.TT.value:
            return False

        with atomic_change(self):
            self.payment_method = PaymentMethod.TT.value
            self.payment_status = PaymentStatus.PENDING.value
            self.tt_status = TTStatus.PENDING.value
            self.tt_admin_note = None
        now = self._stamp(actor_label)
        self.raise_(TTPaymentRequested(order_id=str(self.id), updated_by=actor_label, updated_at=now))
        return True

    def attach_remittance(self, file_id, name, url, blob_path, actor_label):
        self.assert_accepts_remittance()
        if self.remittance_file(file_id) is not None:
            raise ValidationError({"file_id": [f"Remittance file {file_id} is already attached"]})

        now = datetime.now(UTC)
        self.add_remittance_files(RemittanceFile(id=file_id, name=name, url=url, blob_path=blob_path, uploaded_at=now))
        self._stamp(actor_label)
        self.raise_(
            RemittanceFileAttached(
                order_id=str(self.id),
                file_id=str(file_id),
                name=name,
                url=url,
                uploaded_at=now,
            )
        )

    def detach_remittance(self, file_id, actor_label):
        self.assert_accepts_remittance()
        self._remove_remittance(file_id, actor_label, reason="deleted")

    def drop_dangling_remittance(self, file_id, actor_label):
        """Remove a reference whose blob no longer exists, whatever the order's state."""
        self._remove_remittance(file_id, actor_label, reason="blob missing")

    def _remove_remittance(self, file_id, actor_label, reason):
        remittance = self.remittance_file(file_id)
        if remittance is None:
            raise ValidationError({"file_id": [f"Remittance file {file_id} not found"]})

        self.remove_remittance_files(remittance)
        now = self._stamp(actor_label)
        self.raise_(
            RemittanceFileDetached(order_id=str(self.id), file_id=str(file_id), reason=reason, updated_at=now)
        )

    def review_tt(self, approved, actor_label, note=None):
        if self.payment_method != PaymentMethod.TT.value:
            raise ValidationError({"payment_method": ["Order is not paid by bank transfer"]})
        if PaymentStatus(self.payment_status) != PaymentStatus.PENDING:
            raise ValidationError({"payment_status": [f"Payment is already {self.payment_status}"]})

        with atomic_change(self):
            self.tt_status = (TTStatus.APPROVED if approved else TTStatus.REJECTED).value
            self.tt_admin_note = note
        now = self._stamp(actor_label)
        self.raise_(
            TTPaymentReviewed(
                order_id=str(self.id),
                tt_status=self.tt_status,
                admin_note=note,
                updated_by=actor_label,
                updated_at=now,
            )
        )

    def confirm_payment(self, actor_label, reference=None):
        if OrderStatus(self.status) == OrderStatus.CANCELLED:
            raise ValidationError({"status": ["Cannot record payment for a cancelled order"]})
        if PaymentStatus(self.payment_status) != PaymentStatus.PENDING:
            raise ValidationError({"payment_status": [f"Payment is already {self.payment_status}"]})

        with atomic_change(self):
            self.payment_status = PaymentStatus.PAID.value
            if self.payment_method == PaymentMethod.TT.value:
                self.tt_status = TTStatus.APPROVED.value
        now = self._stamp(actor_label)
        self.raise_(
            PaymentConfirmed(
                order_id=str(self.id),
                payment_method=self.payment_method,
                payment_reference=reference or self.payment_id,
                updated_by=actor_label,
                updated_at=now,
            )
        )

    def reject_payment(self, actor_label, reason=None):
        if PaymentStatus(self.payment_status) != PaymentStatus.PENDING:
            raise ValidationError({"payment_status": [f"Payment is already {self.payment_status}"]})

        with atomic_change(self):
            self.payment_status = PaymentStatus.FAILED.value
            if self.payment_method == PaymentMethod.TT.value:
                self.tt_status = TTStatus.REJECTED.value
                self.tt_admin_note = reason or self.tt_admin_note
        now = self._stamp(actor_label)
        self.raise_(
            PaymentRejected(
                order_id=str(self.id),
                payment_method=self.payment_method,
                reason=reason,
                updated_by=actor_label,
                updated_at=now,
            )
        )
