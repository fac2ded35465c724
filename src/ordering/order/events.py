"""Domain events for the Order aggregate.

Events feed the order summary projection and carry enough of the order's
state for listings to be rebuilt without reading the order itself.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A customer's cart was snapshotted into a new order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    company_name = String()
    items = Text(required=True)  # JSON: list of item snapshots
    ship_to = Text(required=True)  # JSON: address block
    shipping_terms = String(required=True)
    subtotal = Float(required=True)
    total_amount = Float(required=True)
    source_cart_revision = Integer()
    created_by = String(required=True)
    created_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """An administrator moved the order along its fulfillment path."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    updated_by = String(required=True)
    updated_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderCancelled:
    """A pending order was cancelled by its owner or an administrator."""

    __version__ = 1

    order_id = Identifier(required=True)
    updated_by = String(required=True)
    updated_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderLinesCorrected:
    """An administrator corrected line prices, quantities or shipping; totals were recomputed."""

    __version__ = 1

    order_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of corrected item snapshots
    subtotal = Float(required=True)
    shipping_cost = Float(required=True)
    total_amount = Float(required=True)
    updated_by = String(required=True)
    updated_at = DateTime(required=True)


@ordering.event(part_of="Order")
class CardCheckoutStarted:
    """A hosted-checkout session was created for the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    session_id = String(required=True)
    amount = Float(required=True)
    updated_by = String(required=True)
    updated_at = DateTime(required=True)


@ordering.event(part_of="Order")
class TTPaymentRequested:
    """The customer chose bank transfer; remittance evidence can now be uploaded."""

    __version__ = 1

    order_id = Identifier(required=True)
    updated_by = String(required=True)
    updated_at = DateTime(required=True)


@ordering.event(part_of="Order")
class RemittanceFileAttached:
    __version__ = 1

    order_id = Identifier(required=True)
    file_id = Identifier(required=True)
    name = String(required=True)
    url = String(required=True)
    uploaded_at = DateTime(required=True)


@ordering.event(part_of="Order")
class RemittanceFileDetached:
    __version__ = 1

    order_id = Identifier(required=True)
    file_id = Identifier(required=True)
    reason = String()
    updated_at = DateTime(required=True)


@ordering.event(part_of="Order")
class TTPaymentReviewed:
    """An administrator approved or rejected the uploaded remittance evidence."""

    __version__ = 1

    order_id = Identifier(required=True)
    tt_status = String(required=True)
    admin_note = Text()
    updated_by = String(required=True)
    updated_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentConfirmed:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_method = String()
    payment_reference = String()
    updated_by = String(required=True)
    updated_at = DateTime(required=True)


@ordering.event(part_of="Order")
class PaymentRejected:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_method = String()
    reason = Text()
    updated_by = String(required=True)
    updated_at = DateTime(required=True)
