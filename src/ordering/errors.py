"""Error taxonomy for the Ordering domain.

Validation failures reuse Protean's ``ValidationError`` (a dict of field name to
messages) so they surface exactly like field-level validation. The remaining
errors cover authorization, concurrency, invariants and collaborator I/O.
"""

from protean.exceptions import ValidationError


class EmptyCartError(ValidationError):
    """An order was requested from a cart without lines."""

    def __init__(self):
        super().__init__({"cart": ["Cart is empty."]})


class MissingShippingAddressError(ValidationError):
    """A custom shipping address was selected but left blank."""

    def __init__(self):
        super().__init__({"ship_to": ["Please enter the shipping address."]})


class AuthorizationError(Exception):
    """The acting principal may not perform the requested operation."""


class StaleOrderError(Exception):
    """The order was modified by someone else since it was loaded."""

    def __init__(self, order_id, expected_revision, stored_revision):
        self.order_id = order_id
        self.expected_revision = expected_revision
        self.stored_revision = stored_revision
        super().__init__(
            f"Order {order_id} was modified concurrently "
            f"(loaded revision {expected_revision}, stored revision {stored_revision})"
        )


class PricingInvariantError(Exception):
    """Order totals do not agree with its line items. Never persisted."""


class CollaboratorError(Exception):
    """An external collaborator (blob store, checkout provider) failed.

    The message is safe to log; callers show a generic retry message instead.
    """

    def __init__(self, collaborator, message):
        self.collaborator = collaborator
        super().__init__(f"{collaborator}: {message}")
