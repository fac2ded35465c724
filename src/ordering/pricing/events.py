"""Domain events for customer price lists."""

from protean.fields import DateTime, Identifier, String, Text

from ordering.domain import ordering


@ordering.event(part_of="CustomerPriceList")
class CustomerPricesUpdated:
    """An administrator changed one or more negotiated unit prices for a customer."""

    __version__ = 1

    customer_id = Identifier(required=True)
    changes = Text(required=True)  # JSON: list of {product_id, product_name, previous_price, new_price}
    updated_by = String(required=True)
    updated_at = DateTime(required=True)


@ordering.event(part_of="CustomerPriceList")
class ProductPriceBackfilled:
    """A newly introduced product was added to an existing price list at its list price."""

    __version__ = 1

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    unit_price = String(required=True)  # serialized float


@ordering.event(part_of="CustomerPriceList")
class ProductPriceRemoved:
    """A deleted product's override was dropped from a price list."""

    __version__ = 1

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
