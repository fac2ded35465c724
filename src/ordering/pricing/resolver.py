"""Pricing resolver: the effective unit price a customer pays for a product."""

from dataclasses import dataclass

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.pricing.price_list import CustomerPriceList
from ordering.shared.money import percent_off


@dataclass(frozen=True)
class ResolvedPrice:
    list_price: float
    effective_price: float
    discount_percent: int | None = None

    @property
    def has_override(self) -> bool:
        return self.discount_percent is not None


def resolve_effective_price(list_price: float, override_price: float | None = None) -> ResolvedPrice:
    """Apply an override only when it undercuts the list price."""
    if override_price is None or override_price >= list_price:
        return ResolvedPrice(list_price=list_price, effective_price=list_price)
    return ResolvedPrice(
        list_price=list_price,
        effective_price=override_price,
        discount_percent=percent_off(list_price, override_price),
    )


def resolve_price(actor, customer_id, product) -> ResolvedPrice:
    """Resolve ``product``'s price for ``customer_id`` as seen by ``actor``.

    Never fails: callers that may not see the customer's prices, and customers
    without a price list, get the list price.
    """
    if customer_id is None or not actor.can_act_for(customer_id):
        return resolve_effective_price(product.price)

    try:
        price_list = current_domain.repository_for(CustomerPriceList).get(str(customer_id))
    except ObjectNotFoundError:
        return resolve_effective_price(product.price)

    override = price_list.override_for(product.id)
    return resolve_effective_price(product.price, override.unit_price if override else None)
