"""Money arithmetic shared by carts, orders and invoices.

Amounts are floats rounded to cents. Sums are taken over integer cents so
totals agree exactly regardless of how many lines contribute.
"""

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")


def round_to_cents(amount: float) -> float:
    return float(Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP))


def floor_to_cents(amount: float) -> float:
    return float(Decimal(str(amount)).quantize(_CENT, rounding=ROUND_FLOOR))


def to_cents(amount: float) -> int:
    return int(Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP) * 100)


def from_cents(cents: int) -> float:
    return float(Decimal(cents) / 100)


def effective_unit_price(price: float, discount_price: float | None) -> float:
    """The discount price when one is set, otherwise the list price."""
    return price if discount_price is None else discount_price


def line_total(price: float, discount_price: float | None, quantity: int) -> float:
    return from_cents(to_cents(effective_unit_price(price, discount_price)) * quantity)


def sum_amounts(amounts) -> float:
    return from_cents(sum(to_cents(amount) for amount in amounts))


def amounts_equal(left: float, right: float) -> bool:
    return to_cents(left) == to_cents(right)


def percent_off(list_price: float, effective_price: float) -> int:
    """Whole-number discount percentage, rounding halves up."""
    ratio = (1 - Decimal(str(effective_price)) / Decimal(str(list_price))) * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
