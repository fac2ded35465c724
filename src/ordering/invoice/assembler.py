"""Proforma invoice assembly.

``build_invoice`` is a pure function: it takes an order, the customer's
profile, the supplier profile and whatever product metadata is available,
and returns a structured document that any renderer (HTML, PDF) can lay out.
Nothing is read from or written to a store here.
"""

from dataclasses import dataclass, field
from datetime import date

from ordering.shared import money

CATEGORY_PRIORITY = ("dashcam", "accessory", "companion")

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class InvoiceParty:
    name: str = ""
    address: str = ""
    contact_name: str = ""
    tel_no: str = ""
    email: str = ""
    tax_number: str = ""


@dataclass(frozen=True)
class InvoiceLine:
    product_id: str
    name: str
    category_name: str
    description: str
    hs_code: str
    origin: str
    unit_price: float
    list_price: float
    quantity: int
    line_total: float


@dataclass(frozen=True)
class CategoryGroup:
    category_name: str
    lines: list[InvoiceLine]
    subtotal: float


@dataclass(frozen=True)
class BankInstructions:
    bank_name: str = ""
    account_number: str = ""
    account_holder: str = ""
    swift_code: str = ""


@dataclass(frozen=True)
class InvoiceDocument:
    invoice_number: str
    order_id: str
    order_number: str
    issued_on: date | None
    shipper: InvoiceParty
    sold_to: InvoiceParty
    ship_to: InvoiceParty
    shipping_terms: str
    groups: list[CategoryGroup]
    subtotal: float
    shipping_cost: float
    total_amount: float
    notes: str = ""
    bank: BankInstructions = field(default_factory=BankInstructions)
    shipment_terms: dict = field(default_factory=dict)

    @property
    def lines(self) -> list[InvoiceLine]:
        return [line for group in self.groups for line in group.lines]


def invoice_number_for(order_number: str) -> str:
    suffix = order_number[4:] if order_number.startswith("ORD-") else order_number
    return f"PI-{suffix}"


def category_sort_key(category_name: str):
    """Known categories first in priority order, then the rest alphabetically."""
    normalized = (category_name or "").strip().lower()
    if normalized in CATEGORY_PRIORITY:
        return (0, CATEGORY_PRIORITY.index(normalized), "")
    return (1, 0, normalized)


def _text(value) -> str:
    return "" if value is None else str(value)


def _supplier_party(supplier) -> InvoiceParty:
    if supplier is None:
        return InvoiceParty()
    return InvoiceParty(
        name=_text(supplier.company_name),
        address=_text(supplier.address),
        contact_name=_text(supplier.contact_info),
        tel_no=_text(supplier.tel_no),
        tax_number=_text(supplier.business_number),
    )


def _customer_party(customer, order) -> InvoiceParty:
    if customer is None:
        return InvoiceParty(name=_text(order.company_name), email=_text(order.customer_email))
    return InvoiceParty(
        name=_text(customer.company_name or order.company_name),
        address=_text(customer.company_address),
        contact_name=_text(customer.contact_name),
        tel_no=_text(customer.tel_no or customer.mob_no),
        email=_text(customer.email or order.customer_email),
        tax_number=_text(customer.vat_number),
    )


def _ship_to_party(ship_to) -> InvoiceParty:
    if ship_to is None:
        return InvoiceParty()
    return InvoiceParty(
        name=_text(ship_to.company_name),
        address=_text(ship_to.address),
        contact_name=_text(ship_to.contact_name),
        tel_no=_text(ship_to.tel_no or ship_to.mob_no),
        email=_text(ship_to.email),
    )


def build_invoice(order, customer, supplier, product_meta) -> InvoiceDocument:
    """Assemble the proforma invoice for ``order``.

    Items are grouped by category (see ``CATEGORY_PRIORITY``); each item lands
    in exactly one group. Missing product metadata leaves description, HS code
    and origin blank. The grand total is the order's total amount.
    """
    meta_by_id = {str(product.id): product for product in product_meta or []}

    # Keyed case-insensitively; the first spelling seen names the group
    grouped: dict[str, tuple[str, list[InvoiceLine]]] = {}
    for item in order.items:
        meta = meta_by_id.get(str(item.product_id))
        category_name = (item.category_name or "").strip() or UNCATEGORIZED
        _, lines = grouped.setdefault(category_name.lower(), (category_name, []))
        lines.append(
            InvoiceLine(
                product_id=str(item.product_id),
                name=item.name,
                category_name=category_name,
                description=_text(meta.description if meta else None),
                hs_code=_text(meta.hs_code if meta else None),
                origin=_text(meta.origin if meta else None),
                unit_price=item.effective_price,
                list_price=item.price,
                quantity=item.quantity,
                line_total=item.line_total,
            )
        )

    groups = [
        CategoryGroup(
            category_name=name,
            lines=lines,
            subtotal=money.sum_amounts(line.line_total for line in lines),
        )
        for name, lines in sorted(grouped.values(), key=lambda entry: category_sort_key(entry[0]))
    ]

    bank = supplier.bank if supplier is not None else None
    shipping = supplier.shipping if supplier is not None else None

    return InvoiceDocument(
        invoice_number=invoice_number_for(order.order_number),
        order_id=str(order.id),
        order_number=order.order_number,
        issued_on=order.created_at.date() if order.created_at else None,
        shipper=_supplier_party(supplier),
        sold_to=_customer_party(customer, order),
        ship_to=_ship_to_party(order.ship_to),
        shipping_terms=_text(order.shipping_terms),
        groups=groups,
        subtotal=order.pricing.subtotal,
        shipping_cost=order.pricing.shipping_cost,
        total_amount=order.pricing.total_amount,
        notes=_text(order.notes),
        bank=BankInstructions(
            bank_name=_text(bank.bank_name if bank else None),
            account_number=_text(bank.account_number if bank else None),
            account_holder=_text(bank.account_holder if bank else None),
            swift_code=_text(bank.swift_code if bank else None),
        ),
        shipment_terms={
            "origin": _text(shipping.origin if shipping else None),
            "shipment": _text(shipping.shipment if shipping else None),
            "packing": _text(shipping.packing if shipping else None),
            "validity": _text(shipping.validity if shipping else None),
        },
    )
