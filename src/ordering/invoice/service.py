"""Invoice retrieval: gathers the inputs for ``build_invoice`` and checks access."""

from protean.utils.globals import current_domain

from ordering.catalog import get_catalog
from ordering.directory import get_customer_directory
from ordering.invoice.assembler import InvoiceDocument, build_invoice
from ordering.invoice.supplier import current_supplier_profile
from ordering.order.order import Order


def invoice_for(actor, order_id) -> InvoiceDocument:
    order = current_domain.repository_for(Order).get(order_id)
    actor.require_owner_or_admin(order.customer_id, "view invoices")

    catalog = get_catalog()
    product_meta = []
    for item in order.items:
        product = catalog.get_product(str(item.product_id))
        if product is not None:
            product_meta.append(product)

    return build_invoice(
        order=order,
        customer=get_customer_directory().get_customer(str(order.customer_id)),
        supplier=current_supplier_profile(),
        product_meta=product_meta,
    )
