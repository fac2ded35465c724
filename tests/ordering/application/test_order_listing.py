"""Application tests for the order summary projection and listings."""

from itertools import count

from ordering.cart.store import CartStore
from ordering.order.cancellation import CancelOrder
from ordering.order.placement import place_order
from ordering.payment.checkout import request_tt
from ordering.projections.order_summary import OrderSummary, list_order_summaries
from protean import current_domain

_numbers = count(1)


def _place(actor, product_id="A", quantity=1):
    CartStore(actor).add_item(product_id, quantity)
    return place_order(actor, order_number=f"ORD-260101-120000-{next(_numbers):02d}")


def test_placed_order_appears_in_summary(customer):
    order = _place(customer, "A", 2)

    summary = current_domain.repository_for(OrderSummary).get(order.id)
    assert summary.order_number == order.order_number
    assert summary.status == "pending"
    assert summary.payment_status == "pending"
    assert summary.total_amount == 200.0
    assert summary.item_count == 1


def test_summary_follows_cancellation_and_payment_method(customer):
    order = _place(customer)
    request_tt(customer, order.id)
    current_domain.process(CancelOrder(**customer.as_command_fields(), order_id=order.id), asynchronous=False)

    summary = current_domain.repository_for(OrderSummary).get(order.id)
    assert summary.payment_method == "tt"
    assert summary.status == "cancelled"


def test_customer_sees_only_own_orders(customer, other_customer, directory):
    from ordering.directory.port import CustomerProfile

    directory.add_customer(CustomerProfile(id="cust-002", email="other@globex.test", company_address="1 Globex Way"))
    mine = _place(customer)
    _place(other_customer, "D")

    listed = list_order_summaries(customer, customer_id="cust-002")

    assert [str(s.order_id) for s in listed] == [str(mine.id)]


def test_admin_filters_by_status(admin, customer):
    first = _place(customer)
    second = _place(customer, "C")
    current_domain.process(CancelOrder(**customer.as_command_fields(), order_id=first.id), asynchronous=False)

    pending = list_order_summaries(admin, status="pending")

    assert [str(s.order_id) for s in pending] == [str(second.id)]
