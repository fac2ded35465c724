"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.cart.cart import Cart
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then


@pytest.fixture()
def error():
    """Mutable container for capturing exceptions in When steps."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps: Cart
# ---------------------------------------------------------------------------
@given("an empty cart", target_fixture="cart")
def empty_cart():
    cart = Cart.create("cust-001")
    cart._events.clear()
    return cart


@given(parsers.cfparse('the cart holds {qty:d} of "{product_id}" at {price:g}'), target_fixture="cart")
def cart_holds_line(cart, qty, product_id, price):
    cart.add_line(product_id=product_id, name=f"Product {product_id}", unit_price=price, quantity=qty)
    cart._events.clear()
    return cart


# ---------------------------------------------------------------------------
# Given steps: Order
# ---------------------------------------------------------------------------
@given("a pending order for 2 dashcams at 100 and 1 hardwire kit at 50 discounted to 40", target_fixture="order")
def pending_scenario_order(make_order):
    return make_order()


@given(parsers.cfparse('the order moved to "{status}"'), target_fixture="order")
def order_moved_to(order, status):
    order.change_status(status, "admin@portal.test")
    order._events.clear()
    return order


@given("the order was cancelled", target_fixture="order")
def order_was_cancelled(order):
    order.cancel("buyer@acme.test")
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# Then steps: shared
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then(parsers.cfparse('the payment status is "{status}"'))
def payment_status_is(order, status):
    assert order.payment_status == status


@then(parsers.cfparse("the order subtotal is {amount:g}"))
def order_subtotal_is(order, amount):
    assert order.pricing.subtotal == amount


@then(parsers.cfparse("the order total is {amount:g}"))
def order_total_is(order, amount):
    assert order.pricing.total_amount == amount


@then("the action is rejected")
def action_rejected(error):
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse('a "{event_name}" event is raised'))
def event_raised(order, event_name):
    assert any(event.__class__.__name__ == event_name for event in order._events)


@then("no event is raised")
def no_event_raised(order):
    assert order._events == []
