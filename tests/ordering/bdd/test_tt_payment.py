"""BDD tests for bank transfer (T/T) payment."""

from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/tt_payment.feature")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("the customer chose bank transfer", target_fixture="order")
def chose_tt(order):
    order.request_tt("buyer@acme.test")
    order._events.clear()
    return order


@given(parsers.cfparse('remittance evidence "{filename}" was uploaded'), target_fixture="order")
def evidence_uploaded(order, filename):
    order.attach_remittance(
        file_id="f-1",
        name=filename,
        url=f"memory://remittance/{order.id}/f-1_{filename}",
        blob_path=f"remittance/{order.id}/f-1_{filename}",
        actor_label="buyer@acme.test",
    )
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the customer chooses bank transfer again")
def choose_tt_again(order):
    order.request_tt("buyer@acme.test")


@when("the customer starts card checkout")
def start_card_checkout(order, error):
    try:
        order.record_card_checkout("cs_test_1", "buyer@acme.test")
    except ValidationError as exc:
        error["exc"] = exc


@when("the admin confirms the payment")
def admin_confirms(order):
    order.confirm_payment("admin@portal.test", reference="SWIFT-1")


@when("the admin rejects the payment")
def admin_rejects(order):
    order.reject_payment("admin@portal.test", reason="Funds not received")


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order has {count:d} remittance file"))
def remittance_file_count(order, count):
    assert len(order.remittance_files) == count


@then(parsers.cfparse('the bank transfer status is "{status}"'))
def tt_status_is(order, status):
    assert order.tt_status == status


@then(parsers.cfparse('the payment method is "{method}"'))
def payment_method_is(order, method):
    assert order.payment_method == method
