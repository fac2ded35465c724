"""Application tests for the cart store: pricing, persistence and leniency."""

import pytest
from ordering.cart.cart import Cart
from ordering.cart.store import CartStore
from ordering.errors import AuthorizationError
from ordering.pricing.price_list import CustomerPriceList
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def _stored_cart(customer_id="cust-001"):
    return current_domain.repository_for(Cart).get(customer_id)


def _negotiate(customer_id, product_id, price):
    price_list = CustomerPriceList.create(customer_id)
    price_list.set_prices([{"product_id": product_id, "unit_price": price}], "admin")
    current_domain.repository_for(CustomerPriceList).add(price_list)


class TestLoad:
    def test_first_load_creates_empty_cart(self, customer):
        cart = CartStore(customer).load()
        assert len(cart.lines) == 0
        assert cart.revision == 0

    def test_load_reads_persisted_cart(self, customer):
        CartStore(customer).add_item("A", 2)

        cart = CartStore(customer).load()
        assert cart.line_for("A").quantity == 2


class TestAddItem:
    def test_list_price_without_override(self, customer):
        store = CartStore(customer)
        line = store.add_item("A", 2)

        assert line.unit_price == 100.0
        assert line.discount_unit_price is None
        assert line.name == "Road Eye 4K Dashcam"
        assert line.category_name == "Dashcam"
        assert _stored_cart().line_for("A").quantity == 2

    def test_negotiated_price_becomes_discount(self, customer):
        _negotiate(customer.id, "B", 40.0)

        line = CartStore(customer).add_item("B")

        assert line.unit_price == 50.0
        assert line.discount_unit_price == 40.0

    def test_override_above_list_is_ignored(self, customer):
        _negotiate(customer.id, "B", 60.0)
        assert CartStore(customer).add_item("B").discount_unit_price is None

    def test_repeat_add_sums_quantities(self, customer):
        store = CartStore(customer)
        store.add_item("A", 1)
        store.add_item("A", 4)

        assert len(_stored_cart().lines) == 1
        assert _stored_cart().line_for("A").quantity == 5

    def test_add_flags_attention_until_acknowledged(self, customer):
        store = CartStore(customer)
        store.add_item("A")
        assert store.attention is True

        store.acknowledge()
        assert store.attention is False

    def test_unknown_product(self, customer):
        with pytest.raises(ObjectNotFoundError):
            CartStore(customer).add_item("nope")

    def test_non_positive_quantity(self, customer):
        with pytest.raises(ValidationError):
            CartStore(customer).add_item("A", 0)


class TestUpdateAndRemove:
    def test_update_quantity(self, customer):
        store = CartStore(customer)
        store.add_item("A")

        assert store.update_quantity("A", 3) is True
        assert _stored_cart().line_for("A").quantity == 3

    def test_quantity_below_one_leaves_cart_unchanged(self, customer):
        store = CartStore(customer)
        store.add_item("A", 2)
        revision = _stored_cart().revision

        assert store.update_quantity("A", 0) is False
        assert _stored_cart().line_for("A").quantity == 2
        assert _stored_cart().revision == revision

    def test_remove_item(self, customer):
        store = CartStore(customer)
        store.add_item("A")
        store.add_item("B")

        store.remove_item("A")
        assert [str(line.product_id) for line in _stored_cart().lines] == ["B"]

    def test_clear(self, customer):
        store = CartStore(customer)
        store.add_item("A")
        store.clear()

        assert len(_stored_cart().lines) == 0

    def test_totals(self, customer):
        _negotiate(customer.id, "B", 40.0)
        store = CartStore(customer)
        store.add_item("A", 2)
        store.add_item("B", 1)

        totals = store.totals()
        assert totals.total_items == 3
        assert totals.total_amount == 240.0


class TestAccess:
    def test_customer_cannot_open_another_cart(self, other_customer):
        with pytest.raises(AuthorizationError):
            CartStore(other_customer, "cust-001")

    def test_admin_edits_customer_cart_at_customer_prices(self, admin, customer):
        _negotiate(customer.id, "B", 40.0)

        line = CartStore(admin, customer.id).add_item("B")

        assert line.discount_unit_price == 40.0
        assert _stored_cart(customer.id).line_for("B") is not None


class TestPersistenceLeniency:
    def test_failed_write_keeps_local_state(self, customer, monkeypatch):
        store = CartStore(customer)
        store.load()

        repo = current_domain.repository_for(Cart)

        def _fail(self, cart):
            raise ConnectionError("document store unreachable")

        monkeypatch.setattr(type(repo), "add", _fail)

        store.add_item("A", 2)

        assert store.cart.line_for("A").quantity == 2
        assert store.last_persist_error == "document store unreachable"

    def test_next_successful_write_clears_error(self, customer):
        store = CartStore(customer)
        store.last_persist_error = "earlier failure"

        store.add_item("A")
        assert store.last_persist_error is None
