import pytest
from ordering.blobstore import reset_blob_store, set_blob_store
from ordering.blobstore.memory_adapter import InMemoryBlobStore
from ordering.catalog import reset_catalog, set_catalog
from ordering.catalog.memory_adapter import InMemoryCatalog
from ordering.catalog.port import ProductInfo
from ordering.checkout import reset_checkout_provider, set_checkout_provider
from ordering.checkout.fake_adapter import FakeCheckoutProvider
from ordering.directory import reset_customer_directory, set_customer_directory
from ordering.directory.memory_adapter import InMemoryCustomerDirectory
from ordering.directory.port import CustomerProfile
from ordering.shared.principal import Principal
from protean.integrations.pytest import DomainFixture

CUSTOMER_ID = "cust-001"


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session", autouse=True)
def setup_db(ordering_bed):
    from ordering.domain import ordering
    from ordering.utils.db import drop_db, setup_db

    setup_db(ordering)

    yield

    drop_db(ordering)


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield

        from protean import current_domain

        # Clear all databases
        for _, provider in current_domain.providers.items():
            provider._data_reset()

        # Drain event stores
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def catalog():
    catalog = InMemoryCatalog(
        [
            ProductInfo(
                id="A",
                name="Road Eye 4K Dashcam",
                price=100.0,
                category_id="cat-dashcam",
                category_name="Dashcam",
                hs_code="8525.89",
                origin="Korea",
                weight=0.4,
                description="Front and rear 4K dashcam",
                image_url="https://img.example.test/a.png",
            ),
            ProductInfo(
                id="B",
                name="Hardwire Kit",
                price=50.0,
                category_id="cat-accessory",
                category_name="Accessory",
                hs_code="8544.42",
                origin="Korea",
                weight=0.1,
                description="Parking mode hardwire kit",
            ),
            ProductInfo(id="C", name="Cabin Camera", price=30.0, category_name="Companion"),
            ProductInfo(id="D", name="USB-C Cable", price=10.0, category_name="Cables"),
        ]
    )
    set_catalog(catalog)
    yield catalog
    reset_catalog()


@pytest.fixture(autouse=True)
def directory():
    directory = InMemoryCustomerDirectory(
        [
            CustomerProfile(
                id=CUSTOMER_ID,
                email="buyer@acme.test",
                company_name="Acme Trading Co.",
                company_address="12 Harbour Road, Busan",
                country_code="KR",
                vat_number="KR-123-45",
                contact_name="Jin Park",
                contact_title="Purchasing Manager",
                tel_no="+82 51 000 0000",
                mob_no="+82 10 0000 0000",
            ),
            CustomerProfile(id="cust-002", email="other@globex.test", company_name="Globex"),
        ]
    )
    set_customer_directory(directory)
    yield directory
    reset_customer_directory()


@pytest.fixture(autouse=True)
def blob_store():
    store = InMemoryBlobStore()
    set_blob_store(store)
    yield store
    reset_blob_store()


@pytest.fixture(autouse=True)
def checkout_provider():
    provider = FakeCheckoutProvider()
    set_checkout_provider(provider)
    yield provider
    reset_checkout_provider()


# ---------------------------------------------------------------------------
# Principals
# ---------------------------------------------------------------------------
@pytest.fixture()
def customer():
    return Principal(id=CUSTOMER_ID, email="buyer@acme.test", role_level=1)


@pytest.fixture()
def other_customer():
    return Principal(id="cust-002", email="other@globex.test", role_level=1)


@pytest.fixture()
def admin():
    return Principal(id="admin-001", email="admin@portal.test", role_level=50)


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------
SCENARIO_ITEMS = [
    {"product_id": "A", "name": "Road Eye 4K Dashcam", "price": 100.0, "quantity": 2, "category_name": "Dashcam"},
    {
        "product_id": "B",
        "name": "Hardwire Kit",
        "price": 50.0,
        "discount_price": 40.0,
        "quantity": 1,
        "category_name": "Accessory",
    },
]


@pytest.fixture()
def make_order():
    """Factory for a pending order built straight from line snapshots."""
    from ordering.order.order import Order

    def _make(items=None, shipping_terms="FOB", customer_id=CUSTOMER_ID, order_number="ORD-260101-120000-ab"):
        order = Order.place(
            order_number=order_number,
            customer_id=customer_id,
            items_data=items or SCENARIO_ITEMS,
            ship_to={"company_name": "Acme Trading Co.", "address": "12 Harbour Road, Busan"},
            placed_by="buyer@acme.test",
            shipping_terms=shipping_terms,
            company_name="Acme Trading Co.",
        )
        order._events.clear()
        return order

    return _make
