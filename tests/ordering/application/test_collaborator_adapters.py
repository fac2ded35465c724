"""Tests for the collaborator ports, their adapters and factories."""

from types import SimpleNamespace

import pytest
import stripe
from ordering.blobstore import get_blob_store, reset_blob_store
from ordering.blobstore.local_adapter import LocalBlobStore
from ordering.blobstore.memory_adapter import InMemoryBlobStore
from ordering.catalog import get_catalog, reset_catalog
from ordering.catalog.memory_adapter import InMemoryCatalog
from ordering.checkout import checkout_currency, get_checkout_provider, reset_checkout_provider
from ordering.checkout.fake_adapter import FakeCheckoutProvider
from ordering.checkout.stripe_adapter import StripeCheckoutProvider
from ordering.errors import CollaboratorError


class TestFakeCheckoutProvider:
    def test_default_session_succeeds(self):
        provider = FakeCheckoutProvider()
        session = provider.create_session("ORD-260101-120000-ab", 24000, "USD")

        assert session.session_id.startswith("cs_fake_")
        assert session.session_id in session.redirect_url

    def test_configured_failure(self):
        provider = FakeCheckoutProvider()
        provider.configure(should_succeed=False, failure_reason="Gateway timeout")

        with pytest.raises(CollaboratorError) as exc:
            provider.create_session("ORD-260101-120000-ab", 24000, "USD")
        assert exc.value.collaborator == "checkout provider"

    def test_call_logging(self):
        provider = FakeCheckoutProvider()
        provider.create_session("ORD-260101-120000-ab", 1000, "EUR")

        assert provider.calls == [
            {
                "method": "create_session",
                "order_ref": "ORD-260101-120000-ab",
                "amount_minor_units": 1000,
                "currency": "EUR",
            }
        ]


@pytest.fixture()
def stripe_client_settings(monkeypatch):
    """Keep the SDK-wide HTTP client settings from leaking between tests."""
    monkeypatch.setattr(stripe, "default_http_client", stripe.default_http_client)
    monkeypatch.setattr(stripe, "max_network_retries", stripe.max_network_retries)


@pytest.mark.usefixtures("stripe_client_settings")
class TestStripeCheckoutProvider:
    def test_creates_single_line_session(self, monkeypatch):
        captured = {}

        def _create(**kwargs):
            captured.update(kwargs)
            return SimpleNamespace(id="cs_test_abc", url="https://checkout.stripe.com/c/pay/cs_test_abc")

        monkeypatch.setattr(stripe.checkout.Session, "create", _create)
        provider = StripeCheckoutProvider("sk_test_123", "https://portal.test/ok", "https://portal.test/cancel")

        session = provider.create_session("ORD-260101-120000-ab", 24000, "USD")

        assert session.session_id == "cs_test_abc"
        assert captured["api_key"] == "sk_test_123"
        assert captured["client_reference_id"] == "ORD-260101-120000-ab"
        assert captured["line_items"][0]["price_data"]["unit_amount"] == 24000
        assert captured["line_items"][0]["price_data"]["currency"] == "usd"

    def test_timeout_and_retries_reach_the_http_client(self, monkeypatch):
        built = {}

        class _RecordingClient:
            def __init__(self, timeout):
                built["timeout"] = timeout

        monkeypatch.setattr(stripe, "RequestsClient", _RecordingClient)

        StripeCheckoutProvider(
            "sk_test_123", "https://portal.test/ok", "https://portal.test/cancel", timeout=3.0, max_network_retries=1
        )

        assert built == {"timeout": 3.0}
        assert isinstance(stripe.default_http_client, _RecordingClient)
        assert stripe.max_network_retries == 1

    def test_default_timeout_is_bounded(self):
        provider = StripeCheckoutProvider("sk_test_123", "https://portal.test/ok", "https://portal.test/cancel")

        assert provider.timeout == 10.0
        assert isinstance(stripe.default_http_client, stripe.RequestsClient)

    def test_stripe_error_becomes_collaborator_error(self, monkeypatch):
        def _create(**kwargs):
            raise stripe.APIConnectionError("Network is unreachable")

        monkeypatch.setattr(stripe.checkout.Session, "create", _create)
        provider = StripeCheckoutProvider("sk_test_123", "https://portal.test/ok", "https://portal.test/cancel")

        with pytest.raises(CollaboratorError):
            provider.create_session("ORD-260101-120000-ab", 24000, "USD")


class TestCheckoutFactory:
    def test_fake_by_default(self, monkeypatch):
        monkeypatch.delenv("CHECKOUT_PROVIDER", raising=False)
        reset_checkout_provider()
        assert isinstance(get_checkout_provider(), FakeCheckoutProvider)

    def test_stripe_selected_by_environment(self, monkeypatch, stripe_client_settings):
        monkeypatch.setenv("CHECKOUT_PROVIDER", "stripe")
        monkeypatch.setenv("STRIPE_API_KEY", "sk_test_123")
        monkeypatch.setenv("CHECKOUT_TIMEOUT", "4.5")
        monkeypatch.setenv("CHECKOUT_MAX_RETRIES", "1")
        reset_checkout_provider()

        provider = get_checkout_provider()
        assert isinstance(provider, StripeCheckoutProvider)
        assert provider.api_key == "sk_test_123"
        assert provider.timeout == 4.5
        assert provider.max_network_retries == 1
        reset_checkout_provider()

    def test_unknown_provider(self, monkeypatch):
        monkeypatch.setenv("CHECKOUT_PROVIDER", "paypal")
        reset_checkout_provider()
        with pytest.raises(ValueError):
            get_checkout_provider()

    def test_currency(self, monkeypatch):
        monkeypatch.setenv("CHECKOUT_CURRENCY", "EUR")
        assert checkout_currency() == "EUR"


class TestLocalBlobStore:
    def test_upload_list_delete(self, tmp_path):
        store = LocalBlobStore(tmp_path)

        url = store.upload("remittance/o-1/f-1_swift.pdf", b"%PDF-1.4")

        assert url.startswith("file://")
        assert (tmp_path / "remittance/o-1/f-1_swift.pdf").read_bytes() == b"%PDF-1.4"
        assert store.list("remittance/") == ["remittance/o-1/f-1_swift.pdf"]

        store.delete("remittance/o-1/f-1_swift.pdf")
        store.delete("remittance/o-1/f-1_swift.pdf")
        assert store.list("remittance/") == []

    def test_path_cannot_escape_root(self, tmp_path):
        store = LocalBlobStore(tmp_path / "blobs")
        with pytest.raises(CollaboratorError) as exc:
            store.upload("../outside.txt", b"data")

        assert exc.value.collaborator == "blob store"
        assert not (tmp_path / "outside.txt").exists()

    def test_delete_outside_root_is_refused(self, tmp_path):
        victim = tmp_path / "keep.txt"
        victim.write_bytes(b"data")
        store = LocalBlobStore(tmp_path / "blobs")

        with pytest.raises(CollaboratorError):
            store.delete("../keep.txt")
        assert victim.exists()

    def test_list_of_missing_root(self, tmp_path):
        assert LocalBlobStore(tmp_path / "nothing-yet").list("remittance/") == []


class TestBlobStoreFactory:
    def test_memory_by_default(self, monkeypatch):
        monkeypatch.delenv("BLOB_STORE", raising=False)
        reset_blob_store()
        assert isinstance(get_blob_store(), InMemoryBlobStore)

    def test_local_selected_by_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("BLOB_STORE", "local")
        monkeypatch.setenv("BLOB_STORE_ROOT", str(tmp_path))
        reset_blob_store()

        store = get_blob_store()
        assert isinstance(store, LocalBlobStore)
        assert store.root == tmp_path.resolve()

    def test_memory_store_simulated_outage(self):
        store = InMemoryBlobStore()
        store.fail_next = "upload"

        with pytest.raises(CollaboratorError):
            store.upload("remittance/x", b"data")
        store.upload("remittance/x", b"data")
        assert store.list("remittance/") == ["remittance/x"]


class TestCatalogFactory:
    def test_memory_catalog_by_default(self, monkeypatch):
        monkeypatch.delenv("CATALOG_ADAPTER", raising=False)
        reset_catalog()
        assert isinstance(get_catalog(), InMemoryCatalog)
