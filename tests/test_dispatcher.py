import threading

import pytest

from prompthub.core.errors import NotFound, StoreError, ValidationError
from prompthub.services.dispatcher import DispatchCoordinator
from prompthub.services.provider_registry import ProviderRegistry
from prompthub.services.providers import BaseAdapter, ProviderReply, build_adapter_registry

from conftest import FailingStore, VendorStub, make_settings


class BrokenAdapter(BaseAdapter):
    def invoke(self, descriptor, prompt_text):
        raise RuntimeError("vendor exploded")


class GatedAdapter(BaseAdapter):
    """Finishes only after `wait_for` is set, to force out-of-order completion."""

    def __init__(self, text, wait_for=None, done=None):
        super().__init__(None)
        self.text = text
        self.wait_for = wait_for
        self.done = done

    def invoke(self, descriptor, prompt_text):
        if self.wait_for is not None:
            assert self.wait_for.wait(timeout=5)
        if self.done is not None:
            self.done.set()
        return ProviderReply(response_text=self.text)


@pytest.fixture
def registry(seeded_store):
    seeded_store.insert("llm_providers", {"id": "unknown-vendor", "name": "Unknown Vendor", "model": "u-1"})
    seeded_store.insert("llm_providers", {"id": "broken-vendor", "name": "Broken Vendor", "model": "b-1"})
    return ProviderRegistry(seeded_store)


@pytest.fixture
def vendor():
    return VendorStub()


@pytest.fixture
def adapters(vendor):
    adapters = build_adapter_registry(make_settings(), http_client=vendor.client())
    adapters.register("broken-vendor", BrokenAdapter(None))
    return adapters


def test_failures_are_isolated_and_order_is_kept(registry, adapters, vendor):
    dispatcher = DispatchCoordinator(registry, adapters)

    results = dispatcher.dispatch_to_providers("Write a haiku", ["groq", "unknown-vendor", "broken-vendor"])

    assert [r.provider_id for r in results] == ["groq", "unknown-vendor", "broken-vendor"]

    groq, unknown, broken = results
    assert groq.success and groq.response_text == "Hello from Groq"
    assert groq.usage == {"input": 5, "output": 3}
    assert groq.model == "llama-3.1-8b-instant"
    assert unknown.success and unknown.mocked
    assert "Write a haiku" in unknown.response_text
    assert broken.success is False
    assert broken.error_text == "vendor exploded"
    assert broken.response_text is None
    assert len(vendor.requests) == 1


def test_missing_credential_is_a_per_entry_failure(registry, vendor):
    adapters = build_adapter_registry(make_settings(anthropic_api_key=None), http_client=vendor.client())
    dispatcher = DispatchCoordinator(registry, adapters)

    anthropic, groq = dispatcher.dispatch_to_providers("hi", ["anthropic", "groq"])

    assert anthropic.success is False
    assert "ANTHROPIC_API_KEY" in anthropic.error_text
    assert groq.success is True


def test_results_follow_input_order_not_completion_order(registry, adapters):
    second_done = threading.Event()
    adapters.register("groq", GatedAdapter("slow", wait_for=second_done))
    adapters.register("unknown-vendor", GatedAdapter("fast", done=second_done))

    results = DispatchCoordinator(registry, adapters, max_workers=2).dispatch_to_providers(
        "hi", ["groq", "unknown-vendor"]
    )

    assert [r.response_text for r in results] == ["slow", "fast"]


@pytest.mark.parametrize(
    "prompt, ids, field",
    [
        ("", ["groq"], "prompt"),
        ("   ", ["groq"], "prompt"),
        (None, ["groq"], "prompt"),
        ("hi", [], "provider_ids"),
        ("hi", None, "provider_ids"),
        ("hi", "groq", "provider_ids"),
        ("hi", ["groq", ""], "provider_ids"),
    ],
)
def test_validation_happens_before_lookup(seeded_store, adapters, prompt, ids, field):
    failing = FailingStore(seeded_store)
    dispatcher = DispatchCoordinator(ProviderRegistry(failing), adapters)

    with pytest.raises(ValidationError) as err:
        dispatcher.dispatch_to_providers(prompt, ids)

    assert err.value.field == field
    assert failing.calls == []


def test_unknown_provider_id_aborts_dispatch(registry, adapters, vendor):
    with pytest.raises(NotFound, match="nope"):
        DispatchCoordinator(registry, adapters).dispatch_to_providers("hi", ["groq", "nope"])

    assert vendor.requests == []


def test_registry_failure_aborts_dispatch(seeded_store, adapters):
    failing = FailingStore(seeded_store, fail_on={("select", "llm_providers")})

    with pytest.raises(StoreError):
        DispatchCoordinator(ProviderRegistry(failing), adapters).dispatch_to_providers("hi", ["groq"])


def test_inactive_providers_are_not_resolved(seeded_store):
    seeded_store.update("llm_providers", {"id": "openai"}, {"is_active": False})
    registry = ProviderRegistry(seeded_store)

    with pytest.raises(NotFound):
        registry.lookup_providers(["openai"])
    assert "openai" not in [d.id for d in registry.list_providers()]


def test_kind_column_selects_adapter(seeded_store, adapters, vendor):
    seeded_store.insert(
        "llm_providers",
        {"id": "groq-big", "name": "Groq 70B", "kind": "groq", "model": "llama-3.3-70b-versatile"},
    )

    (result,) = DispatchCoordinator(ProviderRegistry(seeded_store), adapters).dispatch_to_providers(
        "hi", ["groq-big"]
    )

    assert result.success and not result.mocked
    assert vendor.bodies()[0]["model"] == "llama-3.3-70b-versatile"
