import json

import httpx
import pytest
from fastapi.testclient import TestClient

from prompthub.core.config import Settings
from prompthub.core.errors import StoreError
from prompthub.db.init_db import init_db, seed_providers
from prompthub.db.session import make_engine, make_session_factory
from prompthub.main import create_app
from prompthub.services.record_store import RecordStore
from prompthub.services.version_store import VersionStore


def make_settings(**overrides):
    values = dict(
        database_url="sqlite://",
        configure_logging=False,
        groq_api_key="test-groq-key",
        openai_api_key="test-openai-key",
        anthropic_api_key="test-anthropic-key",
        gemini_api_key="test-gemini-key",
        huggingface_api_key="test-hf-key",
        deepseek_api_key=None,
        openrouter_api_key=None,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


def chat_completion(content, model="llama-3.1-8b-instant"):
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1700000000,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 5, "completion_tokens": 3, "total_tokens": 8},
    }


class VendorStub:
    """httpx transport handler that records requests and replays canned replies."""

    def __init__(self, responder=None):
        self.requests = []
        self.responder = responder or (lambda request: httpx.Response(200, json=chat_completion("Hello from Groq")))

    def __call__(self, request):
        self.requests.append(request)
        return self.responder(request)

    def bodies(self):
        return [json.loads(r.content) for r in self.requests]

    def client(self):
        return httpx.Client(transport=httpx.MockTransport(self))


class FailingStore:
    """Wraps a RecordStore and raises StoreError for selected (operation, table) calls."""

    def __init__(self, inner, fail_on=()):
        self.inner = inner
        self.fail_on = set(fail_on)
        self.calls = []

    def _check(self, operation, table):
        self.calls.append((operation, table))
        if (operation, table) in self.fail_on:
            raise StoreError(f"injected {operation} failure on {table}")

    def insert(self, table, record):
        self._check("insert", table)
        return self.inner.insert(table, record)

    def update(self, table, filters, patch):
        self._check("update", table)
        return self.inner.update(table, filters, patch)

    def select(self, table, filters=None, order_by=None, descending=False, limit=None):
        self._check("select", table)
        return self.inner.select(table, filters, order_by=order_by, descending=descending, limit=limit)

    def delete(self, table, filters):
        self._check("delete", table)
        return self.inner.delete(table, filters)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return RecordStore(make_session_factory(engine))


@pytest.fixture
def seeded_store(store):
    seed_providers(store)
    return store


@pytest.fixture
def version_store(store):
    return VersionStore(store)


@pytest.fixture
def vendor():
    return VendorStub()


@pytest.fixture
def client(settings, engine, vendor):
    app = create_app(settings, engine=engine, http_client=vendor.client())
    with TestClient(app) as test_client:
        yield test_client
