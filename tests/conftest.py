"""Shared fixtures for the ImmoGest test suite."""

import httpx
import pytest
from fastapi.testclient import TestClient

from immogest.core.config import Settings
from immogest.core.remote_client import RemoteTableClient
from immogest.main import create_app
from immogest.services.context import DataContext
from immogest.services.fallback_store import FallbackStore
from immogest.services.notifications import NotificationCenter

LANDLORD_HEADERS = {"X-User-Id": "mock-owner-1", "X-User-Role": "landlord"}
TENANT_HEADERS = {"X-User-Id": "mock-tenant-1", "X-User-Role": "tenant"}


@pytest.fixture
def settings() -> Settings:
    """Settings with the shipped placeholder credentials (fallback mode)."""
    return Settings(_env_file=None)


@pytest.fixture
def remote_settings() -> Settings:
    """Settings pointing at a fake hosted backend, with no retry backoff."""
    return Settings(
        _env_file=None,
        supabase_url="https://immogest-test.example.co",
        supabase_anon_key="test-anon-key",
        request_timeout_ms=1000,
        max_retries=1,
        retry_backoff_ms=0,
    )


@pytest.fixture
def store() -> FallbackStore:
    return FallbackStore()


@pytest.fixture
def notifier() -> NotificationCenter:
    return NotificationCenter()


@pytest.fixture
def fallback_ctx(settings, store, notifier) -> DataContext:
    return DataContext(settings, store=store, notifier=notifier)


@pytest.fixture
def remote_ctx(remote_settings):
    """Factory for a data context whose backend calls are answered by a handler."""

    def build(handler) -> DataContext:
        remote = RemoteTableClient(remote_settings, transport=httpx.MockTransport(handler))
        ctx = DataContext(remote_settings, remote=remote)
        ctx.use_remote = True
        return ctx

    return build


@pytest.fixture
def client(settings):
    app = create_app(settings, DataContext(settings))
    with TestClient(app) as test_client:
        yield test_client
