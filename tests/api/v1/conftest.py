"""Test fixtures for API tests."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from copydesk.api.v1 import api_router
from copydesk.api.v1.dependencies import (
    EditorRegistry,
    clear_caches,
    get_editor_registry,
)
from copydesk.api.v1.error_handlers import register_error_handlers
from copydesk.domain.models.email_table import CounterIdSource
from copydesk.domain.models.errors import ContentStoreError
from copydesk.domain.services.content_store import InMemoryContentStore


class BrokenContentStore:
    """Content store whose tracker is down."""

    async def fetch(self, campaign_id: str) -> str:
        raise ContentStoreError("Tracker request failed: connection refused")

    async def store(self, campaign_id: str, content: str) -> None:
        raise ContentStoreError("Tracker returned 502", status_code=502)


@pytest.fixture
def content_store() -> InMemoryContentStore:
    return InMemoryContentStore()


@pytest.fixture
def registry(content_store) -> EditorRegistry:
    return EditorRegistry(content_store=content_store, id_source=CounterIdSource())


def build_app(registry: EditorRegistry) -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(api_router)
    app.dependency_overrides[get_editor_registry] = lambda: registry
    return app


@pytest.fixture
def client(registry) -> TestClient:
    """Test client backed by an in-memory content store."""
    clear_caches()
    yield TestClient(build_app(registry))
    clear_caches()


@pytest.fixture
def broken_client() -> TestClient:
    """Test client whose content store always fails."""
    registry = EditorRegistry(content_store=BrokenContentStore(), id_source=CounterIdSource())
    yield TestClient(build_app(registry))
