import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.search.engine import SearchService
from app.services.search.provider import get_search_service
from pipelines.io.entity_loader import load_entities
from tests.utils import FIXED_NOW


class _SyncASGIClient:
    """Minimal synchronous wrapper around httpx.AsyncClient for ASGI apps."""

    def __init__(self, app):
        transport = httpx.ASGITransport(app=app)
        self._client = httpx.AsyncClient(transport=transport, base_url="http://testserver")

    def request(self, method: str, url: str, **kwargs):
        return asyncio.run(self._client.request(method, url, **kwargs))

    def get(self, url: str, **kwargs):
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs):
        return self.request("POST", url, **kwargs)

    def close(self) -> None:
        asyncio.run(self._client.aclose())


@pytest.fixture
def client():
    """Create test client compatible with older/newer httpx releases."""
    try:
        test_client = TestClient(app)
        yield test_client
    except TypeError:
        fallback_client = _SyncASGIClient(app)
        try:
            yield fallback_client
        finally:
            fallback_client.close()


@pytest.fixture(scope="session")
def sample_entities():
    """People and organizations bundled under fixtures/sample."""
    return load_entities()


@pytest.fixture
def service(sample_entities) -> SearchService:
    people, organizations = sample_entities
    return SearchService(people, organizations, clock=lambda: FIXED_NOW)


@pytest.fixture
def api_service(service):
    """Route the API at the sample-data service for the duration of a test."""
    app.dependency_overrides[get_search_service] = lambda: service
    try:
        yield service
    finally:
        app.dependency_overrides.pop(get_search_service, None)
