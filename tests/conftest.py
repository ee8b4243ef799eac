# --- keep this shim at the very top ---
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
# --------------------------------------

import httpx
import pytest
import pytest_asyncio
import respx
from fastapi.testclient import TestClient

from swapi_gateway.main import app  # noqa: E402
from swapi_gateway.settings import settings  # noqa: E402

from fakes import BASE  # noqa: E402


@pytest.fixture(autouse=True)
def _pin_upstream(monkeypatch):
    """Pin upstream settings so a local .env can't redirect tests."""
    monkeypatch.setattr(settings, "SWAPI_BASE_URL", BASE, raising=False)
    monkeypatch.setattr(settings, "PAGE_LIMIT", 10, raising=False)


@pytest.fixture
def respx_mocked():
    """respx router for mocking httpx requests.

    Yields:
        A respx router that intercepts `httpx` calls.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def client():
    return TestClient(app)


@pytest_asyncio.fixture
async def test_client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://testserver"
    ) as c:
        yield c
