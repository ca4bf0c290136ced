"""Integration-test fixtures.

The app runs in-process behind httpx's ASGITransport. Each test gets a fresh
registry and currency wired into the process-wide singletons, driven by the
settable clock so markets can be closed without waiting for a deadline.
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config.settings import settings
from src.main import app
from src.pm_currency.domain.token import InMemoryCurrency
from src.pm_ledger.infrastructure.event_log import InMemoryEventLog
from src.pm_market.application.registry import MarketRegistry


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def event_log() -> InMemoryEventLog:
    return InMemoryEventLog()


@pytest.fixture(autouse=True)
def registry(
    monkeypatch: pytest.MonkeyPatch,
    currency: InMemoryCurrency,
    clock: Any,
    event_log: InMemoryEventLog,
) -> MarketRegistry:
    fresh = MarketRegistry(
        currency=currency,
        registry_id=settings.REGISTRY_ID,
        fee_sink_account=settings.FEE_SINK_ACCOUNT,
        event_sink=event_log,
        clock=clock,
    )
    monkeypatch.setattr("src.pm_currency.application.service._currency", currency)
    monkeypatch.setattr("src.pm_market.application.service._registry", fresh)
    return fresh


@pytest.fixture
def auth_headers(client: AsyncClient) -> Callable[[str], Awaitable[dict[str, str]]]:
    """Fetch a development token for `participant` and return the Bearer header."""

    async def _headers(participant: str) -> dict[str, str]:
        resp = await client.post("/api/v1/auth/token", json={"participant": participant})
        assert resp.status_code == 200, resp.text
        token = resp.json()["data"]["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _headers
