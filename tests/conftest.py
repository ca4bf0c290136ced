"""Shared test fixtures."""

# ruff: noqa: E402  -- env defaults must be set before config.settings is imported

import os

# Settings are read at import time; provide the mandatory secret before any src import
os.environ.setdefault("JWT_SECRET", "test-secret-not-for-production")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("PERSIST_EVENTS", "false")

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from src.pm_currency.domain.token import InMemoryCurrency
from src.pm_ledger.domain.models import MarketConfig
from src.pm_ledger.engine.ledger import MarketLedger

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
PRECISION = 10**6


class FakeClock:
    """Settable clock; call it like utc_now()."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def make_config(**overrides: Any) -> MarketConfig:
    defaults: dict[str, Any] = {
        "market_id": "mkt-1",
        "question": "Will it rain tomorrow?",
        "fee_rate": 50,
        "deadline": T0 + timedelta(days=1),
        "unit_base_price": PRECISION,  # one currency per unit
        "precision": PRECISION,
        "escrow_account": "ESCROW:mkt-1",
        "fee_sink_account": "PLATFORM_FEE",
        "owner": "REGISTRY",
    }
    defaults.update(overrides)
    return MarketConfig(**defaults)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(T0)


@pytest.fixture
def currency() -> InMemoryCurrency:
    return InMemoryCurrency(decimals=6)


@pytest.fixture
def make_ledger(
    currency: InMemoryCurrency, clock: FakeClock
) -> Callable[..., MarketLedger]:
    def _make(registry_hook: Any = None, event_sink: Any = None, **overrides: Any) -> MarketLedger:
        return MarketLedger(
            make_config(**overrides),
            currency,
            registry_hook=registry_hook,
            event_sink=event_sink,
            clock=clock,
        )

    return _make


@pytest.fixture
def fund(currency: InMemoryCurrency) -> Callable[[MarketLedger, str, int], Awaitable[None]]:
    """Mint `amount` to a participant and approve the ledger's escrow for all of it."""

    async def _fund(ledger: MarketLedger, participant: str, amount: int) -> None:
        await currency.mint(participant, amount)
        await currency.approve(participant, ledger.config.escrow_account, amount)

    return _fund
