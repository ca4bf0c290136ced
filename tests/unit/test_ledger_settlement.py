"""Unit tests for MarketLedger resolution and reward collection."""
from typing import Any

import pytest

from src.pm_common.enums import LedgerEventType, MarketStatus, Side
from src.pm_common.errors import (
    AlreadyCollectedError,
    AlreadyResolvedError,
    MarketClosedError,
    MarketStillOpenError,
    NotAWinnerError,
    RewardsNotAvailableError,
    UnauthorizedError,
)
from src.pm_ledger.engine.ledger import MarketLedger
from src.pm_ledger.infrastructure.event_log import InMemoryEventLog

pytestmark = pytest.mark.asyncio

OWNER = "REGISTRY"
ESCROW = "ESCROW:mkt-1"


async def _seed(ledger: MarketLedger, fund: Any, positions: list[tuple[str, Side, int]]) -> None:
    for who, side, units in positions:
        await fund(ledger, who, units)
        await ledger.buy(who, side, units)


class TestResolve:
    async def test_before_deadline_rejected(self, make_ledger: Any, clock: Any) -> None:
        ledger: MarketLedger = make_ledger()
        clock.now = ledger.config.deadline
        with pytest.raises(MarketStillOpenError):
            await ledger.resolve(OWNER, Side.YES)
        assert ledger.status() is MarketStatus.OPEN

    async def test_only_owner(self, make_ledger: Any, clock: Any) -> None:
        ledger: MarketLedger = make_ledger()
        clock.advance(days=2)
        with pytest.raises(UnauthorizedError):
            await ledger.resolve("mallory", Side.YES)
        assert not ledger.settlement.resolved

    async def test_resolves_once(self, make_ledger: Any, clock: Any) -> None:
        ledger: MarketLedger = make_ledger()
        clock.advance(days=2)
        assert ledger.status() is MarketStatus.CLOSED

        record = await ledger.resolve(OWNER, Side.NO)

        assert record.resolved
        assert record.winning_side is Side.NO
        assert record.resolved_at == clock.now
        assert ledger.status() is MarketStatus.RESOLVED
        for side in (Side.NO, Side.YES):
            with pytest.raises(AlreadyResolvedError):
                await ledger.resolve(OWNER, side)
        assert ledger.settlement.winning_side is Side.NO

    async def test_no_trading_after_resolution(
        self, make_ledger: Any, fund: Any, clock: Any
    ) -> None:
        ledger: MarketLedger = make_ledger()
        await _seed(ledger, fund, [("alice", Side.YES, 100)])
        clock.advance(days=2)
        await ledger.resolve(OWNER, Side.YES)
        with pytest.raises(MarketClosedError):
            await ledger.sell("alice", Side.YES, 10)

    async def test_publishes_resolution(self, make_ledger: Any, fund: Any, clock: Any) -> None:
        log = InMemoryEventLog()
        ledger: MarketLedger = make_ledger(event_sink=log, fee_rate=0)
        await _seed(ledger, fund, [("alice", Side.YES, 700), ("bob", Side.NO, 300)])
        clock.advance(days=2)
        await ledger.resolve(OWNER, Side.YES)

        event = log.events()[-1]
        assert event.event_type is LedgerEventType.MARKET_RESOLVED
        assert event.payload["winning_side"] == "YES"
        assert event.payload["total_currency"] == 1000
        assert event.payload["yes_units"] == 700


class TestCollectReward:
    async def test_sole_winner_takes_pool(
        self, make_ledger: Any, fund: Any, clock: Any, currency: Any
    ) -> None:
        ledger: MarketLedger = make_ledger(fee_rate=0)
        await _seed(ledger, fund, [("a", Side.YES, 700), ("b", Side.NO, 300)])
        assert ledger.reserve.state.total_currency == 1000
        clock.advance(days=2)
        await ledger.resolve(OWNER, Side.YES)

        receipt = await ledger.collect_reward("a")

        assert receipt.share == 700 * 1000 // 700 == 1000
        assert await currency.balance_of("a") == 1000
        assert ledger.balance_of("a", Side.YES) == 0
        assert ledger.has_collected("a")
        with pytest.raises(NotAWinnerError):
            await ledger.collect_reward("b")

    async def test_second_collect_fails(self, make_ledger: Any, fund: Any, clock: Any) -> None:
        ledger: MarketLedger = make_ledger(fee_rate=0)
        await _seed(ledger, fund, [("a", Side.NO, 50)])
        clock.advance(days=2)
        await ledger.resolve(OWNER, Side.NO)
        await ledger.collect_reward("a")

        with pytest.raises(AlreadyCollectedError):
            await ledger.collect_reward("a")
        assert ledger.settlement.total_paid == 50

    async def test_before_resolution(self, make_ledger: Any, fund: Any, clock: Any) -> None:
        ledger: MarketLedger = make_ledger()
        await _seed(ledger, fund, [("a", Side.YES, 100)])
        clock.advance(days=2)
        with pytest.raises(RewardsNotAvailableError):
            await ledger.collect_reward("a")

    async def test_proportional_shares(self, make_ledger: Any, fund: Any, clock: Any) -> None:
        ledger: MarketLedger = make_ledger(fee_rate=0)
        await _seed(
            ledger, fund, [("u1", Side.YES, 300), ("u2", Side.YES, 700), ("loser", Side.NO, 500)]
        )
        clock.advance(days=2)
        await ledger.resolve(OWNER, Side.YES)

        share1 = (await ledger.collect_reward("u1")).share
        share2 = (await ledger.collect_reward("u2")).share

        assert (share1, share2) == (450, 1050)
        assert abs(share1 * 700 - share2 * 300) <= 700
        assert share1 + share2 <= ledger.reserve.state.total_currency

    async def test_pool_not_reduced_by_earlier_claims(
        self, make_ledger: Any, fund: Any, clock: Any
    ) -> None:
        ledger: MarketLedger = make_ledger(fee_rate=0)
        await _seed(ledger, fund, [("u1", Side.NO, 2), ("u2", Side.NO, 2), ("x", Side.YES, 4)])
        clock.advance(days=2)
        await ledger.resolve(OWNER, Side.NO)

        assert (await ledger.collect_reward("u2")).share == 4
        assert (await ledger.collect_reward("u1")).share == 4
        assert ledger.reserve.state.total_currency == 8

    async def test_rounding_dust_stays_in_escrow(
        self, make_ledger: Any, fund: Any, clock: Any, currency: Any
    ) -> None:
        ledger: MarketLedger = make_ledger(fee_rate=0)
        await _seed(ledger, fund, [("a", Side.YES, 1), ("b", Side.YES, 2), ("c", Side.NO, 1)])
        clock.advance(days=2)
        await ledger.resolve(OWNER, Side.YES)

        shares = [(await ledger.collect_reward(p)).share for p in ("a", "b")]

        # 1*4//3 = 1, 2*4//3 = 2: one unit of dust, never swept
        assert shares == [1, 2]
        assert await currency.balance_of(ESCROW) == 1
        assert ledger.settlement.total_paid == 3

    async def test_winner_index_tombstoned_after_claim(
        self, make_ledger: Any, fund: Any, clock: Any
    ) -> None:
        ledger: MarketLedger = make_ledger(fee_rate=0)
        await _seed(ledger, fund, [("a", Side.YES, 10), ("b", Side.YES, 10)])
        clock.advance(days=2)
        await ledger.resolve(OWNER, Side.YES)
        await ledger.collect_reward("a")
        assert ledger.holders.index(Side.YES) == [None, "b"]

    async def test_reward_event(self, make_ledger: Any, fund: Any, clock: Any) -> None:
        log = InMemoryEventLog()
        ledger: MarketLedger = make_ledger(event_sink=log, fee_rate=0)
        await _seed(ledger, fund, [("a", Side.NO, 10)])
        clock.advance(days=2)
        await ledger.resolve(OWNER, Side.NO)
        await ledger.collect_reward("a")

        event = log.events()[-1]
        assert event.event_type is LedgerEventType.REWARD_COLLECTED
        assert event.payload == {
            "winning_side": "NO",
            "units": 10,
            "share": 10,
            "delta_yes": 0,
            "delta_no": -10,
        }
