"""MarketRegistry — creates, owns and resolves market ledgers.

Ledgers live in an arena keyed by market id. A ledger never references
the registry object; it gets a RegistryHook that forwards its trade deltas
back here by market id.
"""
import logging
from datetime import datetime

from src.pm_common.amounts import precision_for
from src.pm_common.datetime_utils import Clock, ensure_utc, utc_now
from src.pm_common.enums import LedgerEventType, MarketStatus
from src.pm_common.errors import (
    InvalidMarketConfigError,
    MarketNotFoundError,
    OutcomeNotAvailableError,
)
from src.pm_common.id_generator import generate_market_id
from src.pm_currency.domain.protocol import CurrencyProtocol
from src.pm_ledger.domain.events import EventSinkProtocol, LedgerEvent
from src.pm_ledger.domain.models import MarketConfig, SettlementRecord
from src.pm_ledger.engine.ledger import MarketLedger
from src.pm_market.domain.models import MarketTelemetry, ParticipantExposure
from src.pm_market.domain.oracle import OracleProtocol

logger = logging.getLogger(__name__)

ESCROW_PREFIX = "ESCROW:"


def escrow_account_for(market_id: str) -> str:
    return f"{ESCROW_PREFIX}{market_id}"


class _RegistryHook:
    """The registry capability handed to each ledger."""

    def __init__(self, registry: "MarketRegistry") -> None:
        self._registry = registry

    async def record_trade(
        self, market_id: str, participant: str, delta_yes: int, delta_no: int
    ) -> None:
        self._registry.record_trade(market_id, participant, delta_yes, delta_no)


class MarketRegistry:
    def __init__(
        self,
        currency: CurrencyProtocol,
        registry_id: str,
        fee_sink_account: str,
        event_sink: EventSinkProtocol | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self.registry_id = registry_id
        self._currency = currency
        self._fee_sink_account = fee_sink_account
        self._event_sink = event_sink
        self._clock = clock
        self._hook = _RegistryHook(self)
        self._ledgers: dict[str, MarketLedger] = {}
        self._telemetry: dict[str, MarketTelemetry] = {}
        self._exposures: dict[str, ParticipantExposure] = {}

    async def create_market(
        self,
        question: str,
        deadline: datetime,
        fee_rate_bps: int,
        unit_base_price: int,
        market_id: str | None = None,
    ) -> MarketLedger:
        deadline = ensure_utc(deadline)
        precision = precision_for(self._currency.decimals())
        if not (0 <= fee_rate_bps < precision):
            raise InvalidMarketConfigError(f"fee_rate {fee_rate_bps} outside [0, {precision})")
        # Rewards pay units * total_currency // winning_backing, which the escrow
        # covers only when one unit is backed by exactly one currency unit
        if unit_base_price != precision:
            raise InvalidMarketConfigError(
                f"unit_base_price must equal precision {precision}, got {unit_base_price}"
            )
        if deadline <= ensure_utc(self._clock()):
            raise InvalidMarketConfigError(f"deadline {deadline.isoformat()} is in the past")
        market_id = market_id or generate_market_id()
        if market_id in self._ledgers:
            raise InvalidMarketConfigError(f"market id already registered: {market_id}")

        config = MarketConfig(
            market_id=market_id,
            question=question,
            fee_rate=fee_rate_bps,
            deadline=deadline,
            unit_base_price=unit_base_price,
            precision=precision,
            escrow_account=escrow_account_for(market_id),
            fee_sink_account=self._fee_sink_account,
            owner=self.registry_id,
        )
        ledger = MarketLedger(
            config,
            self._currency,
            registry_hook=self._hook,
            event_sink=self._event_sink,
            clock=self._clock,
        )
        self._ledgers[market_id] = ledger
        self._telemetry[market_id] = MarketTelemetry(market_id=market_id)
        logger.info(
            "Market created: market=%s deadline=%s fee_rate=%d base_price=%d",
            market_id, deadline.isoformat(), fee_rate_bps, unit_base_price,
        )
        if self._event_sink is not None:
            await self._event_sink.publish(
                LedgerEvent(
                    event_type=LedgerEventType.MARKET_CREATED,
                    market_id=market_id,
                    participant=None,
                    payload={
                        "question": question,
                        "deadline": deadline.isoformat(),
                        "fee_rate": fee_rate_bps,
                        "unit_base_price": unit_base_price,
                        "precision": precision,
                        "escrow_account": config.escrow_account,
                    },
                )
            )
        return ledger

    def get_ledger(self, market_id: str) -> MarketLedger:
        ledger = self._ledgers.get(market_id)
        if ledger is None:
            raise MarketNotFoundError(market_id)
        return ledger

    def list_markets(self, status: MarketStatus | None = None) -> list[MarketLedger]:
        ledgers = list(self._ledgers.values())
        if status is None:
            return ledgers
        return [ledger for ledger in ledgers if ledger.status() is status]

    def record_trade(
        self, market_id: str, participant: str, delta_yes: int, delta_no: int
    ) -> None:
        telemetry = self._telemetry.get(market_id)
        if telemetry is None:
            raise MarketNotFoundError(market_id)
        telemetry.apply(participant, delta_yes, delta_no)
        exposure = self._exposures.setdefault(
            participant, ParticipantExposure(participant=participant)
        )
        exposure.apply(market_id, delta_yes, delta_no)

    def telemetry(self, market_id: str) -> MarketTelemetry:
        telemetry = self._telemetry.get(market_id)
        if telemetry is None:
            raise MarketNotFoundError(market_id)
        return telemetry

    def exposure(self, participant: str) -> ParticipantExposure:
        return self._exposures.get(participant, ParticipantExposure(participant=participant))

    async def resolve_market(self, market_id: str, oracle: OracleProtocol) -> SettlementRecord:
        """Read the oracle's final outcome and resolve the ledger as its owner."""
        ledger = self.get_ledger(market_id)
        outcome = await oracle.outcome(market_id)
        if outcome is None:
            raise OutcomeNotAvailableError(market_id)
        return await ledger.resolve(self.registry_id, outcome)
