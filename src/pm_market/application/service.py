"""MarketApplicationService — composition layer between REST and the registry.

The registry, oracle and currency are process-wide singletons, created
lazily the same way the event sink is.
"""

from config.settings import settings
from src.pm_common.enums import MarketStatus, Side
from src.pm_currency.application.service import get_currency
from src.pm_ledger.application.service import get_event_sink
from src.pm_market.application.registry import MarketRegistry
from src.pm_market.application.schemas import (
    CreateMarketRequest,
    ExposureOut,
    HoldersOut,
    MarketDetail,
    MarketListItem,
    MarketListResponse,
    PositionOut,
    RewardOut,
    TelemetryOut,
    TradeReceiptOut,
)
from src.pm_market.domain.oracle import ManualOracle

_registry: MarketRegistry | None = None
_oracle: ManualOracle | None = None


def get_registry() -> MarketRegistry:
    global _registry  # noqa: PLW0603
    if _registry is None:
        _registry = MarketRegistry(
            currency=get_currency(),
            registry_id=settings.REGISTRY_ID,
            fee_sink_account=settings.FEE_SINK_ACCOUNT,
            event_sink=get_event_sink(),
        )
    return _registry


def get_oracle() -> ManualOracle:
    global _oracle  # noqa: PLW0603
    if _oracle is None:
        _oracle = ManualOracle()
    return _oracle


class MarketApplicationService:
    def __init__(self, registry: MarketRegistry | None = None) -> None:
        self._registry = registry

    @property
    def registry(self) -> MarketRegistry:
        return self._registry or get_registry()

    async def create_market(self, req: CreateMarketRequest) -> MarketDetail:
        ledger = await self.registry.create_market(
            question=req.question,
            deadline=req.deadline,
            fee_rate_bps=(
                req.fee_rate_bps if req.fee_rate_bps is not None else settings.DEFAULT_FEE_RATE_BPS
            ),
            unit_base_price=req.unit_base_price or settings.DEFAULT_UNIT_BASE_PRICE,
            market_id=req.market_id,
        )
        return MarketDetail.from_ledger(ledger)

    def list_markets(self, status: MarketStatus | None) -> MarketListResponse:
        items = [MarketListItem.from_ledger(m) for m in self.registry.list_markets(status)]
        return MarketListResponse(items=items)

    def get_market(self, market_id: str) -> MarketDetail:
        return MarketDetail.from_ledger(self.registry.get_ledger(market_id))

    def get_holders(self, market_id: str, side: Side) -> HoldersOut:
        ledger = self.registry.get_ledger(market_id)
        return HoldersOut(
            market_id=market_id,
            side=side,
            holders=ledger.holders.holders(side),
            index=ledger.holders.index(side),
        )

    def get_position(self, market_id: str, participant: str) -> PositionOut:
        ledger = self.registry.get_ledger(market_id)
        return PositionOut(
            market_id=market_id,
            participant=participant,
            yes_units=ledger.balance_of(participant, Side.YES),
            no_units=ledger.balance_of(participant, Side.NO),
            reward_collected=ledger.has_collected(participant),
        )

    async def buy(self, market_id: str, participant: str, side: Side, amount: int) -> TradeReceiptOut:
        receipt = await self.registry.get_ledger(market_id).buy(participant, side, amount)
        return TradeReceiptOut.from_receipt(receipt)

    async def sell(self, market_id: str, participant: str, side: Side, amount: int) -> TradeReceiptOut:
        receipt = await self.registry.get_ledger(market_id).sell(participant, side, amount)
        return TradeReceiptOut.from_receipt(receipt)

    async def swap(
        self, market_id: str, participant: str, from_side: Side, amount: int
    ) -> TradeReceiptOut:
        receipt = await self.registry.get_ledger(market_id).swap(participant, from_side, amount)
        return TradeReceiptOut.from_receipt(receipt)

    async def collect_reward(self, market_id: str, participant: str) -> RewardOut:
        receipt = await self.registry.get_ledger(market_id).collect_reward(participant)
        return RewardOut.from_receipt(receipt)

    def get_telemetry(self, market_id: str) -> TelemetryOut:
        return TelemetryOut.from_domain(self.registry.telemetry(market_id))

    def get_exposure(self, participant: str) -> ExposureOut:
        return ExposureOut.from_domain(self.registry.exposure(participant))
