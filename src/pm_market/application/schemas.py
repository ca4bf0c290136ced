"""Pydantic schemas for pm_market API requests and responses."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.pm_common.amounts import to_display
from src.pm_common.enums import Side
from src.pm_ledger.domain.models import RewardReceipt, TradeReceipt
from src.pm_ledger.engine.ledger import MarketLedger
from src.pm_market.domain.models import MarketTelemetry, ParticipantExposure

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateMarketRequest(BaseModel):
    question: str = Field(..., min_length=1, max_length=500)
    deadline: datetime
    fee_rate_bps: int | None = Field(None, ge=0, description="Defaults to settings")
    unit_base_price: int | None = Field(None, gt=0, description="Defaults to settings")
    market_id: str | None = Field(None, max_length=64)


class TradeRequest(BaseModel):
    side: Side
    # Positivity is a ledger rule (InvalidAmountError), not a schema rule
    amount: int


class SwapRequest(BaseModel):
    from_side: Side
    amount: int


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


def _decimals(precision: int) -> int:
    return len(str(precision)) - 1


class ReserveOut(BaseModel):
    total_currency: int
    total_currency_display: str
    total_fee: int
    yes_backing: int
    no_backing: int
    sold_backing: int
    held_fee: int
    stranded: int
    conserved: bool


class SettlementOut(BaseModel):
    resolved: bool
    winning_side: Side | None
    resolved_at: str | None
    rewards_collected: int
    total_paid: int


class MarketListItem(BaseModel):
    market_id: str
    question: str
    status: str
    deadline: str
    total_currency: int

    @classmethod
    def from_ledger(cls, ledger: MarketLedger) -> "MarketListItem":
        return cls(
            market_id=ledger.market_id,
            question=ledger.config.question,
            status=ledger.status().value,
            deadline=ledger.config.deadline.isoformat(),
            total_currency=ledger.reserve.state.total_currency,
        )


class MarketDetail(BaseModel):
    market_id: str
    question: str
    status: str
    deadline: str
    fee_rate_bps: int
    unit_base_price: int
    precision: int
    escrow_account: str
    fee_sink_account: str
    reserve: ReserveOut
    settlement: SettlementOut
    yes_holders: int
    no_holders: int

    @classmethod
    def from_ledger(cls, ledger: MarketLedger) -> "MarketDetail":
        cfg = ledger.config
        s = ledger.reserve.state
        st = ledger.settlement
        return cls(
            market_id=cfg.market_id,
            question=cfg.question,
            status=ledger.status().value,
            deadline=cfg.deadline.isoformat(),
            fee_rate_bps=cfg.fee_rate,
            unit_base_price=cfg.unit_base_price,
            precision=cfg.precision,
            escrow_account=cfg.escrow_account,
            fee_sink_account=cfg.fee_sink_account,
            reserve=ReserveOut(
                total_currency=s.total_currency,
                total_currency_display=to_display(s.total_currency, _decimals(cfg.precision)),
                total_fee=s.total_fee,
                yes_backing=s.yes_backing,
                no_backing=s.no_backing,
                sold_backing=s.sold_backing,
                held_fee=s.held_fee,
                stranded=s.stranded,
                conserved=ledger.reserve.is_conserved(),
            ),
            settlement=SettlementOut(
                resolved=st.resolved,
                winning_side=st.winning_side,
                resolved_at=st.resolved_at.isoformat() if st.resolved_at else None,
                rewards_collected=sum(1 for v in st.reward_collected.values() if v),
                total_paid=st.total_paid,
            ),
            yes_holders=len(ledger.holders.holders(Side.YES)),
            no_holders=len(ledger.holders.holders(Side.NO)),
        )


class MarketListResponse(BaseModel):
    items: list[MarketListItem]


class TradeReceiptOut(BaseModel):
    market_id: str
    kind: str
    side: Side
    amount: int
    delta_yes: int
    delta_no: int
    currency_amount: int
    currency_fee: int
    unit_fee: int
    payout: int

    @classmethod
    def from_receipt(cls, r: TradeReceipt) -> "TradeReceiptOut":
        return cls(
            market_id=r.market_id,
            kind=r.kind.value,
            side=r.side,
            amount=r.amount,
            delta_yes=r.delta_yes,
            delta_no=r.delta_no,
            currency_amount=r.currency_amount,
            currency_fee=r.currency_fee,
            unit_fee=r.unit_fee,
            payout=r.payout,
        )


class RewardOut(BaseModel):
    market_id: str
    winning_side: Side
    units: int
    share: int

    @classmethod
    def from_receipt(cls, r: RewardReceipt) -> "RewardOut":
        return cls(market_id=r.market_id, winning_side=r.winning_side, units=r.units, share=r.share)


class HoldersOut(BaseModel):
    market_id: str
    side: Side
    holders: list[str]
    # raw append-only index, null marks a slot vacated by a zeroed balance
    index: list[str | None]


class PositionOut(BaseModel):
    market_id: str
    participant: str
    yes_units: int
    no_units: int
    reward_collected: bool


class TelemetryOut(BaseModel):
    market_id: str
    trade_count: int
    net_yes_units: int
    net_no_units: int
    gross_yes_units: int
    gross_no_units: int
    unique_participants: int

    @classmethod
    def from_domain(cls, t: MarketTelemetry) -> "TelemetryOut":
        return cls(
            market_id=t.market_id,
            trade_count=t.trade_count,
            net_yes_units=t.net_yes_units,
            net_no_units=t.net_no_units,
            gross_yes_units=t.gross_yes_units,
            gross_no_units=t.gross_no_units,
            unique_participants=len(t.participants),
        )


class ExposureOut(BaseModel):
    participant: str
    total_yes_units: int
    total_no_units: int
    markets: dict[str, tuple[int, int]]

    @classmethod
    def from_domain(cls, e: ParticipantExposure) -> "ExposureOut":
        return cls(
            participant=e.participant,
            total_yes_units=e.total_yes,
            total_no_units=e.total_no,
            markets=dict(e.positions),
        )
