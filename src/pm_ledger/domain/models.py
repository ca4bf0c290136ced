"""Domain models for pm_ledger — pure dataclasses, no I/O."""

from dataclasses import dataclass, field
from datetime import datetime

from src.pm_common.enums import Side, TradeKind


@dataclass(frozen=True)
class MarketConfig:
    """Immutable per-market configuration, fixed when the registry creates the ledger."""

    market_id: str
    question: str
    fee_rate: int              # fee = amount * fee_rate // precision
    deadline: datetime         # trading open while now <= deadline
    unit_base_price: int       # currency smallest units per `precision` units
    precision: int             # 10 ** currency decimals
    escrow_account: str        # currency account holding this market's pool
    fee_sink_account: str
    owner: str                 # the only caller allowed to resolve


@dataclass
class ReserveState:
    total_currency: int = 0
    total_fee: int = 0         # informational; forwarded to the fee sink except held_fee
    yes_backing: int = 0
    no_backing: int = 0
    # currency sold out of the pool while side backing stayed put
    sold_backing: int = 0
    # sell fees the fee sink refused, still sitting in escrow
    held_fee: int = 0
    # buy payments whose refund failed, still sitting in escrow
    stranded: int = 0

    def backing(self, side: Side) -> int:
        return self.yes_backing if side is Side.YES else self.no_backing


@dataclass
class SettlementRecord:
    resolved: bool = False
    winning_side: Side | None = None
    resolved_at: datetime | None = None
    reward_collected: dict[str, bool] = field(default_factory=dict)
    total_paid: int = 0


@dataclass(frozen=True)
class TradeReceipt:
    """Result of one trading operation: signed unit deltas plus currency legs."""

    market_id: str
    participant: str
    kind: TradeKind
    side: Side                 # bought/sold side, or swap source side
    amount: int                # requested unit quantity
    delta_yes: int
    delta_no: int
    currency_amount: int       # owed (buy), total (sell), equivalent (swap)
    currency_fee: int
    unit_fee: int
    payout: int = 0            # sell only
    fee_held: int = 0          # sell fee kept in escrow after the fee leg failed


@dataclass(frozen=True)
class RewardReceipt:
    market_id: str
    participant: str
    winning_side: Side
    units: int
    share: int
