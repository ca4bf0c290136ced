"""Ledger events — observable record of every committed state change.

Events carry enough to replay the state delta (participant, sides, signed
unit deltas, currency legs). They are not behaviour-bearing: the ledger
never reads them back.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Protocol

from src.pm_common.datetime_utils import utc_now
from src.pm_common.enums import LedgerEventType, Side
from src.pm_common.id_generator import generate_id
from src.pm_ledger.domain.models import RewardReceipt, TradeReceipt


@dataclass(frozen=True)
class LedgerEvent:
    event_type: LedgerEventType
    market_id: str
    participant: str | None
    payload: dict[str, Any]
    event_id: str = field(default_factory=lambda: generate_id("EVT-"))
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type.value,
            "market_id": self.market_id,
            "participant": self.participant,
            "payload": self.payload,
            "created_at": self.created_at.isoformat(),
        }


class EventSinkProtocol(Protocol):
    async def publish(self, event: LedgerEvent) -> None: ...


def trade_event(receipt: TradeReceipt) -> LedgerEvent:
    payload = asdict(receipt)
    payload["kind"] = receipt.kind.value
    payload["side"] = receipt.side.value
    return LedgerEvent(
        event_type=LedgerEventType(receipt.kind.value),
        market_id=receipt.market_id,
        participant=receipt.participant,
        payload=payload,
    )


def reward_event(receipt: RewardReceipt) -> LedgerEvent:
    return LedgerEvent(
        event_type=LedgerEventType.REWARD_COLLECTED,
        market_id=receipt.market_id,
        participant=receipt.participant,
        payload={
            "winning_side": receipt.winning_side.value,
            "units": receipt.units,
            "share": receipt.share,
            "delta_yes": -receipt.units if receipt.winning_side is Side.YES else 0,
            "delta_no": -receipt.units if receipt.winning_side is Side.NO else 0,
        },
    )
