"""Global enums — values are also the wire format used by the API and event log."""

from enum import Enum


class Side(str, Enum):
    YES = "YES"
    NO = "NO"

    @property
    def opposite(self) -> "Side":
        return Side.NO if self is Side.YES else Side.YES


class MarketStatus(str, Enum):
    """Derived from the ledger clock and settlement record, never stored."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"      # deadline passed, awaiting resolution
    RESOLVED = "RESOLVED"


class TradeKind(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    SWAP = "SWAP"


class LedgerEventType(str, Enum):
    MARKET_CREATED = "MARKET_CREATED"
    BUY = "BUY"
    SELL = "SELL"
    SWAP = "SWAP"
    MARKET_RESOLVED = "MARKET_RESOLVED"
    REWARD_COLLECTED = "REWARD_COLLECTED"
