"""Domain models for pm_market — registry-side telemetry, no ledger state."""

from dataclasses import dataclass, field


@dataclass
class MarketTelemetry:
    """Cross-trade aggregation of the deltas each ledger reports."""

    market_id: str
    trade_count: int = 0
    net_yes_units: int = 0
    net_no_units: int = 0
    gross_yes_units: int = 0
    gross_no_units: int = 0
    participants: set[str] = field(default_factory=set)

    def apply(self, participant: str, delta_yes: int, delta_no: int) -> None:
        self.trade_count += 1
        self.net_yes_units += delta_yes
        self.net_no_units += delta_no
        self.gross_yes_units += abs(delta_yes)
        self.gross_no_units += abs(delta_no)
        self.participants.add(participant)


@dataclass
class ParticipantExposure:
    """Net units one participant has traded into, per market."""

    participant: str
    positions: dict[str, tuple[int, int]] = field(default_factory=dict)

    def apply(self, market_id: str, delta_yes: int, delta_no: int) -> None:
        yes, no = self.positions.get(market_id, (0, 0))
        self.positions[market_id] = (yes + delta_yes, no + delta_no)

    @property
    def total_yes(self) -> int:
        return sum(yes for yes, _ in self.positions.values())

    @property
    def total_no(self) -> int:
        return sum(no for _, no in self.positions.values())
