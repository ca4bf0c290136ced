"""Oracle-facing capability: where the registry reads a market's outcome.

Vote derivation is somebody else's job; the registry only asks for the
final side and refuses to resolve while there is none.
"""

from typing import Protocol

from src.pm_common.enums import Side


class OracleProtocol(Protocol):
    async def outcome(self, market_id: str) -> Side | None: ...


class ManualOracle:
    """Outcomes posted by the registry admin."""

    def __init__(self) -> None:
        self._votes: dict[str, Side] = {}

    def post_vote(self, market_id: str, side: Side) -> None:
        self._votes[market_id] = side

    async def outcome(self, market_id: str) -> Side | None:
        return self._votes.get(market_id)
