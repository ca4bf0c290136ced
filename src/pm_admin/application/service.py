# src/pm_admin/application/service.py
"""Admin application service."""
import logging
from typing import Any

from src.pm_common.enums import Side
from src.pm_ledger.domain.invariants import audit_reserve
from src.pm_market.application.registry import MarketRegistry
from src.pm_market.application.service import get_oracle, get_registry
from src.pm_market.domain.oracle import ManualOracle

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(
        self, registry: MarketRegistry | None = None, oracle: ManualOracle | None = None
    ) -> None:
        self._registry = registry
        self._oracle = oracle

    @property
    def registry(self) -> MarketRegistry:
        return self._registry or get_registry()

    @property
    def oracle(self) -> ManualOracle:
        return self._oracle or get_oracle()

    async def resolve_market(self, market_id: str, outcome: Side) -> dict[str, Any]:
        """Post the oracle vote, then let the registry resolve the ledger from it."""
        self.registry.get_ledger(market_id)
        self.oracle.post_vote(market_id, outcome)
        record = await self.registry.resolve_market(market_id, self.oracle)
        ledger = self.registry.get_ledger(market_id)
        return {
            "market_id": market_id,
            "outcome": outcome.value,
            "resolved_at": record.resolved_at.isoformat() if record.resolved_at else None,
            "total_currency": ledger.reserve.state.total_currency,
            "winning_backing": ledger.reserve.state.backing(outcome),
            "winning_holders": len(ledger.holders.holders(outcome)),
        }

    def verify_all_invariants(self) -> dict[str, object]:
        """Audit every market's reserve; sell-induced drift is reported, not a violation."""
        reports = [
            audit_reserve(ledger.market_id, ledger.reserve)
            for ledger in self.registry.list_markets()
        ]
        violations: list[str] = [v for r in reports for v in r["violations"]]
        if violations:
            logger.error("Invariant audit found %d violation(s)", len(violations))
        return {"ok": not violations, "violations": violations, "markets": reports}
