"""Reserve invariant verification after each ledger operation."""

import logging
from typing import Any

from src.pm_ledger.domain.reserve import ReserveLedger

logger = logging.getLogger(__name__)


def verify_reserve_invariants(market_id: str, reserve: ReserveLedger) -> None:
    """Raise AssertionError if the reserve counters are inconsistent.

    INV-1: every counter is non-negative
    INV-2: yes_backing + no_backing - total_currency == sold_backing
           (reduces to strict conservation while nothing has been sold)
    """
    s = reserve.state
    counters = {
        "total_currency": s.total_currency,
        "total_fee": s.total_fee,
        "yes_backing": s.yes_backing,
        "no_backing": s.no_backing,
        "held_fee": s.held_fee,
        "stranded": s.stranded,
    }
    negative = {k: v for k, v in counters.items() if v < 0}
    assert not negative, f"INV-1 violated: market={market_id} negative counters {negative}"

    drift = reserve.drift()
    assert drift == s.sold_backing, (
        f"INV-2 violated: market={market_id} backing({s.yes_backing}+{s.no_backing}) "
        f"- total_currency({s.total_currency}) = {drift} != sold_backing={s.sold_backing}"
    )

    logger.debug(
        "Invariants OK: market=%s, total=%d, yes=%d, no=%d",
        market_id, s.total_currency, s.yes_backing, s.no_backing,
    )


def audit_reserve(market_id: str, reserve: ReserveLedger) -> dict[str, Any]:
    """Non-raising audit used by the admin endpoint."""
    violations: list[str] = []
    try:
        verify_reserve_invariants(market_id, reserve)
    except AssertionError as e:
        violations.append(str(e))
        logger.error("%s", e)
    return {
        "market_id": market_id,
        "conserved": reserve.is_conserved(),
        "sold_backing": reserve.state.sold_backing,
        "held_fee": reserve.state.held_fee,
        "stranded": reserve.state.stranded,
        "violations": violations,
    }
