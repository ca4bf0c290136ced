"""Reserve ledger — running currency totals for one market.

Conservation: total_currency == yes_backing + no_backing after every buy
and swap. Sell decrements total_currency without touching the sold side's
backing, so any sell leaves the two apart by the sold currency value.
Every method validates first and mutates only when all counters stay
non-negative.
"""

import logging

from src.pm_common.enums import Side
from src.pm_common.errors import ReserveInvariantError
from src.pm_ledger.domain.models import ReserveState

logger = logging.getLogger(__name__)


class ReserveLedger:
    def __init__(self, state: ReserveState | None = None) -> None:
        self.state = state or ReserveState()

    def deposit(self, side: Side, net_amount: int, fee: int) -> None:
        """Buy: net currency joins the pool and backs `side`; fee is only counted."""
        if net_amount < 0 or fee < 0:
            raise ReserveInvariantError(f"negative deposit net={net_amount} fee={fee}")
        self.state.total_currency += net_amount
        self.state.total_fee += fee
        self._add_backing(side, net_amount)

    def withdraw(self, total: int, fee: int, fee_held: int = 0) -> None:
        """Sell: `total` leaves the pool (payout + fee). Side backing is left as is.

        `fee_held` is the part of the fee that stayed in escrow because the
        fee sink refused it; it is tracked outside the pool.
        """
        if total > self.state.total_currency:
            raise ReserveInvariantError(
                f"withdraw {total} exceeds total_currency {self.state.total_currency}"
            )
        if not 0 <= fee_held <= fee:
            raise ReserveInvariantError(f"held fee {fee_held} outside [0, {fee}]")
        self.state.total_currency -= total
        self.state.total_fee += fee
        self.state.sold_backing += total
        self.state.held_fee += fee_held

    def record_stranded(self, amount: int) -> None:
        """Escrow received `amount` that belongs to nobody in the pool (failed refund)."""
        if amount < 0:
            raise ReserveInvariantError(f"negative stranded amount {amount}")
        self.state.stranded += amount

    def move_backing(self, from_side: Side, value: int, fee: int) -> None:
        """Swap: `value` leaves from_side, value - fee backs the opposite side, fee leaves the pool."""
        available = self.state.backing(from_side)
        if value > available:
            raise ReserveInvariantError(
                f"{from_side.value} backing {available} cannot cover swap value {value}"
            )
        if fee > value:
            raise ReserveInvariantError(f"swap fee {fee} exceeds value {value}")
        self._add_backing(from_side, -value)
        self._add_backing(from_side.opposite, value - fee)
        self.state.total_currency -= fee
        self.state.total_fee += fee

    def is_conserved(self) -> bool:
        s = self.state
        return s.total_currency == s.yes_backing + s.no_backing

    def drift(self) -> int:
        """Backing in excess of total_currency; non-zero only after sells."""
        s = self.state
        return s.yes_backing + s.no_backing - s.total_currency

    def _add_backing(self, side: Side, delta: int) -> None:
        if side is Side.YES:
            self.state.yes_backing += delta
        else:
            self.state.no_backing += delta
