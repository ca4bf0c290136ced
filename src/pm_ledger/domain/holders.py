"""Holder registry — per-side unit balances plus an append-only holder index.

The index mirrors what external indexers enumerate: a participant is
appended the first time their balance on a side becomes non-zero, and their
slot is tombstoned (set to None, never compacted or reused) when the balance
returns to zero. Re-entry appends a fresh slot.
"""

from src.pm_common.enums import Side


class HolderRegistry:
    def __init__(self) -> None:
        self._balances: dict[Side, dict[str, int]] = {Side.YES: {}, Side.NO: {}}
        self._index: dict[Side, list[str | None]] = {Side.YES: [], Side.NO: []}
        self._slot: dict[Side, dict[str, int]] = {Side.YES: {}, Side.NO: {}}

    def balance_of(self, side: Side, participant: str) -> int:
        return self._balances[side].get(participant, 0)

    def credit(self, side: Side, participant: str, units: int) -> int:
        if units < 0:
            raise ValueError(f"credit must be non-negative, got {units}")
        before = self.balance_of(side, participant)
        after = before + units
        self._set(side, participant, after)
        return after

    def debit(self, side: Side, participant: str, units: int) -> int:
        before = self.balance_of(side, participant)
        if units < 0 or units > before:
            raise ValueError(f"cannot debit {units} from balance {before}")
        after = before - units
        self._set(side, participant, after)
        return after

    def zero(self, side: Side, participant: str) -> int:
        """Clear a balance, returning what it held."""
        before = self.balance_of(side, participant)
        self._set(side, participant, 0)
        return before

    def holders(self, side: Side) -> list[str]:
        """Live holders in first-entry order."""
        return [p for p in self._index[side] if p is not None]

    def index(self, side: Side) -> list[str | None]:
        """Raw index including tombstoned slots."""
        return list(self._index[side])

    def total_units(self, side: Side) -> int:
        return sum(self._balances[side].values())

    def _set(self, side: Side, participant: str, value: int) -> None:
        balances = self._balances[side]
        if value == 0:
            balances.pop(participant, None)
            slot = self._slot[side].pop(participant, None)
            if slot is not None:
                self._index[side][slot] = None
            return
        balances[participant] = value
        if participant not in self._slot[side]:
            self._slot[side][participant] = len(self._index[side])
            self._index[side].append(participant)
