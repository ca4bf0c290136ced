"""Capability interfaces the ledger consumes.

The ledger never holds a reference to its registry object; it receives
only this narrow hook, so the registry's arena owns ledgers one-way.
"""

from typing import Protocol


class RegistryHookProtocol(Protocol):
    async def record_trade(
        self, market_id: str, participant: str, delta_yes: int, delta_no: int
    ) -> None: ...


class NullRegistryHook:
    """Hook for ledgers running outside a registry (tests, scripts)."""

    async def record_trade(
        self, market_id: str, participant: str, delta_yes: int, delta_no: int
    ) -> None:
        return None
