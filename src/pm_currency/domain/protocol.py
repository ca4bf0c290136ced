"""Reference-currency capability consumed by market ledgers.

Mirrors a fungible-token account: transfers report success as a bool and
never raise for ordinary failures (insufficient balance or allowance); the
ledger turns a False into TransferFailedError.
"""

from typing import Protocol


class CurrencyProtocol(Protocol):
    def decimals(self) -> int: ...

    async def balance_of(self, owner: str) -> int: ...

    async def allowance(self, owner: str, spender: str) -> int: ...

    async def approve(self, owner: str, spender: str, amount: int) -> bool: ...

    async def transfer(self, sender: str, to: str, amount: int) -> bool: ...

    async def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool: ...
