"""In-memory reference currency.

Balances and allowances live in dicts guarded by one asyncio.Lock, so every
call is atomic with respect to other callers on the same event loop.
"""

import asyncio
import logging
from collections import deque

from src.pm_common.datetime_utils import utc_now
from src.pm_currency.domain.models import TransferRecord

logger = logging.getLogger(__name__)


class InMemoryCurrency:
    def __init__(self, decimals: int = 6, journal_size: int = 10_000) -> None:
        if decimals < 0:
            raise ValueError(f"decimals must be non-negative, got {decimals}")
        self._decimals = decimals
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._journal: deque[TransferRecord] = deque(maxlen=journal_size)
        self._lock = asyncio.Lock()
        self.total_supply = 0

    def decimals(self) -> int:
        return self._decimals

    async def balance_of(self, owner: str) -> int:
        return self._balances.get(owner, 0)

    async def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    async def approve(self, owner: str, spender: str, amount: int) -> bool:
        if amount < 0:
            return False
        async with self._lock:
            self._allowances[(owner, spender)] = amount
        logger.debug("approve owner=%s spender=%s amount=%d", owner, spender, amount)
        return True

    async def mint(self, to: str, amount: int) -> int:
        """Create currency out of thin air (faucet / test seeding). Returns new balance."""
        if amount <= 0:
            raise ValueError(f"mint amount must be positive, got {amount}")
        async with self._lock:
            self._balances[to] = self._balances.get(to, 0) + amount
            self.total_supply += amount
            return self._balances[to]

    async def transfer(self, sender: str, to: str, amount: int) -> bool:
        async with self._lock:
            return self._move(sender, to, amount, spender=None)

    async def transfer_from(self, spender: str, owner: str, to: str, amount: int) -> bool:
        async with self._lock:
            allowed = self._allowances.get((owner, spender), 0)
            if amount > allowed:
                logger.info(
                    "transfer_from rejected: allowance %d < %d (owner=%s spender=%s)",
                    allowed, amount, owner, spender,
                )
                return False
            if not self._move(owner, to, amount, spender=spender):
                return False
            self._allowances[(owner, spender)] = allowed - amount
            return True

    def journal(self, account: str | None = None) -> list[TransferRecord]:
        if account is None:
            return list(self._journal)
        return [r for r in self._journal if account in (r.sender, r.to)]

    def _move(self, sender: str, to: str, amount: int, spender: str | None) -> bool:
        if amount < 0:
            return False
        available = self._balances.get(sender, 0)
        if amount > available:
            logger.info("transfer rejected: %s holds %d < %d", sender, available, amount)
            return False
        self._balances[sender] = available - amount
        self._balances[to] = self._balances.get(to, 0) + amount
        self._journal.append(TransferRecord(sender, to, amount, spender, utc_now()))
        return True
