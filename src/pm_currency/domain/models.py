"""Domain models for pm_currency."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TransferRecord:
    sender: str
    to: str
    amount: int
    spender: str | None
    created_at: datetime
