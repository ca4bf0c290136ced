"""Pydantic schemas for pm_currency API."""

from pydantic import BaseModel, Field, model_validator


class ApproveRequest(BaseModel):
    """Approve either a raw spender account or a market's escrow account."""

    amount: int = Field(..., ge=0)
    spender: str | None = None
    market_id: str | None = None

    @model_validator(mode="after")
    def _one_target(self) -> "ApproveRequest":
        if (self.spender is None) == (self.market_id is None):
            raise ValueError("exactly one of spender or market_id is required")
        return self


class FaucetRequest(BaseModel):
    amount: int = Field(..., gt=0)


class BalanceResponse(BaseModel):
    owner: str
    balance: int
    balance_display: str
    decimals: int


class AllowanceResponse(BaseModel):
    owner: str
    spender: str
    allowance: int
