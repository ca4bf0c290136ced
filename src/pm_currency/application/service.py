"""CurrencyApplicationService — thin composition layer over the currency account."""

from config.settings import settings
from src.pm_common.amounts import to_display
from src.pm_common.errors import InternalError
from src.pm_currency.application.schemas import AllowanceResponse, BalanceResponse
from src.pm_currency.domain.token import InMemoryCurrency

_currency: InMemoryCurrency | None = None


def get_currency() -> InMemoryCurrency:
    global _currency  # noqa: PLW0603
    if _currency is None:
        _currency = InMemoryCurrency(decimals=settings.CURRENCY_DECIMALS)
    return _currency


class CurrencyApplicationService:
    def __init__(self, currency: InMemoryCurrency | None = None) -> None:
        self._currency = currency

    @property
    def currency(self) -> InMemoryCurrency:
        return self._currency or get_currency()

    async def get_balance(self, owner: str) -> BalanceResponse:
        balance = await self.currency.balance_of(owner)
        decimals = self.currency.decimals()
        return BalanceResponse(
            owner=owner,
            balance=balance,
            balance_display=to_display(balance, decimals),
            decimals=decimals,
        )

    async def approve(self, owner: str, spender: str, amount: int) -> AllowanceResponse:
        if not await self.currency.approve(owner, spender, amount):
            raise InternalError(f"approve rejected for {owner} -> {spender}")
        allowance = await self.currency.allowance(owner, spender)
        return AllowanceResponse(owner=owner, spender=spender, allowance=allowance)

    async def faucet(self, owner: str, amount: int) -> BalanceResponse:
        await self.currency.mint(owner, amount)
        return await self.get_balance(owner)
