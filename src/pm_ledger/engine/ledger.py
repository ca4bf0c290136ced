"""MarketLedger — per-market reserve, trading, settlement and reward payout.

One instance per market, created and owned by the MarketRegistry. Every
public operation acquires the instance lock for its whole duration, so calls
are serviced one at a time in arrival order. Currency legs run before any
ledger state is touched; a failed leg aborts the operation with the ledger
unchanged.
"""
import asyncio
import logging

from src.pm_common.amounts import is_positive_int
from src.pm_common.datetime_utils import Clock, ensure_utc, utc_now
from src.pm_common.enums import LedgerEventType, MarketStatus, Side, TradeKind
from src.pm_common.errors import (
    AlreadyCollectedError,
    AlreadyResolvedError,
    InsufficientAllowanceError,
    InsufficientBalanceError,
    InvalidAmountError,
    MarketClosedError,
    MarketStillOpenError,
    NotAWinnerError,
    RefundFailedError,
    RewardsNotAvailableError,
    TransferFailedError,
    UnauthorizedError,
)
from src.pm_currency.domain.protocol import CurrencyProtocol
from src.pm_ledger.domain.events import (
    EventSinkProtocol,
    LedgerEvent,
    reward_event,
    trade_event,
)
from src.pm_ledger.domain.fee import calc_fee, currency_value
from src.pm_ledger.domain.holders import HolderRegistry
from src.pm_ledger.domain.invariants import verify_reserve_invariants
from src.pm_ledger.domain.models import (
    MarketConfig,
    RewardReceipt,
    SettlementRecord,
    TradeReceipt,
)
from src.pm_ledger.domain.ports import NullRegistryHook, RegistryHookProtocol
from src.pm_ledger.domain.reserve import ReserveLedger

logger = logging.getLogger(__name__)


class MarketLedger:
    def __init__(
        self,
        config: MarketConfig,
        currency: CurrencyProtocol,
        registry_hook: RegistryHookProtocol | None = None,
        event_sink: EventSinkProtocol | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self.config = config
        self.reserve = ReserveLedger()
        self.holders = HolderRegistry()
        self.settlement = SettlementRecord()
        self._currency = currency
        self._hook: RegistryHookProtocol = registry_hook or NullRegistryHook()
        self._events = event_sink
        self._clock = clock
        self._lock = asyncio.Lock()

    @property
    def market_id(self) -> str:
        return self.config.market_id

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def is_open(self) -> bool:
        return ensure_utc(self._clock()) <= self.config.deadline

    def status(self) -> MarketStatus:
        if self.settlement.resolved:
            return MarketStatus.RESOLVED
        return MarketStatus.OPEN if self.is_open() else MarketStatus.CLOSED

    def fee(self, amount: int) -> int:
        return calc_fee(amount, self.config.fee_rate, self.config.precision)

    def quote(self, amount: int) -> int:
        """Currency value of `amount` units at the base price."""
        return currency_value(amount, self.config.unit_base_price, self.config.precision)

    def balance_of(self, participant: str, side: Side) -> int:
        return self.holders.balance_of(side, participant)

    def has_collected(self, participant: str) -> bool:
        return self.settlement.reward_collected.get(participant, False)

    # ------------------------------------------------------------------
    # Trading
    # ------------------------------------------------------------------

    async def buy(self, participant: str, side: Side, amount: int) -> TradeReceipt:
        """Pay `amount x base price` in, receive `amount - fee(amount)` units of `side`.

        The fee is levied twice, independently: once on the currency owed
        (forwarded to the fee sink) and once on the units credited.
        """
        async with self._lock:
            self._require_open()
            _require_amount(amount)
            owed = self.quote(amount)
            if owed == 0:
                raise InvalidAmountError(amount)
            currency_fee = self.fee(owed)
            unit_fee = self.fee(amount)
            escrow = self.config.escrow_account

            allowed = await self._currency.allowance(participant, escrow)
            if allowed < owed:
                raise InsufficientAllowanceError(owed, allowed)
            if not await self._currency.transfer_from(escrow, participant, escrow, owed):
                raise TransferFailedError(f"pull {owed} from {participant}")
            if currency_fee > 0 and not await self._currency.transfer(
                escrow, self.config.fee_sink_account, currency_fee
            ):
                await self._refund(participant, owed)
                raise TransferFailedError(f"forward fee {currency_fee} to fee sink")

            self.reserve.deposit(side, owed - currency_fee, currency_fee)
            credited = amount - unit_fee
            self.holders.credit(side, participant, credited)

            receipt = TradeReceipt(
                market_id=self.market_id,
                participant=participant,
                kind=TradeKind.BUY,
                side=side,
                amount=amount,
                delta_yes=credited if side is Side.YES else 0,
                delta_no=credited if side is Side.NO else 0,
                currency_amount=owed,
                currency_fee=currency_fee,
                unit_fee=unit_fee,
            )
            await self._after_trade(receipt)
            return receipt

    async def sell(self, participant: str, side: Side, amount: int) -> TradeReceipt:
        """Return `amount` units for `amount x base price` less the fee.

        total_currency drops by the full value; the side's backing is not
        reduced (see reserve.ReserveLedger.withdraw). Once the payout leg has
        gone through the sell always commits; a refused fee stays in escrow
        as reserve.held_fee.
        """
        async with self._lock:
            self._require_open()
            _require_amount(amount)
            held = self.holders.balance_of(side, participant)
            if held < amount:
                raise InsufficientBalanceError(side.value, amount, held)
            total = self.quote(amount)
            currency_fee = self.fee(total)
            payout = total - currency_fee
            escrow = self.config.escrow_account

            if total > self.reserve.state.total_currency:
                raise TransferFailedError(
                    f"pool {self.reserve.state.total_currency} cannot cover {total}"
                )
            escrow_balance = await self._currency.balance_of(escrow)
            if escrow_balance < total:
                raise TransferFailedError(f"escrow holds {escrow_balance}, needs {total}")
            if payout > 0 and not await self._currency.transfer(escrow, participant, payout):
                raise TransferFailedError(f"pay {payout} to {participant}")
            # The participant has been paid: from here on the sell commits
            fee_held = 0
            if currency_fee > 0 and not await self._currency.transfer(
                escrow, self.config.fee_sink_account, currency_fee
            ):
                fee_held = currency_fee
                logger.error(
                    "Sell fee leg failed after payout, fee held in escrow: "
                    "market=%s participant=%s fee=%d",
                    self.market_id, participant, currency_fee,
                )

            self.reserve.withdraw(total, currency_fee, fee_held)
            self.holders.debit(side, participant, amount)

            receipt = TradeReceipt(
                market_id=self.market_id,
                participant=participant,
                kind=TradeKind.SELL,
                side=side,
                amount=amount,
                delta_yes=-amount if side is Side.YES else 0,
                delta_no=-amount if side is Side.NO else 0,
                currency_amount=total,
                currency_fee=currency_fee,
                unit_fee=0,
                payout=payout,
                fee_held=fee_held,
            )
            await self._after_trade(receipt)
            return receipt

    async def swap(self, participant: str, from_side: Side, amount: int) -> TradeReceipt:
        """Convert `amount` units of from_side into the opposite side.

        Backing moves with the units, less a currency fee forwarded to the
        fee sink; the credited units are reduced by an independent unit fee.
        """
        async with self._lock:
            self._require_open()
            _require_amount(amount)
            held = self.holders.balance_of(from_side, participant)
            if held < amount:
                raise InsufficientBalanceError(from_side.value, amount, held)
            to_side = from_side.opposite
            # capped at the side backing: per-leg fee truncation on buy can leave a
            # full position quoted one unit above it
            value = min(self.quote(amount), self.reserve.state.backing(from_side))
            currency_fee = self.fee(value)
            unit_fee = self.fee(amount)
            if currency_fee > 0 and not await self._currency.transfer(
                self.config.escrow_account, self.config.fee_sink_account, currency_fee
            ):
                raise TransferFailedError(f"forward fee {currency_fee} to fee sink")

            self.reserve.move_backing(from_side, value, currency_fee)
            credited = amount - unit_fee
            self.holders.debit(from_side, participant, amount)
            self.holders.credit(to_side, participant, credited)

            receipt = TradeReceipt(
                market_id=self.market_id,
                participant=participant,
                kind=TradeKind.SWAP,
                side=from_side,
                amount=amount,
                delta_yes=-amount if from_side is Side.YES else credited,
                delta_no=credited if from_side is Side.YES else -amount,
                currency_amount=value,
                currency_fee=currency_fee,
                unit_fee=unit_fee,
            )
            await self._after_trade(receipt)
            return receipt

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    async def resolve(self, caller: str, winning_side: Side) -> SettlementRecord:
        """Open/Closed -> Resolved, exactly once, only for the owning registry."""
        async with self._lock:
            if caller != self.config.owner:
                raise UnauthorizedError(caller)
            if self.settlement.resolved:
                raise AlreadyResolvedError(self.market_id)
            if self.is_open():
                raise MarketStillOpenError(self.market_id)

            self.settlement.resolved = True
            self.settlement.winning_side = winning_side
            self.settlement.resolved_at = ensure_utc(self._clock())
            s = self.reserve.state
            logger.info(
                "Market resolved: market=%s winner=%s total=%d winning_backing=%d",
                self.market_id, winning_side.value, s.total_currency, s.backing(winning_side),
            )
            await self._publish(
                LedgerEvent(
                    event_type=LedgerEventType.MARKET_RESOLVED,
                    market_id=self.market_id,
                    participant=None,
                    payload={
                        "winning_side": winning_side.value,
                        "total_currency": s.total_currency,
                        "yes_backing": s.yes_backing,
                        "no_backing": s.no_backing,
                        "yes_units": self.holders.total_units(Side.YES),
                        "no_units": self.holders.total_units(Side.NO),
                    },
                )
            )
            return self.settlement

    async def collect_reward(self, participant: str) -> RewardReceipt:
        """Pay units x total_currency // winning_backing, once per participant.

        Truncation dust is left in escrow; no claimant receives a remainder.
        """
        async with self._lock:
            if not self.settlement.resolved or self.settlement.winning_side is None:
                raise RewardsNotAvailableError(self.market_id)
            if self.has_collected(participant):
                raise AlreadyCollectedError(participant)
            winner = self.settlement.winning_side
            units = self.holders.balance_of(winner, participant)
            if units <= 0:
                raise NotAWinnerError(participant)

            backing = self.reserve.state.backing(winner)
            share = units * self.reserve.state.total_currency // backing if backing > 0 else 0
            if share > 0 and not await self._currency.transfer(
                self.config.escrow_account, participant, share
            ):
                raise TransferFailedError(f"pay reward {share} to {participant}")

            self.holders.zero(winner, participant)
            self.settlement.reward_collected[participant] = True
            self.settlement.total_paid += share

            receipt = RewardReceipt(
                market_id=self.market_id,
                participant=participant,
                winning_side=winner,
                units=units,
                share=share,
            )
            logger.info(
                "Reward collected: market=%s participant=%s units=%d share=%d",
                self.market_id, participant, units, share,
            )
            await self._publish(reward_event(receipt))
            return receipt

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_open(self) -> None:
        if self.settlement.resolved or not self.is_open():
            raise MarketClosedError(self.market_id)

    async def _refund(self, participant: str, amount: int) -> None:
        """Return a pulled payment; if that fails too, book it as stranded and raise."""
        if await self._currency.transfer(self.config.escrow_account, participant, amount):
            return
        self.reserve.record_stranded(amount)
        logger.error(
            "Refund failed, amount stranded in escrow: market=%s participant=%s amount=%d",
            self.market_id, participant, amount,
        )
        raise RefundFailedError(participant, amount)

    async def _after_trade(self, receipt: TradeReceipt) -> None:
        logger.info(
            "%s market=%s participant=%s side=%s amount=%d dYes=%d dNo=%d fee=%d/%d",
            receipt.kind.value, receipt.market_id, receipt.participant, receipt.side.value,
            receipt.amount, receipt.delta_yes, receipt.delta_no,
            receipt.currency_fee, receipt.unit_fee,
        )
        # Telemetry only: the trade has committed, a failing registry must not undo it
        try:
            await self._hook.record_trade(
                receipt.market_id, receipt.participant, receipt.delta_yes, receipt.delta_no
            )
        except Exception:
            logger.exception("Registry trade report failed: market=%s", self.market_id)
        await self._publish(trade_event(receipt))
        # Checked last: the trade has committed and must be reported either way
        verify_reserve_invariants(self.market_id, self.reserve)

    async def _publish(self, event: LedgerEvent) -> None:
        if self._events is None:
            return
        try:
            await self._events.publish(event)
        except Exception:
            logger.exception(
                "Event publish failed: market=%s type=%s", event.market_id, event.event_type.value
            )


def _require_amount(amount: object) -> None:
    if not is_positive_int(amount):
        raise InvalidAmountError(amount)
