"""Tests for reserve invariant verification."""
import pytest

from src.pm_common.enums import Side
from src.pm_ledger.domain.invariants import audit_reserve, verify_reserve_invariants
from src.pm_ledger.domain.models import ReserveState
from src.pm_ledger.domain.reserve import ReserveLedger


def test_fresh_reserve_passes() -> None:
    verify_reserve_invariants("m", ReserveLedger())


def test_drift_equal_to_sold_backing_passes() -> None:
    reserve = ReserveLedger()
    reserve.deposit(Side.YES, 1_000, 5)
    reserve.withdraw(400, 2)
    assert not reserve.is_conserved()
    verify_reserve_invariants("m", reserve)


def test_unexplained_drift_fails() -> None:
    reserve = ReserveLedger(ReserveState(total_currency=90, yes_backing=100))
    with pytest.raises(AssertionError, match="INV-2"):
        verify_reserve_invariants("m", reserve)


def test_negative_counter_fails() -> None:
    reserve = ReserveLedger(ReserveState(total_currency=-1, no_backing=-1))
    with pytest.raises(AssertionError, match="INV-1"):
        verify_reserve_invariants("m", reserve)


def test_audit_reports_without_raising() -> None:
    reserve = ReserveLedger(ReserveState(total_currency=90, yes_backing=100))
    report = audit_reserve("m", reserve)
    assert report["market_id"] == "m"
    assert report["conserved"] is False
    assert len(report["violations"]) == 1


def test_audit_of_sold_market_is_clean() -> None:
    reserve = ReserveLedger()
    reserve.deposit(Side.NO, 300, 0)
    reserve.withdraw(100, 0)
    report = audit_reserve("m", reserve)
    assert report["violations"] == []
    assert report["sold_backing"] == 100


def test_audit_surfaces_escrow_held_outside_pool() -> None:
    reserve = ReserveLedger()
    reserve.deposit(Side.YES, 1_000, 0)
    reserve.withdraw(500, 3, fee_held=3)
    reserve.record_stranded(40)
    report = audit_reserve("m", reserve)
    assert report["violations"] == []
    assert (report["held_fee"], report["stranded"]) == (3, 40)


def test_negative_held_fee_fails() -> None:
    with pytest.raises(AssertionError, match="INV-1"):
        verify_reserve_invariants("m", ReserveLedger(ReserveState(held_fee=-1)))
