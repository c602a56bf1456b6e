"""
Tests for Ledger.

Tests cover:
- Registration and known assets
- Adjustments (credit/debit, negative balances)
- Strict rejection of unknown assets without mutation
- Reset for test isolation
"""

import pytest

from simulation.errors import ErrorKind, UnknownAssetError
from simulation.ledger import Ledger


# ============================================================================
# REGISTRATION TESTS
# ============================================================================

def test_new_ledger_knows_no_assets():
    ledger = Ledger()
    assert len(ledger.known_assets()) == 0


def test_register_assets_with_balances():
    ledger = Ledger()

    ledger.register("USD", 2000.0)
    assert ledger.known_assets() == {"USD"}
    assert ledger.has_asset("USD") is True
    assert ledger.get("USD") == pytest.approx(2000.0)
    assert ledger.has_asset("ETH") is False

    ledger.register("ETH", 10.0)
    assert len(ledger.known_assets()) == 2
    assert ledger.get("ETH") == pytest.approx(10.0)


def test_register_same_asset_twice_counts_once():
    ledger = Ledger()
    ledger.register("ETH", 1.0)
    ledger.register("ETH", 5.0)

    assert len(ledger.known_assets()) == 1
    assert ledger.get("ETH") == pytest.approx(5.0)


def test_set_overwrites_balance(ledger):
    ledger.set("ETH", 3.5)
    assert ledger.get("ETH") == pytest.approx(3.5)


# ============================================================================
# ADJUSTMENT TESTS
# ============================================================================

def test_adjust_increases_and_decreases(ledger):
    ledger.adjust("ETH", 1.0)
    assert ledger.get("ETH") == pytest.approx(11.0)

    ledger.adjust("ETH", -2.0)
    assert ledger.get("ETH") == pytest.approx(9.0)


def test_adjust_returns_new_balance(ledger):
    assert ledger.adjust("USD", -500.0) == pytest.approx(1500.0)


@pytest.mark.parametrize("delta", [0.0, 0.1, -0.3, 1234.5678, -1e-9])
def test_adjust_then_get_adds_delta(ledger, delta):
    before = ledger.get("USD")
    ledger.adjust("USD", delta)
    assert ledger.get("USD") == pytest.approx(before + delta)


def test_balance_may_go_negative(ledger):
    ledger.adjust("ETH", -25.0)
    assert ledger.get("ETH") == pytest.approx(-15.0)


def test_repeated_small_adjustments_accumulate(ledger):
    for _ in range(10):
        ledger.adjust("ETH", 0.1)
    assert ledger.get("ETH") == pytest.approx(11.0)


# ============================================================================
# UNKNOWN ASSET TESTS - CRITICAL
# ============================================================================

def test_get_unknown_asset_fails(ledger):
    with pytest.raises(UnknownAssetError) as exc_info:
        ledger.get("XYZ")

    assert exc_info.value.asset == "XYZ"
    assert exc_info.value.kind is ErrorKind.UNKNOWN_ASSET


def test_adjust_unknown_asset_fails_without_mutation(ledger):
    before = ledger.snapshot()

    with pytest.raises(UnknownAssetError):
        ledger.adjust("XYZ", 5.0)

    assert ledger.snapshot() == before
    assert ledger.has_asset("XYZ") is False


def test_asset_symbols_are_case_sensitive(ledger):
    with pytest.raises(UnknownAssetError):
        ledger.adjust("eth", 1.0)


# ============================================================================
# SNAPSHOT / RESET TESTS
# ============================================================================

def test_snapshot_is_a_copy(ledger):
    snap = ledger.snapshot()
    snap["ETH"] = 0.0
    assert ledger.get("ETH") == pytest.approx(10.0)


def test_reset_clears_all_balances(ledger):
    ledger.reset()

    assert len(ledger.known_assets()) == 0
    with pytest.raises(UnknownAssetError):
        ledger.get("ETH")
