"""
Test Raydium Math Module

Tests for constant-product swap quotes, paired deposits and withdrawals.
"""

import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from launchpad.protocols.raydium.math import (
    apply_max,
    apply_min,
    compute_amount_in,
    compute_amount_out,
    compute_pair_amount,
    compute_withdraw_amounts,
    slippage_fraction,
)
from launchpad.errors import ValidationError


def test_slippage_fraction():
    assert slippage_fraction(1) == Decimal("0.01")
    assert slippage_fraction(0) == Decimal(0)
    assert slippage_fraction("0.5") == Decimal("0.005")

    for bad in (-1, 100, 150):
        with pytest.raises(ValidationError):
            slippage_fraction(bad)


def test_apply_min_floors_and_apply_max_ceils():
    assert apply_min(100, 1) == 99
    assert apply_min(906, 1) == 896  # 896.94
    assert apply_max(1000, 1) == 1010
    assert apply_max(101, 1) == 103  # 102.01
    assert apply_min(906, 0) == 906
    assert apply_max(906, 0) == 906


def test_compute_amount_out():
    """Fee is 25/10000 of the input, rounded up, before the constant product"""
    # fee = ceil(2.5) = 3, after fee 997, out = 10000 * 997 // 10997
    amount_out, min_out = compute_amount_out(1000, 10_000, 10_000, 0)
    assert amount_out == 906, f"expected 906, got {amount_out}"
    assert min_out == 906

    _, min_out = compute_amount_out(1000, 10_000, 10_000, 1)
    assert min_out == 896


def test_compute_amount_out_never_exceeds_reserve():
    amount_out, _ = compute_amount_out(10 ** 18, 1_000, 1_000, 0)
    assert amount_out < 1_000


def test_compute_amount_in():
    # before fee ceil(9060000 / 9094) = 997, grossed up ceil(997 * 10000 / 9975) = 1000
    amount_in, max_in = compute_amount_in(906, 10_000, 10_000, 0)
    assert amount_in == 1000, f"expected 1000, got {amount_in}"
    assert max_in == 1000

    _, max_in = compute_amount_in(906, 10_000, 10_000, 1)
    assert max_in == 1010


def test_compute_amount_in_covers_the_quote():
    """Selling the computed input must yield at least the requested output"""
    reserve_in, reserve_out = 7_919_333, 123_456_789
    for wanted in (1, 17, 5_000, 1_000_000):
        amount_in, _ = compute_amount_in(wanted, reserve_in, reserve_out, 0)
        amount_out, _ = compute_amount_out(amount_in, reserve_in, reserve_out, 0)
        assert amount_out >= wanted


def test_compute_amount_in_rejects_draining_the_pool():
    with pytest.raises(ValidationError):
        compute_amount_in(10_000, 10_000, 10_000, 1)


def test_swap_rejects_empty_pool_and_non_positive_amounts():
    with pytest.raises(ValidationError):
        compute_amount_out(100, 0, 10_000, 1)
    with pytest.raises(ValidationError):
        compute_amount_out(100, 10_000, 0, 1)
    with pytest.raises(ValidationError):
        compute_amount_out(0, 10_000, 10_000, 1)
    with pytest.raises(ValidationError):
        compute_amount_in(-5, 10_000, 10_000, 1)


def test_compute_pair_amount():
    """10 base units into a 100 : 1 SOL pool pairs with 0.1 SOL"""
    pair = compute_pair_amount(10, 100, 10 ** 9, 1)
    assert pair.another_amount == 100_000_000
    assert pair.max_another_amount == 101_000_000
    assert pair.min_another_amount == 99_000_000


def test_compute_pair_amount_rounds_up():
    pair = compute_pair_amount(1, 3, 10, 0)
    assert pair.another_amount == 4  # ceil(10 / 3)


def test_compute_withdraw_amounts():
    """1 LP of a pool holding 100 base (0 decimals) and 1 SOL, LP supply 1"""
    amounts = compute_withdraw_amounts(
        Decimal(1), Decimal(100), Decimal(1), 0, 9, 1
    )
    assert amounts.base_expected == 100
    assert amounts.base_min == 99
    assert amounts.quote_expected == 1_000_000_000
    assert amounts.quote_min == 990_000_000


def test_compute_withdraw_amounts_floors_fractional_units():
    amounts = compute_withdraw_amounts(
        Decimal("0.5"), Decimal("3"), Decimal("0.000000003"), 0, 9, 0
    )
    assert amounts.base_expected == 1  # 1.5
    assert amounts.quote_expected == 1  # 1.5
