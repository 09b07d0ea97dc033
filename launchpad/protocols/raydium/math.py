"""
Raydium AMM v4 constant-product math

All reserves and amounts are integer base units unless noted. Slippage is a
percentage (1 = 1%).
"""

from decimal import Decimal, ROUND_CEILING, ROUND_FLOOR
from dataclasses import dataclass
from typing import Tuple

from .constants import TRADE_FEE_NUMERATOR, TRADE_FEE_DENOMINATOR
from ...errors import ValidationError


def _floor(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def _ceil(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_CEILING))


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def slippage_fraction(slippage_pct) -> Decimal:
    """1 -> 0.01; rejects values outside [0, 100)"""
    s = Decimal(str(slippage_pct))
    if s < 0 or s >= 100:
        raise ValidationError.invalid("slippage", f"must be in [0, 100), got {slippage_pct}")
    return s / Decimal(100)


def apply_min(amount: int, slippage_pct) -> int:
    """Lowest acceptable amount: floor(amount * (1 - s))"""
    return _floor(Decimal(amount) * (Decimal(1) - slippage_fraction(slippage_pct)))


def apply_max(amount: int, slippage_pct) -> int:
    """Highest acceptable amount: ceil(amount * (1 + s))"""
    return _ceil(Decimal(amount) * (Decimal(1) + slippage_fraction(slippage_pct)))


def _check_reserves(reserve_in: int, reserve_out: int):
    if reserve_in <= 0 or reserve_out <= 0:
        raise ValidationError.invalid("pool", "pool has no liquidity")


def compute_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    slippage_pct,
) -> Tuple[int, int]:
    """
    Fixed input swap

    Returns:
        (amount_out, min_amount_out)
    """
    if amount_in <= 0:
        raise ValidationError.invalid("amount", "must be positive")
    _check_reserves(reserve_in, reserve_out)

    fee = _ceil_div(amount_in * TRADE_FEE_NUMERATOR, TRADE_FEE_DENOMINATOR)
    amount_in_after_fee = amount_in - fee
    amount_out = reserve_out * amount_in_after_fee // (reserve_in + amount_in_after_fee)
    return amount_out, apply_min(amount_out, slippage_pct)


def compute_amount_in(
    amount_out: int,
    reserve_in: int,
    reserve_out: int,
    slippage_pct,
) -> Tuple[int, int]:
    """
    Fixed output swap

    Returns:
        (amount_in, max_amount_in)
    """
    if amount_out <= 0:
        raise ValidationError.invalid("amount", "must be positive")
    _check_reserves(reserve_in, reserve_out)
    if amount_out >= reserve_out:
        raise ValidationError.invalid("amount", "exceeds pool reserve")

    amount_in_before_fee = _ceil_div(reserve_in * amount_out, reserve_out - amount_out)
    amount_in = _ceil_div(
        amount_in_before_fee * TRADE_FEE_DENOMINATOR,
        TRADE_FEE_DENOMINATOR - TRADE_FEE_NUMERATOR,
    )
    return amount_in, apply_max(amount_in, slippage_pct)


@dataclass(frozen=True)
class PairAmount:
    """Other side of a deposit, in base units"""
    another_amount: int
    max_another_amount: int
    min_another_amount: int


def compute_pair_amount(
    amount: int,
    reserve_fixed: int,
    reserve_other: int,
    slippage_pct,
) -> PairAmount:
    """
    Deposit amount on the other side that keeps the reserve ratio

    Args:
        amount: Fixed side amount
        reserve_fixed: Reserve of the fixed side
        reserve_other: Reserve of the other side
        slippage_pct: Tolerance band around the paired amount
    """
    if amount <= 0:
        raise ValidationError.invalid("amount", "must be positive")
    _check_reserves(reserve_fixed, reserve_other)

    another = _ceil_div(amount * reserve_other, reserve_fixed)
    return PairAmount(
        another_amount=another,
        max_another_amount=apply_max(another, slippage_pct),
        min_another_amount=apply_min(another, slippage_pct),
    )


@dataclass(frozen=True)
class WithdrawAmounts:
    """Expected and minimum withdrawal per side, in base units"""
    base_expected: int
    quote_expected: int
    base_min: int
    quote_min: int


def compute_withdraw_amounts(
    lp_amount_ui: Decimal,
    base_per_lp: Decimal,
    quote_per_lp: Decimal,
    base_decimals: int,
    quote_decimals: int,
    slippage_pct,
) -> WithdrawAmounts:
    """
    Proportional withdrawal for lp_amount_ui LP tokens

    base_per_lp / quote_per_lp are UI reserve over UI LP supply.
    """
    base_expected = _floor(lp_amount_ui * base_per_lp * (Decimal(10) ** base_decimals))
    quote_expected = _floor(lp_amount_ui * quote_per_lp * (Decimal(10) ** quote_decimals))
    return WithdrawAmounts(
        base_expected=base_expected,
        quote_expected=quote_expected,
        base_min=apply_min(base_expected, slippage_pct),
        quote_min=apply_min(quote_expected, slippage_pct),
    )
