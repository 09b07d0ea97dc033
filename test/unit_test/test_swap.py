"""
Swap Module Unit Tests
"""

import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from launchpad.errors import ErrorCode, PoolUnavailable, ValidationError
from launchpad.protocols.raydium.math import compute_amount_in, compute_amount_out
from launchpad.types import NATIVE_MINT, PLACEHOLDER_PREFIX

from conftest import built, new_address, pool_item

BASE_RESERVE = 1_000_000 * 10 ** 6
QUOTE_RESERVE = 10 * 10 ** 9


@pytest.fixture
def base_mint():
    return new_address()


@pytest.fixture
def live_pool(sdk, base_mint):
    """1,000,000 TST (6 decimals) against 10 SOL"""
    pool_id = new_address()
    sdk.get_pool_info_from_rpc.return_value = {
        "poolInfo": pool_item(pool_id, base_mint, amount_a=1_000_000, amount_b=10, base_decimals=6),
    }
    sdk.build_swap.return_value = built()
    return pool_id


class TestSwap:

    def test_fixed_input_sells_sol(self, client, sdk, live_pool, base_mint):
        result = client.swap.swap(live_pool, NATIVE_MINT, 1, slippage_pct=1)

        expected_out, min_out = compute_amount_out(10 ** 9, QUOTE_RESERVE, BASE_RESERVE, 1)
        sdk.build_swap.assert_called_once_with(
            owner=client.pubkey,
            pool_id=live_pool,
            input_mint=NATIVE_MINT,
            amount_in=10 ** 9,
            amount_out=min_out,
            fixed_side="in",
        )
        assert result.input_token.amount == Decimal(1)
        assert result.output_token.token.mint == base_mint
        assert result.output_token.amount == Decimal(expected_out) / 10 ** 6
        assert result.output_token.min_amount < result.output_token.amount
        # Fee and price impact keep the output below the spot rate
        assert result.output_token.amount < Decimal(100_000)

    def test_fixed_input_sells_base(self, client, sdk, live_pool, base_mint):
        client.swap.swap(live_pool, base_mint, 1000, slippage_pct=0)

        _, min_out = compute_amount_out(1000 * 10 ** 6, BASE_RESERVE, QUOTE_RESERVE, 0)
        kwargs = sdk.build_swap.call_args.kwargs
        assert kwargs["input_mint"] == base_mint
        assert kwargs["amount_in"] == 1_000_000_000
        assert kwargs["amount_out"] == min_out

    def test_fixed_output_bounds_input(self, client, sdk, live_pool, base_mint):
        result = client.swap.swap(live_pool, NATIVE_MINT, 500, fixed_side="out", slippage_pct=1)

        amount_in, max_in = compute_amount_in(500 * 10 ** 6, QUOTE_RESERVE, BASE_RESERVE, 1)
        kwargs = sdk.build_swap.call_args.kwargs
        assert kwargs["amount_in"] == max_in
        assert kwargs["amount_out"] == 500 * 10 ** 6
        assert kwargs["fixed_side"] == "out"

        data = result.to_dict()
        assert data["outputToken"]["amount"] == 500
        assert data["inputToken"]["maxAmount"] == pytest.approx(max_in / 10 ** 9)
        assert result.input_token.amount == Decimal(amount_in) / 10 ** 9

    def test_mint_not_in_pool(self, client, sdk, live_pool):
        with pytest.raises(PoolUnavailable) as exc_info:
            client.swap.swap(live_pool, new_address(), 1)
        assert exc_info.value.code == ErrorCode.POOL_MINT_MISMATCH
        sdk.build_swap.assert_not_called()

    def test_placeholder_pool_is_rejected(self, client, sdk):
        with pytest.raises(PoolUnavailable) as exc_info:
            client.swap.swap(f"{PLACEHOLDER_PREFIX}{new_address()}", NATIVE_MINT, 1)
        assert exc_info.value.code == ErrorCode.POOL_PLACEHOLDER
        sdk.build_swap.assert_not_called()

    def test_output_larger_than_reserve(self, client, live_pool):
        with pytest.raises(ValidationError):
            client.swap.swap(live_pool, NATIVE_MINT, 2_000_000, fixed_side="out")

    @pytest.mark.parametrize("kwargs", [
        {"input_mint": NATIVE_MINT, "amount": 0},
        {"input_mint": "", "amount": 1},
        {"input_mint": NATIVE_MINT, "amount": 1, "fixed_side": "both"},
    ])
    def test_invalid_input(self, client, sdk, live_pool, kwargs):
        with pytest.raises(ValidationError):
            client.swap.swap(live_pool, **kwargs)
        sdk.build_swap.assert_not_called()
