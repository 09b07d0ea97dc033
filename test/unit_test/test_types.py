"""
Test Type Definitions

Amount conversions, id validation, PoolRecord / PoolSnapshot parsing and
result serialization.
"""

import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from launchpad.types import (
    Token,
    TokenInfo,
    SOL,
    NATIVE_MINT,
    PoolRecord,
    PoolSnapshot,
    PLACEHOLDER_PREFIX,
    PENDING_MARKET,
    MarketResult,
    LaunchResult,
    LaunchState,
    TxResult,
    is_valid_pool_id,
    is_valid_address,
    to_raw_amount,
    to_ui_amount,
)
from launchpad.types.common import json_number, to_amount
from launchpad.errors import ValidationError
from launchpad.types.result import MARKET_FAILED_MESSAGE, POOL_FAILED_MESSAGE

from conftest import new_address, pool_item


class TestAmounts:

    def test_to_raw_amount_is_exact_for_decimal_strings(self):
        assert to_raw_amount(0.1, 9) == 100_000_000
        assert to_raw_amount("1.5", 6) == 1_500_000
        assert to_raw_amount(Decimal("0.3"), 1) == 3

    def test_to_raw_amount_floors(self):
        assert to_raw_amount("0.0000000019", 9) == 1

    def test_to_ui_amount(self):
        assert to_ui_amount(1_500_000, 6) == Decimal("1.5")
        assert to_ui_amount("250", 0) == Decimal(250)

    def test_json_number(self):
        assert json_number(Decimal("100000000.0")) == 100000000
        assert isinstance(json_number(Decimal("100000000.0")), int)
        assert json_number(Decimal("0.00000001")) == pytest.approx(1e-8)
        assert json_number(None) is None

    def test_to_amount_accepts_numbers_and_numeric_strings(self):
        assert to_amount("1.5", "amount") == Decimal("1.5")
        assert to_amount(2, "amount") == Decimal(2)
        assert to_amount(0.1, "amount") == Decimal("0.1")

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf"), "NaN", "Infinity", "sNaN", "lots", ""])
    def test_to_amount_rejects_non_finite_and_non_numeric(self, value):
        with pytest.raises(ValidationError) as exc_info:
            to_amount(value, "amount")
        assert exc_info.value.field == "amount"


class TestIdValidation:

    @pytest.mark.parametrize("pool_id", [
        "",
        None,
        "0OIl" * 10,
        "1" * 50,
        "short",
        "58oQChx4yWmvKdwLLZzBi4ChoCc2fqCUWBkwMihLYQo-",
    ])
    def test_invalid_pool_ids(self, pool_id):
        assert is_valid_pool_id(pool_id) is False

    def test_valid_pool_id(self):
        assert is_valid_pool_id("58oQChx4yWmvKdwLLZzBi4ChoCc2fqCUWBkwMihLYQo2") is True
        assert is_valid_pool_id("1" * 32) is True

    def test_valid_address_must_decode_to_32_bytes(self):
        assert is_valid_address(NATIVE_MINT) is True
        assert is_valid_address(new_address()) is True
        assert is_valid_address("z" * 44) is False


class TestPoolRecord:

    def test_initial_price_is_quote_per_base(self):
        record = PoolRecord(
            pool_id=new_address(),
            base_mint=new_address(),
            base_amount=100_000_000,
            quote_amount=1,
        )
        assert record.initial_price == Decimal("0.00000001")
        assert record.to_dict()["initialPrice"] == pytest.approx(1e-8)

    def test_initial_price_is_zero_without_base(self):
        record = PoolRecord(pool_id=new_address(), base_mint=new_address(), quote_amount=5)
        assert record.initial_price == 0

    def test_with_amounts_recomputes_price(self):
        record = PoolRecord(pool_id=new_address(), base_mint=new_address(), base_amount=10, quote_amount=1)
        updated = record.with_amounts(20, 1)
        assert updated.initial_price == Decimal("0.05")
        assert record.initial_price == Decimal("0.1")

    def test_placeholder(self):
        mint = new_address()
        token = TokenInfo(mint=mint, name="Test", symbol="TST", decimals=6)
        record = PoolRecord.placeholder(token, owner="operator")

        assert record.pool_id == f"{PLACEHOLDER_PREFIX}{mint}"
        assert record.is_placeholder is True
        assert record.market_id == PENDING_MARKET
        assert record.lp_mint == ""
        assert record.quote_mint == SOL.mint
        assert record.quote_decimals == 9
        assert record.base_decimals == 6
        assert record.initial_price == 0

    def test_dict_round_trip_keeps_unknown_keys(self):
        row = PoolRecord(pool_id=new_address(), base_mint=new_address(), base_amount=2, quote_amount=1).to_dict()
        row["note"] = "migrated"
        parsed = PoolRecord.from_dict(row)

        assert parsed.extra == {"note": "migrated"}
        assert parsed.to_dict() == row

    def test_from_dict_detects_placeholder_prefix(self):
        mint = new_address()
        record = PoolRecord.from_dict({"poolId": f"{PLACEHOLDER_PREFIX}{mint}", "baseMint": mint})
        assert record.is_placeholder is True
        assert record.is_placeholder_for(mint) is True
        assert record.is_placeholder_for(new_address()) is False

    def test_from_dict_requires_pool_id_and_base_mint(self):
        with pytest.raises(KeyError):
            PoolRecord.from_dict({"baseMint": new_address()})
        with pytest.raises(KeyError):
            PoolRecord.from_dict({"poolId": new_address()})


class TestPoolSnapshot:

    def test_from_api(self):
        pool_id, mint, lp = new_address(), new_address(), new_address()
        snapshot = PoolSnapshot.from_api(pool_item(pool_id, mint, amount_a=100, amount_b="1.5", lp_mint=lp))

        assert snapshot.mint_a.mint == mint
        assert snapshot.mint_b == SOL
        assert snapshot.base_reserve == 100
        assert snapshot.quote_reserve == 1_500_000_000
        assert snapshot.lp_token.mint == lp
        assert snapshot.token_for(NATIVE_MINT) == SOL
        assert snapshot.token_for(new_address()) is None

    def test_from_rpc_reserves_override_ui_amounts(self):
        pool_id, mint = new_address(), new_address()
        data = {
            "poolInfo": pool_item(pool_id, mint, amount_a=1, amount_b=1, base_decimals=2),
            "poolRpcData": {"baseReserve": "250", "quoteReserve": "3000000000"},
        }
        snapshot = PoolSnapshot.from_rpc(data)

        assert snapshot.source == "rpc"
        assert snapshot.base_reserve == 250
        assert snapshot.amount_a == Decimal("2.5")
        assert snapshot.amount_b == Decimal(3)

    def test_to_record_takes_local_fields_from_stored_row(self):
        pool_id, mint = new_address(), new_address()
        stored = PoolRecord(
            pool_id=pool_id, base_mint=mint, tx_id="creationSig", owner="operator",
            created_at="2024-01-01T00:00:00Z", base_amount=1, quote_amount=1,
        )
        record = PoolSnapshot.from_api(pool_item(pool_id, mint, amount_a=400, amount_b=2)).to_record(stored)

        assert record.owner == "operator"
        assert record.tx_id == "creationSig"
        assert record.created_at == "2024-01-01T00:00:00Z"
        assert record.base_amount == 400
        assert record.initial_price == Decimal("0.005")


class TestResults:

    def _token(self):
        return TokenInfo(mint=new_address(), name="Test", symbol="TST", decimals=9, initial_supply=1_000_000_000)

    def test_market_failed_has_no_market_or_pool(self):
        result = LaunchResult.market_failed(self._token(), "boom")
        data = result.to_dict()

        assert result.is_failed
        assert data["state"] == LaunchState.MARKET_FAILED.value
        assert data["market"] is None
        assert data["pool"] is None
        assert data["error"] == MARKET_FAILED_MESSAGE
        assert data["errorDetails"] == "boom"

    def test_pool_failed_keeps_market(self):
        token = self._token()
        market = MarketResult(market_id=new_address(), base=token.as_token(), quote=SOL)
        data = LaunchResult.pool_failed(token, market, "pool boom").to_dict()

        assert data["market"]["marketId"] == market.market_id
        assert data["pool"] is None
        assert data["error"] == POOL_FAILED_MESSAGE

    def test_done_has_no_error(self):
        token = self._token()
        market = MarketResult(market_id=new_address(), base=token.as_token(), quote=SOL)
        pool = PoolRecord(pool_id=new_address(), base_mint=token.mint, base_amount=100_000_000, quote_amount=1)
        data = LaunchResult.done(token, market, pool, pool.initial_price).to_dict()

        assert data["state"] == "done"
        assert "error" not in data
        assert data["mint"] == token.mint
        assert data["pool"]["poolId"] == pool.pool_id

    def test_launch_states(self):
        assert LaunchState.DONE.is_terminal
        assert LaunchState.POOL_FAILED.is_failure
        assert not LaunchState.MARKET_PENDING.is_terminal

    def test_tx_result(self):
        assert TxResult.success("sig").is_success
        timeout = TxResult.timeout("sig")
        assert timeout.is_timeout and timeout.recoverable

    def test_token_from_api_defaults(self):
        token = Token.from_api({"address": NATIVE_MINT})
        assert token.symbol == "UNK"
        assert token.decimals == 0
