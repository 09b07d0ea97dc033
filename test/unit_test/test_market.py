"""
Market Module Unit Tests
"""

import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from launchpad.errors import (
    InsufficientFunds,
    MarketCreationFailed,
    SdkError,
    ValidationError,
)
from launchpad.protocols.raydium.constants import OPENBOOK_DEVNET_PROGRAM_ID, OPENBOOK_PROGRAM_ID
from launchpad.types import NATIVE_MINT, LAMPORTS_PER_SOL

from conftest import TX_SIGNATURE, built, new_address


class TestCreateMarket:

    def test_first_success_stops(self, client, sdk):
        market_id = new_address()
        sdk.build_create_market.return_value = built(marketId=market_id)
        base_mint = new_address()

        market = client.market.create_market(base_mint)

        assert market.market_id == market_id
        assert market.transaction_ids == [TX_SIGNATURE]
        assert (market.lot_size, market.tick_size) == (0.01, 0.0001)
        sdk.build_create_market.assert_called_once()
        kwargs = sdk.build_create_market.call_args.kwargs
        assert kwargs["base_mint"] == base_mint
        assert kwargs["quote_mint"] == NATIVE_MINT
        assert kwargs["quote_decimals"] == 9
        assert kwargs["dex_program_id"] == OPENBOOK_DEVNET_PROGRAM_ID

    def test_production_uses_mainnet_program(self, mainnet_client, sdk):
        sdk.build_create_market.return_value = built(marketId=new_address())
        mainnet_client.market.create_market(new_address())
        assert sdk.build_create_market.call_args.kwargs["dex_program_id"] == OPENBOOK_PROGRAM_ID

    def test_failed_attempt_moves_to_next_size(self, client, sdk):
        market_id = new_address()
        sdk.build_create_market.side_effect = [
            SdkError.request_failed("market/create", "invalid lot size"),
            built(marketId=market_id),
        ]

        market = client.market.create_market(new_address())

        assert market.market_id == market_id
        assert (market.lot_size, market.tick_size) == (0.1, 0.001)
        assert sdk.build_create_market.call_count == 2

    def test_explicit_sizes_are_tried_first(self, client, sdk):
        sdk.build_create_market.return_value = built(marketId=new_address())
        market = client.market.create_market(new_address(), lot_size=5.0, tick_size=0.5)
        assert (market.lot_size, market.tick_size) == (5.0, 0.5)

    def test_missing_market_id_counts_as_failed_attempt(self, client, sdk):
        market_id = new_address()
        sdk.build_create_market.side_effect = [built(), built(marketId=market_id)]

        market = client.market.create_market(new_address())

        assert market.market_id == market_id

    def test_insufficient_balance_fails_before_any_attempt(self, client, rpc, sdk):
        rpc.get_balance.return_value = LAMPORTS_PER_SOL // 20  # 0.05 SOL

        with pytest.raises(InsufficientFunds) as exc_info:
            client.market.create_market(new_address())

        assert exc_info.value.required == Decimal("0.1")
        assert "Insufficient SOL balance for market creation" in exc_info.value.message
        sdk.build_create_market.assert_not_called()

    def test_all_attempts_fail_with_program_error(self, client, sdk):
        sdk.build_create_market.side_effect = SdkError.request_failed(
            "market/create", "Transaction simulation failed: custom program error: 0x1"
        )

        with pytest.raises(MarketCreationFailed) as exc_info:
            client.market.create_market(new_address())

        error = exc_info.value
        assert error.message == "Market creation failed: Insufficient SOL or account already in use"
        assert error.attempts == 3
        assert "0x1" in str(error.last_error)
        assert sdk.build_create_market.call_count == 3

    def test_all_attempts_fail_with_other_error(self, client, sdk):
        sdk.build_create_market.side_effect = SdkError.request_failed("market/create", "node is behind")

        with pytest.raises(MarketCreationFailed) as exc_info:
            client.market.create_market(new_address())

        assert exc_info.value.message == "Market creation failed after multiple attempts: node is behind"

    def test_transaction_failure_is_retried(self, client, sdk):
        from launchpad.errors import TransactionError

        sdk.build_create_market.return_value = built(marketId=new_address())
        client.tx_sender.execute.side_effect = [
            TransactionError.confirmation_failed("sig", "expired"),
            [TX_SIGNATURE],
        ]

        market = client.market.create_market(new_address())

        assert market.lot_size == 0.1

    @pytest.mark.parametrize("base_mint", ["", "not-a-mint"])
    def test_invalid_base_mint(self, client, sdk, base_mint):
        with pytest.raises(ValidationError):
            client.market.create_market(base_mint)
        sdk.build_create_market.assert_not_called()

    def test_base_token_decimals_come_from_mint_account(self, client, rpc, sdk):
        rpc.get_parsed_mint.return_value = {"decimals": 6, "supply": "1"}
        sdk.build_create_market.return_value = built(marketId=new_address())

        market = client.market.create_market(new_address())

        assert market.base.decimals == 6
        assert sdk.build_create_market.call_args.kwargs["base_decimals"] == 6
