"""
Wallet Module Unit Tests

Tests wallet module logic without network dependencies.
"""

import sys
from pathlib import Path
from decimal import Decimal

import pytest

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from launchpad.errors import OperationNotSupported, SdkError, ValidationError
from launchpad.types import NATIVE_MINT, LAMPORTS_PER_SOL

from conftest import TX_SIGNATURE, new_address, pool_item


def token_account(mint: str, amount: int, decimals: int) -> dict:
    """jsonParsed getTokenAccountsByOwner entry"""
    return {
        "pubkey": new_address(),
        "account": {
            "data": {
                "parsed": {
                    "info": {
                        "mint": mint,
                        "owner": "owner",
                        "tokenAmount": {"amount": str(amount), "decimals": decimals},
                    },
                    "type": "account",
                },
            },
        },
    }


class TestBalances:
    """Tests for SOL and SPL balance queries"""

    def test_sol_balance_defaults_to_operator(self, client, rpc):
        assert client.wallet.sol_balance() == Decimal(2)
        rpc.get_balance.assert_called_once_with(client.pubkey)

    def test_sol_balance_rejects_bad_address(self, client, rpc):
        with pytest.raises(ValidationError):
            client.wallet.sol_balance("not-an-address")
        rpc.get_balance.assert_not_called()

    def test_token_balance_sums_accounts(self, client, rpc):
        mint = new_address()
        rpc.get_token_accounts_by_owner.return_value = [
            token_account(mint, 1_500_000, 6),
            token_account(mint, 500_000, 6),
        ]

        balance = client.wallet.token_balance(mint)

        assert balance["balance"] == Decimal(2)
        assert balance["decimals"] == 6
        assert balance["owner"] == client.pubkey
        rpc.get_token_accounts_by_owner.assert_called_once_with(client.pubkey, mint=mint)

    def test_token_balance_without_accounts(self, client):
        balance = client.wallet.token_balance(new_address())
        assert balance["balance"] == Decimal(0)

    def test_user_tokens_skip_empty_accounts(self, client, rpc):
        held, empty = new_address(), new_address()
        rpc.get_token_accounts_by_owner.return_value = [
            token_account(held, 42, 0),
            token_account(empty, 0, 9),
        ]

        tokens = client.wallet.user_tokens(client.pubkey)

        assert tokens == [{"mint": held, "balance": Decimal(42), "decimals": 0}]

    def test_lp_balance_invalid_pool(self, client, rpc):
        assert client.wallet.lp_balance("placeholder_x") == {"lpMint": "", "balance": Decimal(0)}
        rpc.get_token_accounts_by_owner.assert_not_called()

    def test_lp_balance_from_live_pool(self, client, rpc, sdk):
        pool_id, lp_mint = new_address(), new_address()
        sdk.get_pool_info_from_rpc.return_value = {
            "poolInfo": pool_item(pool_id, new_address(), lp_mint=lp_mint, lp_decimals=9),
        }
        rpc.get_token_accounts_by_owner.return_value = [token_account(lp_mint, 3 * 10 ** 9, 9)]

        result = client.wallet.lp_balance(pool_id)

        assert result == {"lpMint": lp_mint, "balance": Decimal(3)}


class TestAirdrop:
    """Airdrops are a test-network feature"""

    def test_airdrop_on_devnet(self, client, rpc):
        address = new_address()

        result = client.wallet.airdrop(address)

        rpc.request_airdrop.assert_called_once_with(address, LAMPORTS_PER_SOL)
        assert result["signature"] == TX_SIGNATURE
        assert result["amount"] == Decimal(1)

    def test_airdrop_fractional_amount(self, client, rpc):
        client.wallet.airdrop(amount=Decimal("0.5"))
        rpc.request_airdrop.assert_called_once_with(client.pubkey, LAMPORTS_PER_SOL // 2)

    def test_airdrop_on_production_is_refused(self, mainnet_client, rpc):
        with pytest.raises(OperationNotSupported):
            mainnet_client.wallet.airdrop(new_address())
        rpc.request_airdrop.assert_not_called()

    def test_airdrop_requires_positive_amount(self, client):
        with pytest.raises(ValidationError):
            client.wallet.airdrop(amount=0)


class TestResolveToken:
    """SDK -> parsed mint -> defaults"""

    def test_native_mint_is_local(self, client, sdk):
        token = client.wallet.resolve_token(NATIVE_MINT)
        assert token.symbol == "SOL"
        assert token.decimals == 9
        sdk.get_token_info.assert_not_called()

    def test_sdk_answer(self, client, sdk, rpc):
        mint = new_address()
        sdk.get_token_info.return_value = {"address": mint, "name": "Test", "symbol": "TST", "decimals": 6}

        token = client.wallet.resolve_token(mint)

        assert (token.name, token.symbol, token.decimals) == ("Test", "TST", 6)
        rpc.get_parsed_mint.assert_not_called()

    def test_sdk_failure_falls_back_to_mint_account(self, client, sdk, rpc):
        sdk.get_token_info.side_effect = SdkError.request_failed("token/info", "unknown mint")
        rpc.get_parsed_mint.return_value = {"decimals": 4, "supply": "10"}

        token = client.wallet.resolve_token(new_address())

        assert token.decimals == 4

    def test_defaults_when_nothing_knows_the_mint(self, client):
        token = client.wallet.resolve_token(new_address())
        assert token.decimals == 9
        assert token.name == "Unknown"


class TestCustodialWallets:
    """Per-user keypairs in the wallet vault"""

    def test_create_is_idempotent(self, client, rpc):
        first = client.wallet.create_custodial("12345")
        second = client.wallet.create_custodial("12345")

        assert first["isNew"] is True
        assert second["isNew"] is False
        assert first["publicKey"] == second["publicKey"]
        assert first["cluster"] == "devnet"
        # starter airdrop only for the new wallet
        rpc.request_airdrop.assert_called_once_with(first["publicKey"], LAMPORTS_PER_SOL)

    def test_no_airdrop_on_production(self, mainnet_client, rpc):
        mainnet_client.wallet.create_custodial("12345")
        rpc.request_airdrop.assert_not_called()

    def test_failed_starter_airdrop_still_creates_wallet(self, client, rpc):
        from launchpad.errors import RpcError

        rpc.request_airdrop.side_effect = RpcError("airdrop limit reached")

        info = client.wallet.create_custodial("12345")

        assert info["isNew"] is True

    def test_wallet_info(self, client):
        created = client.wallet.create_custodial("alice")

        info = client.wallet.custodial_wallet("alice")

        assert info["publicKey"] == created["publicKey"]
        assert "isNew" not in info
        assert client.wallet.custodial_wallet("bob") is None

    def test_wallet_info_by_public_key(self, client):
        address = new_address()
        info = client.wallet.custodial_wallet(public_key=address)
        assert info == {"publicKey": address, "cluster": "devnet", "balance": Decimal(2)}

    def test_vault_disabled(self, client):
        client._vault = None
        with pytest.raises(OperationNotSupported):
            client.wallet.create_custodial("12345")

    def test_user_id_required(self, client):
        with pytest.raises(ValidationError):
            client.wallet.create_custodial("")
        with pytest.raises(ValidationError):
            client.wallet.custodial_wallet()
