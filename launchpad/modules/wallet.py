"""
Wallet Module

Balance and ownership queries, token metadata resolution and custodial
wallets.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from solders.keypair import Keypair

if TYPE_CHECKING:
    from ..client import LaunchpadClient

from ..types import (
    Token,
    SOL,
    NATIVE_MINT,
    LAMPORTS_PER_SOL,
    is_valid_address,
    is_valid_pool_id,
    to_ui_amount,
)
from ..types.common import UNKNOWN_NAME, UNKNOWN_SYMBOL, to_amount
from ..infra import FallbackChain, ResolverStep
from ..errors import ValidationError, OperationNotSupported, LaunchpadError

logger = logging.getLogger(__name__)


def _parsed_token_amount(account: Dict[str, Any]) -> Dict[str, Any]:
    info = account.get("account", {}).get("data", {}).get("parsed", {}).get("info", {})
    return info


class WalletModule:
    """
    Wallet operations module

    Provides:
    - sol_balance(address): Native balance
    - token_balance(mint, owner): SPL balance for one mint
    - user_tokens(owner): Non-zero SPL balances
    - lp_balance(pool_id, owner): LP token balance for a pool
    - airdrop(address, amount): Test-network SOL
    - resolve_token(mint): Token metadata (SDK -> RPC -> defaults)
    - create_custodial / custodial_wallet: Per-user keypairs

    Usage:
        client = LaunchpadClient.from_config()

        sol = client.wallet.sol_balance()
        tokens = client.wallet.user_tokens("Owner...")
    """

    def __init__(self, client: "LaunchpadClient"):
        self._client = client
        self._rpc = client.rpc
        self._token_chain: FallbackChain[Token] = FallbackChain("token_info", [
            ResolverStep("sdk", self._token_from_sdk),
            ResolverStep("rpc", self._token_from_rpc),
        ])

    @property
    def address(self) -> str:
        """Operator wallet address"""
        return self._client.pubkey

    def _require_address(self, address: Optional[str], field: str = "publicKey") -> str:
        if not address:
            raise ValidationError.missing(field, "Public key is required")
        if not is_valid_address(address):
            raise ValidationError.invalid(field, f"not a valid Solana address: {address}")
        return address

    # ---------------------------------------------------------------- balances

    def sol_balance(self, address: Optional[str] = None) -> Decimal:
        """
        Native SOL balance

        Args:
            address: Wallet address (defaults to operator)

        Returns:
            SOL balance in UI units (e.g., 1.5)
        """
        address = self._require_address(address or self.address)
        lamports = self._rpc.get_balance(address)
        return Decimal(lamports) / Decimal(LAMPORTS_PER_SOL)

    def token_balance(self, mint: str, owner: Optional[str] = None) -> Dict[str, Any]:
        """
        Balance of one mint summed over the owner's token accounts

        Returns:
            {mint, owner, balance, decimals}
        """
        if not mint:
            raise ValidationError.missing("mint")
        owner = self._require_address(owner or self.address, "owner")

        accounts = self._rpc.get_token_accounts_by_owner(owner, mint=mint)
        total = Decimal(0)
        decimals = 0
        for account in accounts:
            token_amount = _parsed_token_amount(account).get("tokenAmount", {})
            decimals = int(token_amount.get("decimals", decimals))
            amount = token_amount.get("amount")
            if amount:
                total += to_ui_amount(amount, decimals)

        return {"mint": mint, "owner": owner, "balance": total, "decimals": decimals}

    def user_tokens(self, owner: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        SPL tokens held by owner, zero balances omitted

        Returns:
            [{mint, balance, decimals}]
        """
        owner = self._require_address(owner or self.address)
        tokens = []
        for account in self._rpc.get_token_accounts_by_owner(owner):
            info = _parsed_token_amount(account)
            token_amount = info.get("tokenAmount", {})
            amount = token_amount.get("amount")
            decimals = int(token_amount.get("decimals", 0))
            if not amount or int(amount) == 0:
                continue
            tokens.append({
                "mint": info.get("mint", ""),
                "balance": to_ui_amount(amount, decimals),
                "decimals": decimals,
            })
        return tokens

    def lp_balance(self, pool_id: str, owner: Optional[str] = None) -> Dict[str, Any]:
        """
        LP token balance for a pool

        The LP mint is resolved through the same chain as pool reads
        (API -> RPC -> registry). Unknown or invalid pools report zero.

        Returns:
            {lpMint, balance}
        """
        empty = {"lpMint": "", "balance": Decimal(0)}
        if not is_valid_pool_id(pool_id):
            return empty

        lp_mint = self._client.pool.lp_mint(pool_id)
        if not lp_mint:
            return empty

        balance = self.token_balance(lp_mint, owner)
        return {"lpMint": lp_mint, "balance": balance["balance"]}

    def airdrop(self, address: Optional[str] = None, amount: Decimal = Decimal(1)) -> Dict[str, Any]:
        """
        Request test-network SOL

        Raises:
            OperationNotSupported: Production cluster
        """
        if not self._client.is_test:
            raise OperationNotSupported.test_network_only("Airdrop", self._client.cluster)
        address = self._require_address(address or self.address)
        amount = to_amount(amount, "amount")
        if amount <= 0:
            raise ValidationError.invalid("amount", "must be positive")

        lamports = int(amount * LAMPORTS_PER_SOL)
        signature = self._rpc.request_airdrop(address, lamports)
        logger.info(f"Airdrop of {amount} SOL to {address}: {signature}")
        self._rpc.confirm_transaction(signature)
        return {"success": True, "signature": signature, "publicKey": address, "amount": amount}

    # ---------------------------------------------------------------- tokens

    def _token_from_sdk(self, mint: str) -> Optional[Token]:
        info = self._client.sdk.get_token_info(mint)
        if not info:
            return None
        return Token(
            mint=mint,
            symbol=info.get("symbol") or UNKNOWN_SYMBOL,
            decimals=int(info.get("decimals", 0)),
            name=info.get("name") or UNKNOWN_NAME,
        )

    def _token_from_rpc(self, mint: str) -> Optional[Token]:
        parsed = self._rpc.get_parsed_mint(mint)
        if not parsed or "decimals" not in parsed:
            return None
        return Token(mint=mint, decimals=int(parsed["decimals"]))

    def resolve_token(self, mint: str) -> Token:
        """
        Token metadata for mint

        Native SOL is answered locally. Otherwise the SDK service is asked,
        then the parsed mint account; when both miss the token gets default
        name, symbol and decimals.
        """
        if mint == NATIVE_MINT:
            return SOL
        token = self._token_chain.resolve(mint)
        if token is None:
            logger.warning(f"No metadata for {mint}, using defaults")
            token = Token(mint=mint, decimals=self._client.launch_config.default_decimals)
        return token

    def token_metadata(self, mint: str) -> Dict[str, Any]:
        """On-chain metadata for mint, as reported by the SDK service"""
        if not is_valid_address(mint):
            raise ValidationError.invalid("mint", f"not a valid Solana address: {mint}")
        return self._client.sdk.get_token_metadata(mint)

    # ---------------------------------------------------------------- custody

    def _vault(self):
        vault = self._client.vault
        if vault is None:
            raise OperationNotSupported.disabled("Custodial wallets")
        return vault

    def create_custodial(self, user_id: str) -> Dict[str, Any]:
        """
        Create (or return) the custodial wallet for user_id

        Returns:
            {publicKey, cluster, balance, isNew}
        """
        if not user_id:
            raise ValidationError.missing("userId", "User ID is required")
        keypair, is_new = self._vault().create(user_id)
        if is_new and self._client.is_test:
            # starter funds on test networks; the wallet exists either way
            try:
                self.airdrop(str(keypair.pubkey()), Decimal(1))
            except LaunchpadError as e:
                logger.warning(f"Initial airdrop for {keypair.pubkey()} failed: {e}")
        return self._wallet_info(keypair, is_new=is_new)

    def custodial_wallet(self, user_id: Optional[str] = None, public_key: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Wallet info by user id (custodial) or by public key

        Returns None when the user has no custodial wallet.
        """
        if user_id:
            keypair = self._vault().get(user_id)
            if keypair is None:
                return None
            return self._wallet_info(keypair)
        if public_key:
            address = self._require_address(public_key)
            return {
                "publicKey": address,
                "cluster": self._client.cluster,
                "balance": self.sol_balance(address),
            }
        raise ValidationError.missing("userId", "User ID or public key is required")

    def _wallet_info(self, keypair: Keypair, is_new: Optional[bool] = None) -> Dict[str, Any]:
        address = str(keypair.pubkey())
        try:
            balance = self.sol_balance(address)
        except LaunchpadError as e:
            logger.warning(f"Balance lookup for {address} failed: {e}")
            balance = Decimal(0)
        info = {"publicKey": address, "cluster": self._client.cluster, "balance": balance}
        if is_new is not None:
            info["isNew"] = is_new
        return info
