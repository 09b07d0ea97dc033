"""
Pool Module

Pool creation, placeholder registration and pool reads. Every read goes
through an ordered resolver chain: hosted API (production only), the SDK
service's on-chain reconstruction, then the local registry.
"""

import logging
from typing import List, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from ..client import LaunchpadClient

from ..types import (
    PoolRecord,
    PoolSnapshot,
    TokenInfo,
    PLACEHOLDER_PREFIX,
    is_valid_address,
    is_valid_pool_id,
)
from ..types.common import Number, to_amount
from ..infra import FallbackChain, ResolverStep, CorrelationContext
from ..protocols.raydium import decode_market, is_valid_amm
from ..errors import ValidationError, PoolUnavailable, SdkError

logger = logging.getLogger(__name__)


class PoolModule:
    """
    Pool operations module

    Provides:
    - create_pool(market_id, base_amount, quote_amount): New AMM v4 pool
    - create_placeholder_pool(token_info): Registry-only pool record
    - get_pool_info(pool_id): Pool by id, or None
    - get_pools_by_token(mint): Pools quoting mint on either side
    - get_user_pools(owner): Pools created by owner
    - require_live(pool_id): Tradable pool state for AMM operations

    Usage:
        client = LaunchpadClient.from_config()

        record = client.pool.create_pool(market_id, 100_000_000, 1)
        info = client.pool.get_pool_info(record.pool_id)
    """

    def __init__(self, client: "LaunchpadClient"):
        self._client = client
        self._rpc = client.rpc
        self._registry = client.registry

        self._live_chain: FallbackChain[PoolSnapshot] = FallbackChain("pool_state", [
            ResolverStep("api", self._snapshot_from_api, enabled=lambda: client.is_production),
            ResolverStep("rpc", self._snapshot_from_rpc),
        ])
        self._record_chain: FallbackChain[PoolRecord] = FallbackChain("pool_info", [
            ResolverStep("api", self._record_from_api, enabled=lambda: client.is_production),
            ResolverStep("rpc", self._record_from_rpc),
            ResolverStep("registry", self._registry.find_by_pool_id),
        ])
        self._by_token_chain: FallbackChain[List[PoolRecord]] = FallbackChain("pools_by_token", [
            ResolverStep("api", self._records_by_mint_from_api, enabled=lambda: client.is_production),
            ResolverStep("registry", self._registry.by_mint),
        ])

    @property
    def owner(self) -> str:
        return self._client.pubkey

    # ---------------------------------------------------------------- resolvers

    def _snapshot_from_api(self, pool_id: str) -> Optional[PoolSnapshot]:
        return self._client.api.fetch_pool_by_id(pool_id)

    def _snapshot_from_rpc(self, pool_id: str) -> Optional[PoolSnapshot]:
        data = self._client.sdk.get_pool_info_from_rpc(pool_id)
        if not data:
            return None
        try:
            return PoolSnapshot.from_rpc(data)
        except (KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise SdkError.invalid_response("pool/rpc-info", str(e))

    def _record_from_api(self, pool_id: str) -> Optional[PoolRecord]:
        snapshot = self._snapshot_from_api(pool_id)
        return snapshot.to_record(self._registry.find_by_pool_id(pool_id)) if snapshot else None

    def _record_from_rpc(self, pool_id: str) -> Optional[PoolRecord]:
        snapshot = self._snapshot_from_rpc(pool_id)
        return snapshot.to_record(self._registry.find_by_pool_id(pool_id)) if snapshot else None

    def _records_by_mint_from_api(self, mint: str) -> Optional[List[PoolRecord]]:
        snapshots = self._client.api.fetch_pools_by_mint(mint)
        stored = {r.pool_id: r for r in self._registry.by_mint(mint)}
        return [s.to_record(stored.get(s.pool_id)) for s in snapshots]

    # ---------------------------------------------------------------- reads

    def get_pool_info(self, pool_id: str) -> Optional[PoolRecord]:
        """
        Pool by id

        Ids that are not base58 of 32-44 characters return None without any
        lookup. Otherwise API (production) -> RPC -> registry.
        """
        if not is_valid_pool_id(pool_id):
            logger.warning(f"Invalid pool ID format: {pool_id!r}")
            return None

        record, source = self._record_chain.resolve_with_source(pool_id)
        if record is None:
            logger.info(f"Pool {pool_id} not found")
        else:
            logger.debug(f"Pool {pool_id} resolved from {source}")
        return record

    def get_pools_by_token(self, mint: str) -> List[PoolRecord]:
        """Hosted API on production; registry otherwise or when the API fails"""
        if not mint:
            raise ValidationError.missing("mint")
        return self._by_token_chain.resolve(mint) or []

    def get_user_pools(self, owner: Optional[str] = None) -> List[PoolRecord]:
        """Registry rows created by owner (defaults to operator)"""
        return self._registry.by_owner(owner or self.owner)

    def lp_mint(self, pool_id: str) -> Optional[str]:
        """LP mint for pool_id from live state, else from the registry row"""
        snapshot = self._live_chain.resolve(pool_id)
        if snapshot is not None and snapshot.lp_mint:
            return snapshot.lp_mint
        record = self._registry.find_by_pool_id(pool_id)
        return record.lp_mint if record and record.lp_mint else None

    def require_live(self, pool_id: str) -> PoolSnapshot:
        """
        Tradable pool state

        Raises:
            PoolUnavailable: placeholder, unknown pool, or not an AMM v4 pool
        """
        if not pool_id:
            raise ValidationError.missing("poolId")

        stored = self._registry.find_by_pool_id(pool_id)
        if pool_id.startswith(PLACEHOLDER_PREFIX) or (stored is not None and stored.is_placeholder):
            raise PoolUnavailable.placeholder(pool_id)
        if not is_valid_pool_id(pool_id):
            raise PoolUnavailable.not_found(pool_id)

        snapshot = self._live_chain.resolve(pool_id)
        if snapshot is None:
            raise PoolUnavailable.not_found(pool_id)
        if not is_valid_amm(snapshot.program_id):
            raise PoolUnavailable.invalid_program(pool_id, snapshot.program_id)
        return snapshot

    # ---------------------------------------------------------------- writes

    def create_pool(
        self,
        market_id: str,
        base_amount: Number,
        quote_amount: Number,
    ) -> PoolRecord:
        """
        Create an AMM v4 pool on an existing OpenBook market

        Args:
            market_id: Market account
            base_amount: Base token deposit in UI units
            quote_amount: Quote token deposit in UI units

        Returns:
            Registered PoolRecord
        """
        if not market_id:
            raise ValidationError.missing("marketId")
        if not is_valid_address(market_id):
            raise ValidationError.invalid("marketId", f"not a valid Solana address: {market_id}")

        base_amount = to_amount(base_amount, "baseAmount")
        quote_amount = to_amount(quote_amount, "quoteAmount")
        if base_amount <= 0 or quote_amount <= 0:
            raise ValidationError.invalid("amount", "base and quote amounts must be positive")

        with CorrelationContext("pool") as cid:
            logger.info(f"[{cid}] Creating pool on market {market_id}")

            data = self._rpc.get_account_data(market_id)
            if data is None:
                raise ValidationError.invalid("marketId", f"market account not found: {market_id}")
            market = decode_market(data)

            base = self._client.wallet.resolve_token(market.base_mint)
            quote = self._client.wallet.resolve_token(market.quote_mint)

            base_raw = base.raw_amount(base_amount)
            quote_raw = quote.raw_amount(quote_amount)
            if base_raw <= 0 or quote_raw <= 0:
                raise ValidationError.invalid("amount", "amount is below the token's smallest unit")

            programs = self._client.programs
            built = self._client.sdk.build_create_pool(
                owner=self.owner,
                market_id=market_id,
                base_mint=base.mint,
                quote_mint=quote.mint,
                base_amount=base_raw,
                quote_amount=quote_raw,
                program_id=programs.amm,
                market_program_id=programs.market,
                fee_destination_id=programs.fee_destination,
            )
            pool_id = built.ext.get("poolId")
            if not pool_id:
                raise SdkError.invalid_response("pool/create", "missing poolId")

            signatures = self._client.tx_sender.execute(built.transactions)
            logger.info(f"[{cid}] Pool {pool_id} created")

            record = PoolRecord(
                pool_id=pool_id,
                tx_id=signatures[-1] if signatures else "",
                market_id=market_id,
                base_mint=base.mint,
                base_name=base.name,
                base_symbol=base.symbol,
                base_decimals=base.decimals,
                base_amount=base_amount,
                quote_mint=quote.mint,
                quote_name=quote.name,
                quote_symbol=quote.symbol,
                quote_decimals=quote.decimals,
                quote_amount=quote_amount,
                lp_mint=built.ext.get("lpMint", ""),
                owner=self.owner,
            )
            return self._registry.append(record)

    def create_placeholder_pool(
        self,
        token_info: Union[TokenInfo, dict],
        owner: Optional[str] = None,
    ) -> PoolRecord:
        """
        Registry-only pool for a token that has no on-chain pool yet

        Idempotent per base mint: a second call returns the first record.
        """
        if isinstance(token_info, dict):
            if not token_info.get("mint"):
                raise ValidationError.missing("mint", "Token mint is required")
            token_info = TokenInfo.from_dict(token_info)
        if not token_info.mint:
            raise ValidationError.missing("mint")

        record = PoolRecord.placeholder(token_info, owner or self.owner)
        stored = self._registry.append_placeholder(record)
        if stored is record:
            logger.info(f"Placeholder pool created for {token_info.mint}")
        return stored
