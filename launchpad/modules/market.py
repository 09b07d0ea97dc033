"""
Market Module

OpenBook market creation for a base/quote pair.
"""

import logging
from decimal import Decimal
from typing import List, Optional, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from ..client import LaunchpadClient

from ..types import MarketResult, NATIVE_MINT, Token, is_valid_address
from ..infra import CorrelationContext, AttemptsExhausted, run_attempts, describe_market_error
from ..errors import ValidationError, InsufficientFunds, MarketCreationFailed, SdkError

logger = logging.getLogger(__name__)


class MarketModule:
    """
    Market operations module

    Market creation is sensitive to lot/tick sizes relative to the base
    token's decimals, so a fixed list of (lot_size, tick_size) pairs is
    tried in order until one succeeds.

    Usage:
        client = LaunchpadClient.from_config()

        market = client.market.create_market("BaseMint...")
        print(market.market_id)
    """

    def __init__(self, client: "LaunchpadClient"):
        self._client = client

    @property
    def owner(self) -> str:
        return self._client.pubkey

    def _attempt_list(
        self,
        lot_size: Optional[float],
        tick_size: Optional[float],
    ) -> List[Tuple[float, float]]:
        attempts = list(self._client.launch_config.market_attempts)
        if lot_size is not None and tick_size is not None:
            explicit = (lot_size, tick_size)
            attempts = [explicit] + [a for a in attempts if a != explicit]
        return attempts

    def _check_balance(self):
        required = Decimal(str(self._client.launch_config.min_market_balance_sol))
        available = self._client.wallet.sol_balance()
        if available < required:
            raise InsufficientFunds.sol_balance(required, available, "market creation")

    def _create_once(self, base: Token, quote: Token, sizes: Tuple[float, float]) -> MarketResult:
        lot_size, tick_size = sizes
        built = self._client.sdk.build_create_market(
            owner=self.owner,
            base_mint=base.mint,
            base_decimals=base.decimals,
            quote_mint=quote.mint,
            quote_decimals=quote.decimals,
            lot_size=lot_size,
            tick_size=tick_size,
            dex_program_id=self._client.programs.market,
        )
        market_id = built.ext.get("marketId")
        if not market_id:
            raise SdkError.invalid_response("market/create", "missing marketId")

        signatures = self._client.tx_sender.execute(built.transactions)
        return MarketResult(
            market_id=market_id,
            base=base,
            quote=quote,
            transaction_ids=signatures,
            lot_size=lot_size,
            tick_size=tick_size,
        )

    def create_market(
        self,
        base_mint: str,
        quote_mint: str = NATIVE_MINT,
        lot_size: Optional[float] = None,
        tick_size: Optional[float] = None,
    ) -> MarketResult:
        """
        Create an OpenBook market

        Args:
            base_mint: Base token mint
            quote_mint: Quote token mint (defaults to wrapped SOL)
            lot_size: Optional lot size tried before the configured list
            tick_size: Optional tick size paired with lot_size

        Returns:
            MarketResult of the first successful attempt

        Raises:
            InsufficientFunds: Operator balance below the minimum, before any attempt
            MarketCreationFailed: Every attempt failed
        """
        for name, mint in (("baseMint", base_mint), ("quoteMint", quote_mint)):
            if not mint:
                raise ValidationError.missing(name)
            if not is_valid_address(mint):
                raise ValidationError.invalid(name, f"not a valid Solana address: {mint}")

        with CorrelationContext("market") as cid:
            logger.info(f"[{cid}] Creating market for {base_mint}/{quote_mint}")
            self._check_balance()

            base = self._client.wallet.resolve_token(base_mint)
            quote = self._client.wallet.resolve_token(quote_mint)

            try:
                market = run_attempts(
                    self._attempt_list(lot_size, tick_size),
                    lambda sizes: self._create_once(base, quote, sizes),
                    "create_market",
                    delay=self._client.launch_config.market_retry_delay,
                )
            except AttemptsExhausted as e:
                raise MarketCreationFailed(
                    describe_market_error(e.last_error),
                    attempts=e.attempts,
                    last_error=e.last_error,
                )

            logger.info(f"[{cid}] Market {market.market_id} created")
            return market
