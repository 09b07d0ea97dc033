"""
Launch Module

Token issuance and the token -> market -> pool orchestration.

    TOKEN_PENDING -> MARKET_PENDING -> POOL_PENDING -> DONE
                          |                 |
                    MARKET_FAILED      POOL_FAILED

Failures of the market or pool step end the launch with a tagged result
instead of raising, so the caller keeps whatever was created.
"""

import logging
import time
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..client import LaunchpadClient

from ..types import TokenInfo, LaunchResult, LaunchState, NATIVE_MINT
from ..types.common import Number, to_amount
from ..infra import CorrelationContext
from ..infra.retry import error_message
from ..errors import LaunchpadError, ValidationError, SdkError

logger = logging.getLogger(__name__)

TEST_NETWORK_POOL_MESSAGE = "On devnet, only placeholder pools can be created. For real pools, use mainnet."


@dataclass
class TokenRequest:
    """
    New token parameters

    Attributes:
        name: Token name
        symbol: Token symbol
        decimals: Mint decimals
        initial_supply: Supply minted to the operator, UI units
        description: Optional description stored in metadata
        image: Optional image bytes stored in metadata
        image_content_type: MIME type of image
    """
    name: str
    symbol: str
    decimals: int = 9
    initial_supply: Decimal = Decimal(1_000_000_000)
    description: Optional[str] = None
    image: Optional[bytes] = None
    image_content_type: Optional[str] = None

    def __post_init__(self):
        self.initial_supply = to_amount(self.initial_supply, "initialSupply")

    def validate(self):
        if not self.name or not self.symbol:
            raise ValidationError.missing("name", "Token name and symbol are required")
        if self.decimals < 0:
            raise ValidationError.invalid("decimals", "must not be negative")
        if self.initial_supply <= 0:
            raise ValidationError.invalid("initialSupply", "must be positive")


class LaunchModule:
    """
    Token launch operations module

    Usage:
        client = LaunchpadClient.from_config()

        token = client.launch.create_token(TokenRequest("My Token", "MYT"))
        result = client.launch.create_token_with_pool(token, initial_native_amount=1)
        if result.is_failed:
            print(result.error, result.error_details)
    """

    def __init__(self, client: "LaunchpadClient"):
        self._client = client

    @property
    def owner(self) -> str:
        return self._client.pubkey

    def _issue_token(self, request: TokenRequest) -> TokenInfo:
        request.validate()
        raw_supply = int(request.initial_supply * (Decimal(10) ** request.decimals))

        built = self._client.sdk.create_token(
            owner=self.owner,
            name=request.name,
            symbol=request.symbol,
            decimals=request.decimals,
            initial_supply=raw_supply,
            description=request.description,
            image=request.image,
            image_content_type=request.image_content_type,
        )
        mint = built.ext.get("mint")
        if not mint:
            raise SdkError.invalid_response("token/create", "missing mint")

        self._client.tx_sender.execute(built.transactions)
        logger.info(f"Token {request.symbol} created: {mint}")

        return TokenInfo(
            mint=mint,
            name=request.name,
            symbol=request.symbol,
            decimals=request.decimals,
            initial_supply=request.initial_supply,
            token_account=built.ext.get("tokenAccount"),
            description=request.description,
            metadata_uri=built.ext.get("metadataUri"),
        )

    def _launch_params(self, native_amount: Number, pool_percentage: Optional[Number]):
        native_amount = to_amount(native_amount, "initialLiquidity")
        percentage = to_amount(
            pool_percentage if pool_percentage is not None else self._client.launch_config.pool_percentage,
            "percentage",
        )
        if native_amount <= 0:
            raise ValidationError.invalid("initialLiquidity", "must be positive")
        if percentage <= 0 or percentage > 100:
            raise ValidationError.invalid("percentage", "must be in (0, 100]")
        return native_amount, percentage

    def create_token(self, request: TokenRequest) -> TokenInfo:
        """
        Issue a token and register a placeholder pool for it

        A failing placeholder is logged; the token is still returned.
        """
        token = self._issue_token(request)
        try:
            self._client.pool.create_placeholder_pool(token)
        except LaunchpadError as e:
            logger.warning(f"Could not create placeholder pool for {token.mint}: {e}")
        return token

    def create_token_with_pool(
        self,
        token_info: TokenInfo,
        initial_native_amount: Number,
        pool_percentage: Optional[Number] = None,
    ) -> LaunchResult:
        """
        Create a SOL-quoted market and pool for an existing token

        Args:
            token_info: Issued token
            initial_native_amount: SOL deposited into the pool
            pool_percentage: Share of the initial supply deposited (default 10)

        Returns:
            LaunchResult in DONE, MARKET_FAILED or POOL_FAILED state
        """
        native_amount, percentage = self._launch_params(initial_native_amount, pool_percentage)

        token_pool_amount = to_amount(token_info.initial_supply, "initialSupply") * percentage / Decimal(100)
        if token_pool_amount <= 0:
            raise ValidationError.invalid("initialSupply", "token has no supply to deposit")

        with CorrelationContext("launch") as cid:
            logger.info(f"[{cid}] {LaunchState.MARKET_PENDING.value}: {token_info.symbol} ({token_info.mint})")
            try:
                market = self._client.market.create_market(token_info.mint, NATIVE_MINT)
            except LaunchpadError as e:
                logger.error(f"[{cid}] {LaunchState.MARKET_FAILED.value}: {e}")
                return LaunchResult.market_failed(token_info, error_message(e))

            logger.info(
                f"[{cid}] {LaunchState.POOL_PENDING.value}: {token_pool_amount} {token_info.symbol} "
                f"/ {native_amount} SOL on market {market.market_id}"
            )
            try:
                pool = self._client.pool.create_pool(market.market_id, token_pool_amount, native_amount)
            except LaunchpadError as e:
                logger.error(f"[{cid}] {LaunchState.POOL_FAILED.value}: {e}")
                return LaunchResult.pool_failed(token_info, market, error_message(e))

            initial_price = native_amount / token_pool_amount
            logger.info(f"[{cid}] {LaunchState.DONE.value}: initial price {initial_price} SOL per {token_info.symbol}")
            return LaunchResult.done(token_info, market, pool, initial_price)

    def launch_token(
        self,
        request: TokenRequest,
        initial_liquidity: Optional[Number] = None,
        pool_percentage: Optional[Number] = None,
    ) -> LaunchResult:
        """
        Issue a token, then create its market and pool

        Token issuance failures raise. When the market or pool step fails,
        a placeholder pool is registered and returned in place of the pool;
        the result keeps its failure state and the error explains it.
        """
        launch_config = self._client.launch_config
        liquidity = initial_liquidity if initial_liquidity is not None else launch_config.default_liquidity_sol

        self._launch_params(liquidity, pool_percentage)

        with CorrelationContext("launch") as cid:
            token = self._issue_token(request)

            # let the new mint settle before the market reads it
            time.sleep(launch_config.token_settle_delay)

            result = self.create_token_with_pool(token, liquidity, pool_percentage)
            if result.is_done:
                return result

            try:
                placeholder = self._client.pool.create_placeholder_pool(token)
                logger.warning(f"[{cid}] Launch ended in {result.state.value}; placeholder {placeholder.pool_id} registered")
            except LaunchpadError as e:
                logger.error(f"[{cid}] Launch ended in {result.state.value}; placeholder failed: {e}")
                placeholder = None

            error = TEST_NETWORK_POOL_MESSAGE if self._client.is_test else result.error
            return replace(result, pool=placeholder, error=error)
