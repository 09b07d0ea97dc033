"""
Result type definitions for transactions, AMM operations and launches
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from .common import Token, TokenInfo, json_number
from .pool import PoolRecord


class TxStatus(Enum):
    """Transaction status"""
    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"


@dataclass
class TxResult:
    """
    Transaction execution result

    Attributes:
        status: Transaction status
        signature: Transaction signature (base58)
        error: Error message if failed
        recoverable: Whether the error is recoverable (can retry)
    """
    status: TxStatus
    signature: Optional[str] = None
    error: Optional[str] = None
    recoverable: bool = False

    @property
    def is_success(self) -> bool:
        return self.status == TxStatus.SUCCESS

    @property
    def is_timeout(self) -> bool:
        return self.status == TxStatus.TIMEOUT

    @classmethod
    def success(cls, signature: str) -> "TxResult":
        return cls(status=TxStatus.SUCCESS, signature=signature)

    @classmethod
    def failed(cls, error: str, signature: str = None, recoverable: bool = False) -> "TxResult":
        return cls(status=TxStatus.FAILED, signature=signature, error=error, recoverable=recoverable)

    @classmethod
    def timeout(cls, signature: str = None) -> "TxResult":
        """Confirmation timeout (recoverable - can check on-chain status)"""
        return cls(
            status=TxStatus.TIMEOUT,
            signature=signature,
            error="Transaction confirmation timeout",
            recoverable=True,
        )

    def __str__(self) -> str:
        if self.is_success:
            sig_display = f"{self.signature[:16]}..." if self.signature else "no signature"
            return f"TxResult(SUCCESS, {sig_display})"
        return f"TxResult({self.status.value}, error={self.error})"


def _token_meta(token: Token) -> Dict[str, Any]:
    return {"name": token.name, "symbol": token.symbol, "decimals": token.decimals}


@dataclass
class MarketResult:
    """
    Created OpenBook market

    Attributes:
        market_id: Market account address
        base: Base token metadata
        quote: Quote token metadata
        transaction_ids: Signatures of the market creation transactions
        lot_size: Lot size of the successful attempt
        tick_size: Tick size of the successful attempt
    """
    market_id: str
    base: Token
    quote: Token
    transaction_ids: List[str] = field(default_factory=list)
    lot_size: Optional[float] = None
    tick_size: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "marketId": self.market_id,
            "baseMint": self.base.mint,
            "baseMetadata": _token_meta(self.base),
            "quoteMint": self.quote.mint,
            "quoteMetadata": _token_meta(self.quote),
            "transactionIds": list(self.transaction_ids),
            "lotSize": self.lot_size,
            "tickSize": self.tick_size,
        }


@dataclass
class TokenLeg:
    """One side of a liquidity or swap operation, in UI units"""
    token: Token
    amount: Decimal
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "mint": self.token.mint,
            "name": self.token.name,
            "symbol": self.token.symbol,
            "amount": json_number(self.amount),
        }
        if self.min_amount is not None:
            data["minAmount"] = json_number(self.min_amount)
        if self.max_amount is not None:
            data["maxAmount"] = json_number(self.max_amount)
        return data


@dataclass
class LiquidityResult:
    """Result of add/remove liquidity"""
    tx_id: str
    pool_id: str
    token_a: TokenLeg
    token_b: TokenLeg
    lp_amount: Optional[Decimal] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "txId": self.tx_id,
            "poolId": self.pool_id,
            "tokenA": self.token_a.to_dict(),
            "tokenB": self.token_b.to_dict(),
        }
        if self.lp_amount is not None:
            data["lpAmount"] = json_number(self.lp_amount)
        return data


@dataclass
class SwapResult:
    """Result of a swap"""
    tx_id: str
    pool_id: str
    input_token: TokenLeg
    output_token: TokenLeg

    def to_dict(self) -> Dict[str, Any]:
        return {
            "txId": self.tx_id,
            "poolId": self.pool_id,
            "inputToken": self.input_token.to_dict(),
            "outputToken": self.output_token.to_dict(),
        }


class LaunchState(Enum):
    """Token -> market -> pool orchestration states"""
    TOKEN_PENDING = "token_pending"
    MARKET_PENDING = "market_pending"
    POOL_PENDING = "pool_pending"
    DONE = "done"
    MARKET_FAILED = "market_failed"
    POOL_FAILED = "pool_failed"

    @property
    def is_terminal(self) -> bool:
        return self in (LaunchState.DONE, LaunchState.MARKET_FAILED, LaunchState.POOL_FAILED)

    @property
    def is_failure(self) -> bool:
        return self in (LaunchState.MARKET_FAILED, LaunchState.POOL_FAILED)


MARKET_FAILED_MESSAGE = "Market creation failed. You can try creating it manually."
POOL_FAILED_MESSAGE = "Pool creation failed. You can try creating it manually."


@dataclass
class LaunchResult:
    """
    Terminal outcome of a token launch

    Build through done(), market_failed() or pool_failed(); each fixes which
    of market / pool / error is present:

        DONE           market, pool, initial_price
        MARKET_FAILED  error, error_details            (no market, no pool)
        POOL_FAILED    market, error, error_details    (no pool)
    """
    state: LaunchState
    token: TokenInfo
    market: Optional[MarketResult] = None
    pool: Optional[PoolRecord] = None
    initial_price: Optional[Decimal] = None
    error: Optional[str] = None
    error_details: Optional[str] = None

    @property
    def is_done(self) -> bool:
        return self.state == LaunchState.DONE

    @property
    def is_failed(self) -> bool:
        return self.state.is_failure

    @classmethod
    def done(cls, token: TokenInfo, market: MarketResult, pool: PoolRecord, initial_price: Decimal) -> "LaunchResult":
        return cls(LaunchState.DONE, token, market=market, pool=pool, initial_price=initial_price)

    @classmethod
    def market_failed(cls, token: TokenInfo, details: str) -> "LaunchResult":
        return cls(LaunchState.MARKET_FAILED, token, error=MARKET_FAILED_MESSAGE, error_details=details)

    @classmethod
    def pool_failed(cls, token: TokenInfo, market: MarketResult, details: str) -> "LaunchResult":
        return cls(LaunchState.POOL_FAILED, token, market=market, error=POOL_FAILED_MESSAGE, error_details=details)

    def to_dict(self) -> Dict[str, Any]:
        data = self.token.to_dict()
        data.update({
            "state": self.state.value,
            "market": self.market.to_dict() if self.market else None,
            "pool": self.pool.to_dict() if self.pool else None,
        })
        if self.initial_price is not None:
            data["initialPrice"] = json_number(self.initial_price)
        if self.error is not None:
            data["error"] = self.error
            data["errorDetails"] = self.error_details
        return data
