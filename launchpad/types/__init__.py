"""
Type definitions for the launchpad backend
"""

from .common import (
    Token,
    TokenInfo,
    SOL,
    NATIVE_MINT,
    NATIVE_DECIMALS,
    LAMPORTS_PER_SOL,
    is_valid_pool_id,
    is_valid_address,
    to_raw_amount,
    to_ui_amount,
)
from .pool import PoolRecord, PoolSnapshot, PLACEHOLDER_PREFIX, PENDING_MARKET
from .result import (
    TxResult,
    TxStatus,
    MarketResult,
    TokenLeg,
    LiquidityResult,
    SwapResult,
    LaunchState,
    LaunchResult,
)

__all__ = [
    "Token",
    "TokenInfo",
    "SOL",
    "NATIVE_MINT",
    "NATIVE_DECIMALS",
    "LAMPORTS_PER_SOL",
    "is_valid_pool_id",
    "is_valid_address",
    "to_raw_amount",
    "to_ui_amount",
    "PoolRecord",
    "PoolSnapshot",
    "PLACEHOLDER_PREFIX",
    "PENDING_MARKET",
    "TxResult",
    "TxStatus",
    "MarketResult",
    "TokenLeg",
    "LiquidityResult",
    "SwapResult",
    "LaunchState",
    "LaunchResult",
]
