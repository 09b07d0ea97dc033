"""
Request models for JSON endpoints

Field names follow the wire format (camelCase). Required-looking fields are
Optional so that missing values produce the endpoint's own 400 message.
"""

from typing import Optional

from pydantic import BaseModel


class AirdropRequest(BaseModel):
    publicKey: Optional[str] = None
    amount: Optional[float] = None


class CreateWalletRequest(BaseModel):
    userId: Optional[str] = None


class CreatePoolRequest(BaseModel):
    marketId: Optional[str] = None
    baseMint: Optional[str] = None
    quoteMint: Optional[str] = None
    baseAmount: Optional[float] = None
    quoteAmount: Optional[float] = None


class PlaceholderPoolRequest(BaseModel):
    mint: Optional[str] = None
    name: Optional[str] = None
    symbol: Optional[str] = None
    decimals: Optional[int] = None


class AddLiquidityRequest(BaseModel):
    poolId: Optional[str] = None
    amount: Optional[float] = None
    fixedSide: str = "a"
    slippage: Optional[float] = None


class RemoveLiquidityRequest(BaseModel):
    poolId: Optional[str] = None
    lpAmount: Optional[float] = None
    slippage: Optional[float] = None


class SwapRequest(BaseModel):
    poolId: Optional[str] = None
    inputMint: Optional[str] = None
    amount: Optional[float] = None
    fixedSide: str = "in"
    slippage: Optional[float] = None
