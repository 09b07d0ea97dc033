"""
Raydium AMM v4 / OpenBook support
"""

from .api import RaydiumApi
from .constants import ProgramIds, programs_for, is_valid_amm, VALID_AMM_PROGRAM_IDS
from .market_layout import MarketState, decode_market

__all__ = [
    "RaydiumApi",
    "ProgramIds",
    "programs_for",
    "is_valid_amm",
    "VALID_AMM_PROGRAM_IDS",
    "MarketState",
    "decode_market",
]
