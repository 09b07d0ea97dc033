"""
Functional modules for LaunchpadClient

Provides high-level operations:
- WalletModule: Balances, token metadata, custodial wallets
- MarketModule: OpenBook market creation
- PoolModule: Pool creation, placeholders and pool reads
- LiquidityModule: Add/remove liquidity
- SwapModule: Single-pool swaps
- LaunchModule: Token issuance and token -> market -> pool orchestration
"""

from .wallet import WalletModule
from .market import MarketModule
from .pool import PoolModule
from .liquidity import LiquidityModule
from .swap import SwapModule
from .launch import LaunchModule, TokenRequest

__all__ = [
    "WalletModule",
    "MarketModule",
    "PoolModule",
    "LiquidityModule",
    "SwapModule",
    "LaunchModule",
    "TokenRequest",
]
