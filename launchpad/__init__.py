"""
Raydium token launchpad

Token issuance, OpenBook market creation and Raydium AMM pool orchestration
with a file-backed pool registry.

Usage:
    from launchpad import LaunchpadClient, TokenRequest

    client = LaunchpadClient.from_config()
    result = client.launch.launch_token(TokenRequest("My Token", "MYT"), initial_liquidity=1)
"""

from .client import LaunchpadClient
from .modules.launch import TokenRequest
from .errors import (
    ErrorCode,
    LaunchpadError,
    RpcError,
    SdkError,
    TransactionError,
    ValidationError,
    PoolUnavailable,
    InsufficientFunds,
    MarketCreationFailed,
    SignerError,
    ConfigurationError,
    OperationNotSupported,
)

__version__ = "0.1.0"

__all__ = [
    "LaunchpadClient",
    "TokenRequest",
    "ErrorCode",
    "LaunchpadError",
    "RpcError",
    "SdkError",
    "TransactionError",
    "ValidationError",
    "PoolUnavailable",
    "InsufficientFunds",
    "MarketCreationFailed",
    "SignerError",
    "ConfigurationError",
    "OperationNotSupported",
]
