"""
Error definitions for the launchpad backend
"""

from .exceptions import (
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

__all__ = [
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
