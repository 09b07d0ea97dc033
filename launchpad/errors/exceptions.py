"""
Exception definitions for the launchpad backend
"""

from enum import Enum
from typing import Optional
from decimal import Decimal


class ErrorCode(Enum):
    """
    Unified error codes

    1xxx - RPC errors
    2xxx - Transaction errors
    3xxx - SDK service errors
    4xxx - Pool errors
    5xxx - Market errors
    6xxx - Signer errors
    7xxx - Operation / validation errors
    9xxx - Configuration errors
    """
    # RPC errors (recoverable)
    RPC_CONNECTION_FAILED = "1001"
    RPC_TIMEOUT = "1002"
    RPC_RATE_LIMITED = "1003"
    RPC_INVALID_RESPONSE = "1004"

    # Transaction errors
    TX_SEND_FAILED = "2002"
    TX_CONFIRMATION_FAILED = "2003"
    TX_INSUFFICIENT_FUNDS = "2004"

    # SDK service errors
    SDK_UNAVAILABLE = "3001"
    SDK_REQUEST_FAILED = "3002"
    SDK_INVALID_RESPONSE = "3003"

    # Pool errors
    POOL_NOT_FOUND = "4001"
    POOL_UNAVAILABLE = "4002"
    POOL_PLACEHOLDER = "4003"
    POOL_INVALID_PROGRAM = "4004"
    POOL_MINT_MISMATCH = "4005"

    # Market errors
    MARKET_CREATION_FAILED = "5001"

    # Signer errors
    SIGNER_NOT_CONFIGURED = "6001"
    SIGNER_FAILED = "6002"

    # Operation errors
    OPERATION_NOT_SUPPORTED = "7001"
    VALIDATION_FAILED = "7003"

    # Configuration errors
    CONFIG_INVALID = "9001"
    CONFIG_MISSING = "9002"


class LaunchpadError(Exception):
    """
    Base exception for all launchpad errors

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        recoverable: Whether the error might succeed on retry
        original_error: The underlying exception if any
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable
        self.original_error = original_error
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"

    @property
    def should_retry(self) -> bool:
        """Indicate if the operation should be retried"""
        return self.recoverable


class RpcError(LaunchpadError):
    """
    RPC-related errors - typically recoverable

    Raised when:
    - Connection to RPC endpoint fails
    - Request times out
    - Rate limit is hit
    - Invalid response received
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RPC_CONNECTION_FAILED,
        original_error: Optional[Exception] = None,
        endpoint: Optional[str] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=True,
            original_error=original_error,
            details={"endpoint": endpoint} if endpoint else None,
        )
        self.endpoint = endpoint

    @classmethod
    def connection_failed(cls, endpoint: str, error: Exception = None) -> "RpcError":
        return cls(
            f"Failed to connect to RPC endpoint: {endpoint}",
            ErrorCode.RPC_CONNECTION_FAILED,
            original_error=error,
            endpoint=endpoint,
        )

    @classmethod
    def timeout(cls, endpoint: str, timeout_seconds: float) -> "RpcError":
        return cls(
            f"RPC request timed out after {timeout_seconds}s",
            ErrorCode.RPC_TIMEOUT,
            endpoint=endpoint,
        )

    @classmethod
    def invalid_response(cls, endpoint: str, reason: str) -> "RpcError":
        return cls(
            f"Invalid response from {endpoint}: {reason}",
            ErrorCode.RPC_INVALID_RESPONSE,
            endpoint=endpoint,
        )

    @classmethod
    def rate_limited(cls, endpoint: str) -> "RpcError":
        return cls(
            "RPC rate limit exceeded",
            ErrorCode.RPC_RATE_LIMITED,
            endpoint=endpoint,
        )


class SdkError(LaunchpadError):
    """
    Errors reported by the AMM SDK service

    The service's own message is kept verbatim so that on-chain error
    substrings (program error codes, size limits) survive to the caller.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SDK_REQUEST_FAILED,
        operation: Optional[str] = None,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            original_error=original_error,
            details={"operation": operation} if operation else None,
        )
        self.operation = operation

    @classmethod
    def unavailable(cls, url: str, error: Exception = None) -> "SdkError":
        return cls(
            f"AMM SDK service unavailable at {url}: {error}",
            ErrorCode.SDK_UNAVAILABLE,
            recoverable=True,
            original_error=error,
        )

    @classmethod
    def request_failed(cls, operation: str, reason: str) -> "SdkError":
        return cls(reason, ErrorCode.SDK_REQUEST_FAILED, operation=operation)

    @classmethod
    def invalid_response(cls, operation: str, reason: str) -> "SdkError":
        return cls(
            f"Invalid response from AMM SDK for {operation}: {reason}",
            ErrorCode.SDK_INVALID_RESPONSE,
            operation=operation,
        )


class TransactionError(LaunchpadError):
    """
    Transaction execution errors

    Raised when:
    - Transaction send fails
    - Confirmation fails or times out
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TX_SEND_FAILED,
        signature: Optional[str] = None,
        recoverable: bool = False,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            details={"signature": signature},
        )
        self.signature = signature

    @classmethod
    def send_failed(cls, error: str) -> "TransactionError":
        recoverable = "timeout" in error.lower() or "connection" in error.lower()
        return cls(
            f"Failed to send transaction: {error}",
            ErrorCode.TX_SEND_FAILED,
            recoverable=recoverable,
        )

    @classmethod
    def confirmation_failed(cls, signature: str, error: str) -> "TransactionError":
        return cls(
            f"Transaction confirmation failed: {error}",
            ErrorCode.TX_CONFIRMATION_FAILED,
            signature=signature,
            recoverable=True,
        )


class ValidationError(LaunchpadError):
    """
    Caller input rejected before any remote call

    Never retried; surfaced to HTTP callers as 400.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(
            message,
            ErrorCode.VALIDATION_FAILED,
            recoverable=False,
            details={"field": field} if field else None,
        )
        self.field = field

    @classmethod
    def missing(cls, field: str, message: Optional[str] = None) -> "ValidationError":
        return cls(message or f"{field} is required", field=field)

    @classmethod
    def invalid(cls, field: str, reason: str) -> "ValidationError":
        return cls(f"Invalid {field}: {reason}", field=field)


class PoolUnavailable(LaunchpadError):
    """
    Pool not usable for an AMM operation - not recoverable

    Raised when:
    - Pool id not found by any resolver
    - Pool is a local placeholder
    - Pool is owned by a program outside the AMM allow-list
    - Input mint is not one of the pool mints
    - Pool reports no LP supply to price a withdrawal against
    """

    def __init__(
        self,
        message: str,
        pool_id: Optional[str] = None,
        code: ErrorCode = ErrorCode.POOL_UNAVAILABLE,
    ):
        super().__init__(
            message,
            code,
            recoverable=False,
            details={"pool_id": pool_id},
        )
        self.pool_id = pool_id

    @property
    def is_not_found(self) -> bool:
        return self.code == ErrorCode.POOL_NOT_FOUND

    @classmethod
    def not_found(cls, pool_id: str) -> "PoolUnavailable":
        return cls("Pool not found or invalid pool ID", pool_id=pool_id, code=ErrorCode.POOL_NOT_FOUND)

    @classmethod
    def placeholder(cls, pool_id: str) -> "PoolUnavailable":
        return cls(
            "This is a placeholder pool. You need to create a real pool first.",
            pool_id=pool_id,
            code=ErrorCode.POOL_PLACEHOLDER,
        )

    @classmethod
    def invalid_program(cls, pool_id: str, program_id: str) -> "PoolUnavailable":
        return cls(
            f"Invalid AMM pool: program {program_id} is not a supported AMM program",
            pool_id=pool_id,
            code=ErrorCode.POOL_INVALID_PROGRAM,
        )

    @classmethod
    def no_lp_supply(cls, pool_id: str) -> "PoolUnavailable":
        return cls(f"Pool reports no LP supply: {pool_id}", pool_id=pool_id)

    @classmethod
    def mint_mismatch(cls, pool_id: str, mint: str) -> "PoolUnavailable":
        return cls(
            f"Input mint does not match pool: {mint}",
            pool_id=pool_id,
            code=ErrorCode.POOL_MINT_MISMATCH,
        )


class InsufficientFunds(LaunchpadError):
    """
    Insufficient balance - not recoverable without deposit
    """

    def __init__(
        self,
        message: str,
        token: Optional[str] = None,
        required: Optional[Decimal] = None,
        available: Optional[Decimal] = None,
    ):
        super().__init__(
            message,
            ErrorCode.TX_INSUFFICIENT_FUNDS,
            recoverable=False,
            details={
                "token": token,
                "required": str(required) if required is not None else None,
                "available": str(available) if available is not None else None,
            },
        )
        self.token = token
        self.required = required
        self.available = available

    @classmethod
    def sol_balance(cls, required: Decimal, available: Decimal, purpose: str) -> "InsufficientFunds":
        return cls(
            f"Insufficient SOL balance for {purpose}. Need at least {required} SOL, have {available} SOL",
            token="SOL",
            required=required,
            available=available,
        )


class MarketCreationFailed(LaunchpadError):
    """
    Every (lot size, tick size) attempt failed

    The message is already rewritten into user-facing text; the last
    raw error is kept in details and original_error.
    """

    def __init__(
        self,
        message: str,
        attempts: int = 0,
        last_error: Optional[Exception] = None,
    ):
        super().__init__(
            message,
            ErrorCode.MARKET_CREATION_FAILED,
            recoverable=False,
            original_error=last_error,
            details={
                "attempts": attempts,
                "last_error": str(last_error) if last_error else None,
            },
        )
        self.attempts = attempts
        self.last_error = last_error


class SignerError(LaunchpadError):
    """
    Signing-related errors
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SIGNER_FAILED,
    ):
        super().__init__(message, code, recoverable=False)

    @classmethod
    def not_configured(cls) -> "SignerError":
        return cls(
            "No operator wallet configured. Set WALLET_PATH or enable WALLET_AUTO_CREATE.",
            ErrorCode.SIGNER_NOT_CONFIGURED,
        )

    @classmethod
    def failed(cls, reason: str) -> "SignerError":
        return cls(f"Signing failed: {reason}", ErrorCode.SIGNER_FAILED)


class ConfigurationError(LaunchpadError):
    """
    Configuration-related errors
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
    ):
        super().__init__(message, code, recoverable=False)

    @classmethod
    def missing(cls, param: str) -> "ConfigurationError":
        return cls(f"Missing required configuration: {param}", ErrorCode.CONFIG_MISSING)

    @classmethod
    def invalid(cls, param: str, reason: str) -> "ConfigurationError":
        return cls(f"Invalid configuration '{param}': {reason}", ErrorCode.CONFIG_INVALID)


class OperationNotSupported(LaunchpadError):
    """
    Operation not available in the current environment
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        cluster: Optional[str] = None,
    ):
        super().__init__(
            message,
            ErrorCode.OPERATION_NOT_SUPPORTED,
            recoverable=False,
            details={"operation": operation, "cluster": cluster},
        )
        self.operation = operation
        self.cluster = cluster

    @classmethod
    def test_network_only(cls, operation: str, cluster: str) -> "OperationNotSupported":
        return cls(
            f"{operation} is only available on test networks (current cluster: {cluster})",
            operation=operation,
            cluster=cluster,
        )

    @classmethod
    def disabled(cls, operation: str) -> "OperationNotSupported":
        return cls(f"{operation} is disabled", operation=operation)
