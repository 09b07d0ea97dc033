"""
Retry Logic Helper Module

Sequential attempt runner for multi-parameter operations (market creation)
and error classification/rewriting. Includes structured logging with
correlation IDs for tracing multi-step launches.
"""

import contextvars
import logging
import time
import uuid
from typing import Callable, Optional, Sequence, Tuple, TypeVar

from ..errors import LaunchpadError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

# Context variable for correlation ID (thread-safe)
_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'correlation_id', default=None
)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for operation tracing."""
    return uuid.uuid4().hex[:12]


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: Optional[str]) -> contextvars.Token:
    """Set the correlation ID in context. Returns token for reset."""
    return _correlation_id.set(correlation_id)


class CorrelationContext:
    """
    Context manager for correlation ID scoping.

    Nested contexts reuse the outer ID so one launch logs under one ID.

    Usage:
        with CorrelationContext("launch") as cid:
            logger.info(f"[{cid}] Starting launch")
    """

    def __init__(self, prefix: Optional[str] = None):
        outer = get_correlation_id()
        if outer:
            self.correlation_id = outer
        else:
            self.correlation_id = generate_correlation_id()
            if prefix:
                self.correlation_id = f"{prefix}_{self.correlation_id}"
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = set_correlation_id(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            _correlation_id.reset(self._token)


def log_with_correlation(
    level: int,
    message: str,
    operation_name: str,
    attempt: Optional[int] = None,
    max_attempts: Optional[int] = None,
    **extra
):
    """
    Log message with correlation ID and structured context.

    Args:
        level: Logging level (logging.INFO, logging.WARNING, etc.)
        message: Log message
        operation_name: Name of the operation being executed
        attempt: Current attempt number (1-indexed)
        max_attempts: Number of attempts planned
        **extra: Additional context fields
    """
    cid = get_correlation_id()

    parts = []
    if cid:
        parts.append(f"[{cid}]")
    parts.append(f"[{operation_name}]")
    if attempt is not None and max_attempts is not None:
        parts.append(f"[{attempt}/{max_attempts}]")
    parts.append(message)

    extra_context = {
        "correlation_id": cid,
        "operation": operation_name,
        "attempt": attempt,
        "max_attempts": max_attempts,
        **extra
    }

    logger.log(level, " ".join(parts), extra=extra_context)


# Known on-chain failure substrings and their user-facing rewrite
MARKET_ERROR_REWRITES: Tuple[Tuple[str, str], ...] = (
    ("custom program error: 0x1", "Market creation failed: Insufficient SOL or account already in use"),
    ("transaction too large", "Market creation failed: Transaction too large"),
)


def error_message(error: BaseException) -> str:
    """Plain message without the [code] prefix"""
    if isinstance(error, LaunchpadError):
        return error.message
    return str(error)


def describe_market_error(last_error: Optional[BaseException]) -> str:
    """Rewrite the last market attempt error into user-facing text"""
    raw = error_message(last_error) if last_error is not None else "unknown error"
    lowered = raw.lower()
    for needle, rewrite in MARKET_ERROR_REWRITES:
        if needle in lowered:
            return rewrite
    return f"Market creation failed after multiple attempts: {raw}"


class AttemptsExhausted(Exception):
    """Every parameter variation failed"""

    def __init__(self, operation_name: str, attempts: int, last_error: Optional[Exception]):
        super().__init__(f"{operation_name} failed after {attempts} attempts: {last_error}")
        self.operation_name = operation_name
        self.attempts = attempts
        self.last_error = last_error


def run_attempts(
    variations: Sequence[T],
    operation: Callable[[T], R],
    operation_name: str,
    delay: float,
    retry_on: Tuple[type, ...] = (LaunchpadError,),
) -> R:
    """
    Try each parameter variation in order and return the first success.

    Attempts are sequential with a fixed delay between them (none after the
    last). Only exceptions listed in retry_on move on to the next variation;
    anything else propagates immediately.

    Raises:
        AttemptsExhausted: No variation succeeded
    """
    total = len(variations)
    last_error: Optional[Exception] = None

    for index, variation in enumerate(variations):
        attempt = index + 1
        try:
            log_with_correlation(
                logging.INFO,
                f"Trying {variation}",
                operation_name,
                attempt,
                total,
            )
            result = operation(variation)
            if attempt > 1:
                log_with_correlation(
                    logging.INFO,
                    f"Succeeded after {attempt} attempts",
                    operation_name,
                    attempt,
                    total,
                )
            return result
        except retry_on as e:
            last_error = e
            log_with_correlation(
                logging.WARNING,
                f"Attempt failed: {error_message(e)}",
                operation_name,
                attempt,
                total,
                error=error_message(e),
            )
            if attempt < total:
                time.sleep(delay)

    log_with_correlation(
        logging.ERROR,
        f"All {total} attempts failed. Last error: {last_error}",
        operation_name,
        total,
        total,
    )
    raise AttemptsExhausted(operation_name, total, last_error)
