"""
Configuration management for the launchpad backend

Loads settings from environment variables and .env file.
Includes logging configuration with file output and correlation ID support.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, List, Tuple

from dotenv import load_dotenv


def _load_env_file():
    """Load .env file from project root"""
    current = Path(__file__).parent.parent  # launchpad package parent
    env_file = current / ".env"

    if env_file.exists():
        load_dotenv(env_file)


# Load .env on module import
_load_env_file()


def _get_env(key: str, default: Optional[str] = "") -> Optional[str]:
    """Get environment variable with default"""
    value = os.getenv(key)
    if value is None:
        return default
    return value


def _get_env_float(key: str, default: float) -> float:
    """Get environment variable as float"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid float value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_int(key: str, default: int) -> int:
    """Get environment variable as int"""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"Invalid int value for {key}='{value}', using default={default}"
        )
        return default


def _get_env_bool(key: str, default: bool) -> bool:
    """Get environment variable as bool"""
    value = os.getenv(key)
    if value is None:
        return default
    return value.lower() in ("true", "1", "yes", "on")


def _get_env_list(key: str, default: str) -> List[str]:
    """Get comma separated environment variable as list"""
    value = _get_env(key, default) or ""
    return [item.strip() for item in value.split(",") if item.strip()]


# Ordered (lot_size, tick_size) pairs tried by market creation,
# one per assumed decimals profile of the base token.
DEFAULT_MARKET_ATTEMPTS: Tuple[Tuple[float, float], ...] = (
    (0.01, 0.0001),
    (0.1, 0.001),
    (1, 0.01),
    (0.001, 0.00001),
)


def _parse_market_attempts(value: Optional[str]) -> List[Tuple[float, float]]:
    """Parse MARKET_ATTEMPTS='0.01:0.0001,0.1:0.001' into pairs"""
    if not value:
        return list(DEFAULT_MARKET_ATTEMPTS)
    attempts = []
    for chunk in value.split(","):
        try:
            lot, tick = chunk.split(":")
            attempts.append((float(lot), float(tick)))
        except ValueError:
            logging.getLogger(__name__).warning(
                f"Invalid MARKET_ATTEMPTS entry '{chunk}', using defaults"
            )
            return list(DEFAULT_MARKET_ATTEMPTS)
    return attempts


PRODUCTION_CLUSTERS = frozenset({"mainnet", "mainnet-beta", "production"})
TEST_CLUSTERS = frozenset({"devnet", "testnet", "localnet", "test"})


@dataclass
class RpcConfig:
    """RPC client configuration"""
    url: str = field(default_factory=lambda: _get_env("SOLANA_RPC_URL", _get_env("RPC_ENDPOINT", "https://api.devnet.solana.com")))
    timeout_seconds: float = field(default_factory=lambda: _get_env_float("RPC_TIMEOUT_SECONDS", 30.0))
    max_retries: int = field(default_factory=lambda: _get_env_int("RPC_MAX_RETRIES", 3))
    retry_delay_seconds: float = field(default_factory=lambda: _get_env_float("RPC_RETRY_DELAY_SECONDS", 1.0))
    commitment: str = field(default_factory=lambda: _get_env("RPC_COMMITMENT", "confirmed"))


@dataclass
class NetworkConfig:
    """Cluster selection (production vs test network behaviour)"""
    cluster: str = field(default_factory=lambda: _get_env("SOLANA_CLUSTER", "devnet"))

    @property
    def is_production(self) -> bool:
        return self.cluster.lower() in PRODUCTION_CLUSTERS

    @property
    def is_test(self) -> bool:
        return self.cluster.lower() in TEST_CLUSTERS


@dataclass
class SignerConfig:
    """Operator wallet configuration"""
    keypair_path: str = field(default_factory=lambda: _get_env("WALLET_PATH", "./wallet.json"))
    # Generate and save a new keypair when the file is missing
    auto_create: bool = field(default_factory=lambda: _get_env_bool("WALLET_AUTO_CREATE", True))


@dataclass
class SdkConfig:
    """AMM SDK service and hosted index API configuration"""
    url: str = field(default_factory=lambda: _get_env("AMM_SDK_URL", "http://127.0.0.1:3100"))
    # Market and pool builds can take a while on congested clusters
    timeout: float = field(default_factory=lambda: _get_env_float("AMM_SDK_TIMEOUT", 120.0))
    api_url: str = field(default_factory=lambda: _get_env("RAYDIUM_API_URL", "https://api-v3.raydium.io"))
    api_timeout: float = field(default_factory=lambda: _get_env_float("RAYDIUM_API_TIMEOUT", 30.0))


@dataclass
class TxConfig:
    """Transaction send/confirm configuration"""
    confirmation_timeout: float = field(default_factory=lambda: _get_env_float("TX_CONFIRMATION_TIMEOUT", 60.0))
    max_retries: int = field(default_factory=lambda: _get_env_int("TX_MAX_RETRIES", 3))
    retry_delay: float = field(default_factory=lambda: _get_env_float("TX_RETRY_DELAY", 2.0))
    skip_preflight: bool = field(default_factory=lambda: _get_env_bool("TX_SKIP_PREFLIGHT", False))
    preflight_commitment: str = field(default_factory=lambda: _get_env("TX_PREFLIGHT_COMMITMENT", "confirmed"))


@dataclass
class LaunchConfig:
    """
    Token launch policy

    Attempt counts and delays were tuned against observed rate limits,
    so all of them can be overridden from the environment.
    """
    min_market_balance_sol: float = field(default_factory=lambda: _get_env_float("MARKET_MIN_BALANCE_SOL", 0.1))
    market_attempts: List[Tuple[float, float]] = field(
        default_factory=lambda: _parse_market_attempts(_get_env("MARKET_ATTEMPTS", None))
    )
    market_retry_delay: float = field(default_factory=lambda: _get_env_float("MARKET_RETRY_DELAY", 1.0))
    pool_percentage: float = field(default_factory=lambda: _get_env_float("POOL_PERCENTAGE_DEFAULT", 10.0))
    token_settle_delay: float = field(default_factory=lambda: _get_env_float("TOKEN_SETTLE_DELAY", 2.0))
    default_decimals: int = field(default_factory=lambda: _get_env_int("TOKEN_DEFAULT_DECIMALS", 9))
    default_supply: int = field(default_factory=lambda: _get_env_int("TOKEN_DEFAULT_SUPPLY", 1_000_000_000))
    default_liquidity_sol: float = field(default_factory=lambda: _get_env_float("TOKEN_DEFAULT_LIQUIDITY", 1.0))
    default_slippage_pct: float = field(default_factory=lambda: _get_env_float("DEFAULT_SLIPPAGE_PCT", 1.0))


def _get_default_data_dir() -> str:
    return str(Path(__file__).parent.parent / "data")


@dataclass
class RegistryConfig:
    """Persisted state locations"""
    data_dir: str = field(default_factory=lambda: _get_env("DATA_DIR", _get_default_data_dir()))
    pools_file: str = field(default_factory=lambda: _get_env("POOLS_FILE", ""))
    wallets_dir: str = field(default_factory=lambda: _get_env("WALLETS_DIR", ""))
    wallet_custody: bool = field(default_factory=lambda: _get_env_bool("WALLET_CUSTODY_ENABLED", True))

    def __post_init__(self):
        if not self.pools_file:
            self.pools_file = str(Path(self.data_dir) / "pools.json")
        if not self.wallets_dir:
            self.wallets_dir = str(Path(self.data_dir) / "wallets")


@dataclass
class ApiConfig:
    """HTTP server configuration"""
    host: str = field(default_factory=lambda: _get_env("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _get_env_int("PORT", 3001))
    prefix: str = field(default_factory=lambda: _get_env("API_PREFIX", "/api"))
    cors_origins: List[str] = field(default_factory=lambda: _get_env_list("CORS_ORIGINS", "*"))
    max_upload_bytes: int = field(default_factory=lambda: _get_env_int("MAX_UPLOAD_BYTES", 5 * 1024 * 1024))


def _get_default_log_path() -> str:
    """Get default log file path under launchpad/log/ with UTC timestamp"""
    from datetime import datetime, timezone
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    log_dir = Path(__file__).parent / "log"
    return str(log_dir / f"launchpad_{timestamp}.log")


@dataclass
class LoggingConfig:
    """
    Logging configuration with file output and correlation ID support.

    Environment variables:
        LOG_FILE: Path to log file (overrides default, empty disables file output)
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL (default: INFO)
        LOG_FORMAT: Custom log format string
        LOG_CONSOLE: Enable console output (default: true)
        LOG_MAX_BYTES: Max log file size before rotation (default: 10MB)
        LOG_BACKUP_COUNT: Number of backup files to keep (default: 5)
    """
    log_file: str = field(default_factory=lambda: _get_env("LOG_FILE", _get_default_log_path()))
    log_level: str = field(default_factory=lambda: _get_env("LOG_LEVEL", "INFO"))
    log_format: str = field(default_factory=lambda: _get_env(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))
    console_output: bool = field(default_factory=lambda: _get_env_bool("LOG_CONSOLE", True))
    max_bytes: int = field(default_factory=lambda: _get_env_int("LOG_MAX_BYTES", 10 * 1024 * 1024))  # 10MB
    backup_count: int = field(default_factory=lambda: _get_env_int("LOG_BACKUP_COUNT", 5))

    @property
    def level(self) -> int:
        """Get numeric log level"""
        return getattr(logging, self.log_level.upper(), logging.INFO)


@dataclass
class Config:
    """
    Main configuration container

    Usage:
        from launchpad.config import config

        print(config.rpc.url)
        print(config.network.is_production)
    """
    rpc: RpcConfig = field(default_factory=RpcConfig)
    network: NetworkConfig = field(default_factory=NetworkConfig)
    signer: SignerConfig = field(default_factory=SignerConfig)
    sdk: SdkConfig = field(default_factory=SdkConfig)
    tx: TxConfig = field(default_factory=TxConfig)
    launch: LaunchConfig = field(default_factory=LaunchConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def reload(cls) -> "Config":
        """Reload configuration from environment"""
        _load_env_file()
        return cls()


# Global config instance
config = Config()


def get_config() -> Config:
    """Get global configuration instance"""
    return config


def reload_config() -> Config:
    """Reload and return new configuration"""
    global config
    config = Config.reload()
    return config


def setup_logging(
    log_config: Optional[LoggingConfig] = None,
    logger_name: str = "launchpad",
) -> logging.Logger:
    """
    Set up logging based on configuration.

    Creates handlers for file and/or console output with optional rotation.
    The log file directory is created automatically if it doesn't exist.

    Args:
        log_config: Logging configuration (uses global config if None)
        logger_name: Name of the logger to configure (default: launchpad)

    Returns:
        Configured logger instance
    """
    if log_config is None:
        log_config = config.logging

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_config.level)

    # Close before removing to release file handles on reload
    for handler in logger.handlers[:]:
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(log_config.log_format)

    handlers: List[logging.Handler] = []

    if log_config.log_file:
        from logging.handlers import RotatingFileHandler

        log_path = Path(log_config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_config.log_file,
            maxBytes=log_config.max_bytes,
            backupCount=log_config.backup_count,
            encoding='utf-8',
        )
        file_handler.setLevel(log_config.level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    if log_config.console_output:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_config.level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    for handler in handlers:
        logger.addHandler(handler)

    # Child loggers inherit handlers from parent
    for name in [
        f"{logger_name}.infra",
        f"{logger_name}.modules",
        f"{logger_name}.registry",
        f"{logger_name}.api",
    ]:
        logging.getLogger(name).setLevel(log_config.level)

    if log_config.log_file:
        logger.info(f"Logging initialized: file={log_config.log_file}, level={log_config.log_level}")

    return logger
