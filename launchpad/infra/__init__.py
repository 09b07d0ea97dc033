"""
Infrastructure layer: RPC, signing, SDK service, retry and resolution
"""

from .rpc import RpcClient, RpcClientConfig
from .signer import LocalSigner, WalletVault, create_signer, load_or_create_keypair
from .sdk import AmmSdk, HttpAmmSdk, BuildResult
from .tx_sender import TxSender, TxSenderConfig
from .resolver import FallbackChain, ResolverStep
from .retry import (
    CorrelationContext,
    AttemptsExhausted,
    run_attempts,
    describe_market_error,
)

__all__ = [
    "RpcClient",
    "RpcClientConfig",
    "LocalSigner",
    "WalletVault",
    "create_signer",
    "load_or_create_keypair",
    "AmmSdk",
    "HttpAmmSdk",
    "BuildResult",
    "TxSender",
    "TxSenderConfig",
    "FallbackChain",
    "ResolverStep",
    "CorrelationContext",
    "AttemptsExhausted",
    "run_attempts",
    "describe_market_error",
]
