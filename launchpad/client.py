"""
LaunchpadClient - Unified entry point for launchpad operations

Holds the shared collaborators (RPC client, operator signer, SDK service
bridge, hosted API client, pool registry) and exposes functional modules
(wallet, market, pool, liquidity, swap, launch).
"""

from __future__ import annotations

from typing import Optional, Union, List, TYPE_CHECKING

if TYPE_CHECKING:
    from solders.keypair import Keypair
    from .modules import (
        WalletModule,
        MarketModule,
        PoolModule,
        LiquidityModule,
        SwapModule,
        LaunchModule,
    )

from .infra import (
    RpcClient,
    RpcClientConfig,
    LocalSigner,
    WalletVault,
    AmmSdk,
    HttpAmmSdk,
    TxSender,
    TxSenderConfig,
    create_signer,
)
from .protocols.raydium import RaydiumApi, ProgramIds, programs_for
from .registry import PoolRegistry, JsonFilePoolStore
from .config import Config, LaunchConfig, NetworkConfig, config as global_config


class LaunchpadClient:
    """
    Launchpad client

    Provides access to operations through functional modules:
    - wallet: Balances, token metadata, airdrop, custodial wallets
    - market: OpenBook market creation
    - pool: Pool creation, placeholders, pool reads
    - liquidity: Add/remove liquidity
    - swap: Swaps
    - launch: Token issuance and launch orchestration

    Usage:
        # From environment configuration
        client = LaunchpadClient.from_config()

        # Or explicitly
        client = LaunchpadClient(
            rpc_url="https://api.devnet.solana.com",
            keypair_path="./wallet.json",
            cluster="devnet",
        )

        token = client.launch.create_token(TokenRequest("My Token", "MYT"))
        pools = client.pool.get_user_pools()
    """

    def __init__(
        self,
        rpc_url: Union[str, List[str], None] = None,
        keypair: Optional["Keypair"] = None,
        keypair_path: Optional[str] = None,
        cluster: Optional[str] = None,
        rpc: Optional[RpcClient] = None,
        signer: Optional[LocalSigner] = None,
        sdk: Optional[AmmSdk] = None,
        api: Optional[RaydiumApi] = None,
        registry: Optional[PoolRegistry] = None,
        vault: Optional[WalletVault] = None,
        launch_config: Optional[LaunchConfig] = None,
        rpc_config: Optional[RpcClientConfig] = None,
        tx_config: Optional[TxSenderConfig] = None,
    ):
        """
        Initialize LaunchpadClient

        Args:
            rpc_url: RPC endpoint URL or list of URLs for fallback
            keypair: Optional operator keypair
            keypair_path: Optional operator keypair file (created when missing)
            cluster: Cluster name; selects production or test behaviour
            rpc / signer / sdk / api / registry / vault: Pre-built collaborators
            launch_config: Launch policy (market attempts, delays, defaults)
            rpc_config: Optional RPC configuration
            tx_config: Optional transaction configuration
        """
        self._network = NetworkConfig(cluster=cluster) if cluster else global_config.network
        self._rpc = rpc or RpcClient(rpc_url or global_config.rpc.url, config=rpc_config)
        self._signer = signer or create_signer(
            keypair=keypair,
            keypair_path=keypair_path or global_config.signer.keypair_path,
            auto_create=global_config.signer.auto_create,
        )
        self._sdk = sdk or HttpAmmSdk(cluster=self._network.cluster)
        self._api = api or RaydiumApi()
        self._registry = registry or PoolRegistry(JsonFilePoolStore(global_config.registry.pools_file))
        self._vault = vault
        self._launch_config = launch_config or global_config.launch
        self._tx_sender = TxSender(self._rpc, self._signer, config=tx_config)

        # Lazy-loaded modules
        self._wallet: Optional["WalletModule"] = None
        self._market: Optional["MarketModule"] = None
        self._pool: Optional["PoolModule"] = None
        self._liquidity: Optional["LiquidityModule"] = None
        self._swap: Optional["SwapModule"] = None
        self._launch: Optional["LaunchModule"] = None

    @classmethod
    def from_config(cls, cfg: Optional[Config] = None) -> "LaunchpadClient":
        """Build every collaborator from configuration"""
        cfg = cfg or global_config
        vault = WalletVault(cfg.registry.wallets_dir) if cfg.registry.wallet_custody else None
        return cls(
            rpc_url=cfg.rpc.url,
            keypair_path=cfg.signer.keypair_path,
            cluster=cfg.network.cluster,
            sdk=HttpAmmSdk(cfg.sdk.url, cluster=cfg.network.cluster, timeout=cfg.sdk.timeout),
            api=RaydiumApi(cfg.sdk.api_url, timeout=cfg.sdk.api_timeout),
            registry=PoolRegistry(JsonFilePoolStore(cfg.registry.pools_file)),
            vault=vault,
            launch_config=cfg.launch,
        )

    @property
    def rpc(self) -> RpcClient:
        """Access to RPC client"""
        return self._rpc

    @property
    def signer(self) -> LocalSigner:
        """Access to operator signer"""
        return self._signer

    @property
    def sdk(self) -> AmmSdk:
        """Access to the AMM SDK service bridge"""
        return self._sdk

    @property
    def api(self) -> RaydiumApi:
        """Access to the hosted pool index"""
        return self._api

    @property
    def registry(self) -> PoolRegistry:
        """Access to the local pool registry"""
        return self._registry

    @property
    def vault(self) -> Optional[WalletVault]:
        """Custodial wallet store, None when custody is disabled"""
        return self._vault

    @property
    def tx_sender(self) -> TxSender:
        return self._tx_sender

    @property
    def launch_config(self) -> LaunchConfig:
        return self._launch_config

    @property
    def pubkey(self) -> str:
        """Operator public key"""
        return self._signer.pubkey

    @property
    def cluster(self) -> str:
        return self._network.cluster

    @property
    def is_production(self) -> bool:
        return self._network.is_production

    @property
    def is_test(self) -> bool:
        return self._network.is_test

    @property
    def programs(self) -> ProgramIds:
        """AMM / market / fee program ids for the current cluster"""
        return programs_for(self.is_production)

    @property
    def wallet(self) -> "WalletModule":
        """
        Wallet module

        Provides:
        - sol_balance(address): Native balance
        - token_balance(mint, owner): SPL balance
        - user_tokens(owner): Non-zero SPL balances
        - lp_balance(pool_id, owner): LP balance
        - airdrop(address, amount): Test-network SOL
        """
        if self._wallet is None:
            from .modules.wallet import WalletModule
            self._wallet = WalletModule(self)
        return self._wallet

    @property
    def market(self) -> "MarketModule":
        """
        Market module

        Provides:
        - create_market(base_mint, quote_mint): OpenBook market
        """
        if self._market is None:
            from .modules.market import MarketModule
            self._market = MarketModule(self)
        return self._market

    @property
    def pool(self) -> "PoolModule":
        """
        Pool module

        Provides:
        - create_pool(market_id, base_amount, quote_amount)
        - create_placeholder_pool(token_info)
        - get_pool_info(pool_id), get_pools_by_token(mint), get_user_pools(owner)
        """
        if self._pool is None:
            from .modules.pool import PoolModule
            self._pool = PoolModule(self)
        return self._pool

    @property
    def liquidity(self) -> "LiquidityModule":
        """
        Liquidity module

        Provides:
        - add(pool_id, amount, fixed_side, slippage_pct)
        - remove(pool_id, lp_amount, slippage_pct)
        """
        if self._liquidity is None:
            from .modules.liquidity import LiquidityModule
            self._liquidity = LiquidityModule(self)
        return self._liquidity

    @property
    def swap(self) -> "SwapModule":
        """
        Swap module

        Provides:
        - swap(pool_id, input_mint, amount, fixed_side, slippage_pct)
        """
        if self._swap is None:
            from .modules.swap import SwapModule
            self._swap = SwapModule(self)
        return self._swap

    @property
    def launch(self) -> "LaunchModule":
        """
        Launch module

        Provides:
        - create_token(request)
        - create_token_with_pool(token_info, initial_native_amount, pool_percentage)
        - launch_token(request, initial_liquidity, pool_percentage)
        """
        if self._launch is None:
            from .modules.launch import LaunchModule
            self._launch = LaunchModule(self)
        return self._launch

    def close(self):
        """Close client connections and release resources"""
        self._sdk.close()
        self._api.close()
        self._rpc.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"LaunchpadClient(pubkey={self.pubkey[:8]}..., cluster={self.cluster})"
