"""
Shared fixtures for launchpad unit tests

Every collaborator that would touch the network (RPC, SDK service, hosted
API) is a Mock with the real class as spec; the registry is in memory and
transaction execution is stubbed on the client's TxSender.
"""

import struct
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from launchpad import LaunchpadClient
from launchpad.config import LaunchConfig, ApiConfig
from launchpad.infra import RpcClient, AmmSdk, BuildResult, LocalSigner, WalletVault
from launchpad.protocols.raydium import RaydiumApi
from launchpad.protocols.raydium.constants import AMM_V4_DEVNET_PROGRAM_ID
from launchpad.registry import PoolRegistry, MemoryPoolStore
from launchpad.types import NATIVE_MINT, LAMPORTS_PER_SOL

TX_SIGNATURE = "3tHzx1pXQa7n5ReVf2wB9mLkJp8dYcUe6sGq4NrT1vZo"


def new_address() -> str:
    return str(Keypair().pubkey())


def market_account_data(base_mint: str, quote_mint: str = NATIVE_MINT) -> bytes:
    """Minimal OpenBook market account bytes holding the decoded header fields"""
    own = bytes(Keypair().pubkey())
    return (
        b"serum"
        + struct.pack("<Q", 3)
        + own
        + struct.pack("<Q", 1)
        + bytes(Pubkey.from_string(base_mint))
        + bytes(Pubkey.from_string(quote_mint))
        + bytes(64)
    )


def pool_item(
    pool_id: str,
    base_mint: str,
    amount_a=100,
    amount_b=1,
    base_decimals: int = 0,
    lp_mint: str = "",
    lp_amount=1,
    lp_decimals: int = 0,
    program_id: str = AMM_V4_DEVNET_PROGRAM_ID,
    market_id: str = "",
) -> dict:
    """Hosted API v3 pool item, TST/SOL"""
    return {
        "id": pool_id,
        "programId": program_id,
        "mintA": {"address": base_mint, "symbol": "TST", "name": "Test Token", "decimals": base_decimals},
        "mintB": {"address": NATIVE_MINT, "symbol": "SOL", "name": "Solana", "decimals": 9},
        "mintAmountA": amount_a,
        "mintAmountB": amount_b,
        "lpMint": {"address": lp_mint, "decimals": lp_decimals},
        "lpAmount": lp_amount,
        "marketId": market_id,
    }


def built(**ext) -> BuildResult:
    return BuildResult(transactions=[b"unsigned-tx"], ext=ext)


@pytest.fixture
def launch_config():
    return LaunchConfig(
        min_market_balance_sol=0.1,
        market_attempts=[(0.01, 0.0001), (0.1, 0.001), (1.0, 0.01)],
        market_retry_delay=0,
        pool_percentage=10.0,
        token_settle_delay=0,
        default_decimals=9,
        default_supply=1_000_000_000,
        default_liquidity_sol=1.0,
        default_slippage_pct=1.0,
    )


@pytest.fixture
def rpc():
    rpc = Mock(spec=RpcClient)
    rpc.get_balance.return_value = 2 * LAMPORTS_PER_SOL
    rpc.get_token_accounts_by_owner.return_value = []
    rpc.get_parsed_mint.return_value = None
    rpc.get_account_data.return_value = None
    rpc.request_airdrop.return_value = TX_SIGNATURE
    rpc.confirm_transaction.return_value = True
    return rpc


@pytest.fixture
def sdk():
    sdk = Mock(spec=AmmSdk)
    sdk.get_token_info.return_value = None
    sdk.get_token_metadata.return_value = {}
    sdk.get_pool_info_from_rpc.return_value = None
    return sdk


@pytest.fixture
def api():
    api = Mock(spec=RaydiumApi)
    api.fetch_pool_by_id.return_value = None
    api.fetch_pools_by_mint.return_value = []
    return api


@pytest.fixture
def registry():
    return PoolRegistry(MemoryPoolStore())


@pytest.fixture
def vault(tmp_path):
    return WalletVault(str(tmp_path / "wallets"))


def make_client(cluster, rpc, sdk, api, registry, vault, launch_config) -> LaunchpadClient:
    client = LaunchpadClient(
        rpc=rpc,
        signer=LocalSigner(Keypair()),
        sdk=sdk,
        api=api,
        registry=registry,
        vault=vault,
        cluster=cluster,
        launch_config=launch_config,
    )
    client.tx_sender.execute = Mock(return_value=[TX_SIGNATURE])
    return client


@pytest.fixture
def client(rpc, sdk, api, registry, vault, launch_config):
    """Devnet client"""
    return make_client("devnet", rpc, sdk, api, registry, vault, launch_config)


@pytest.fixture
def mainnet_client(rpc, sdk, api, registry, vault, launch_config):
    return make_client("mainnet-beta", rpc, sdk, api, registry, vault, launch_config)


@pytest.fixture
def api_config():
    return ApiConfig(
        host="127.0.0.1",
        port=3001,
        prefix="/api",
        cors_origins=["*"],
        max_upload_bytes=1024,
    )
