"""
API Routes for the launchpad backend

Handlers are plain functions; FastAPI runs them in its worker thread pool,
so blocking RPC / SDK calls do not stall the event loop.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from ..client import LaunchpadClient
from ..modules.launch import TokenRequest
from ..types import TokenInfo
from ..types.common import json_number
from ..infra.retry import error_message
from ..errors import LaunchpadError, ValidationError
from .errors import error_response
from .schemas import (
    AirdropRequest,
    CreateWalletRequest,
    CreatePoolRequest,
    PlaceholderPoolRequest,
    AddLiquidityRequest,
    RemoveLiquidityRequest,
    SwapRequest,
)

logger = logging.getLogger(__name__)

api_router = APIRouter()

PLACEHOLDER_TOKEN_NAME = "Unknown Token"


def get_client(request: Request) -> LaunchpadClient:
    return request.app.state.client


def _int_or(value: Optional[str], default: int) -> int:
    if value is None or str(value).strip() == "":
        return default
    try:
        return int(float(value))
    except (ValueError, OverflowError):
        raise ValidationError.invalid("number", f"not an integer: {value!r}")


def _float_or(value: Optional[str], default: Optional[float]) -> Optional[float]:
    if value is None or str(value).strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ValidationError.invalid("number", f"not a number: {value!r}")


def _read_image(image: Optional[UploadFile], max_bytes: int):
    if image is None or not image.filename:
        return None, None
    if not (image.content_type or "").startswith("image/"):
        raise ValidationError.invalid("image", "Only images are allowed")
    content = image.file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise ValidationError.invalid("image", f"file exceeds {max_bytes} bytes")
    return content, image.content_type


def _token_request(
    client: LaunchpadClient,
    request: Request,
    name: Optional[str],
    symbol: Optional[str],
    description: Optional[str],
    decimals: Optional[str],
    initial_supply: Optional[str],
    image: Optional[UploadFile],
) -> TokenRequest:
    if not name or not symbol:
        raise ValidationError.missing("name", "Token name and symbol are required")
    launch_config = client.launch_config
    content, content_type = _read_image(image, request.app.state.max_upload_bytes)
    return TokenRequest(
        name=name,
        symbol=symbol,
        # zero is treated as unset
        decimals=_int_or(decimals, launch_config.default_decimals) or launch_config.default_decimals,
        initial_supply=_float_or(initial_supply, launch_config.default_supply),
        description=description,
        image=content,
        image_content_type=content_type,
    )


# ---------------------------------------------------------------- wallet

@api_router.get("/wallet")
def get_wallet(publicKey: Optional[str] = None, client: LaunchpadClient = Depends(get_client)):
    """Balance of a connected wallet"""
    if not publicKey:
        raise ValidationError.missing("publicKey", "Connected wallet public key is required")
    balance = client.wallet.sol_balance(publicKey)
    return {"publicKey": publicKey, "cluster": client.cluster, "balance": balance}


@api_router.post("/wallet/airdrop")
def airdrop(body: AirdropRequest, client: LaunchpadClient = Depends(get_client)):
    """Test-network SOL"""
    if not body.publicKey:
        raise ValidationError.missing("publicKey", "Public key is required")
    return client.wallet.airdrop(body.publicKey, body.amount or 1)


@api_router.post("/wallet/create")
def create_wallet(body: CreateWalletRequest, client: LaunchpadClient = Depends(get_client)):
    """Custodial wallet for a user id; returns the existing one on repeat calls"""
    return client.wallet.create_custodial(body.userId)


@api_router.get("/wallet/info")
def wallet_info(
    userId: Optional[str] = None,
    publicKey: Optional[str] = None,
    client: LaunchpadClient = Depends(get_client),
):
    return client.wallet.custodial_wallet(user_id=userId, public_key=publicKey)


# ---------------------------------------------------------------- tokens

@api_router.post("/token/create")
def create_token(
    request: Request,
    name: Optional[str] = Form(None),
    symbol: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    decimals: Optional[str] = Form(None),
    initialSupply: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    client: LaunchpadClient = Depends(get_client),
):
    """Issue a token; a placeholder pool is registered for it"""
    token_request = _token_request(client, request, name, symbol, description, decimals, initialSupply, image)
    return client.launch.create_token(token_request).to_dict()


@api_router.post("/token/create-with-pool")
def create_token_with_pool(
    request: Request,
    name: Optional[str] = Form(None),
    symbol: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    decimals: Optional[str] = Form(None),
    initialSupply: Optional[str] = Form(None),
    initialLiquidity: Optional[str] = Form(None),
    percentage: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    client: LaunchpadClient = Depends(get_client),
):
    """
    Issue a token, then create its market and pool

    200 when everything was created, 202 when the token exists but the
    market or pool step failed (a placeholder pool is returned instead).
    """
    token_request = _token_request(client, request, name, symbol, description, decimals, initialSupply, image)
    liquidity = _float_or(initialLiquidity, client.launch_config.default_liquidity_sol)
    pool_percentage = _float_or(percentage, None)

    logger.info(f"Launch requested: {token_request.name} ({token_request.symbol}), {liquidity} SOL")
    try:
        result = client.launch.launch_token(token_request, liquidity, pool_percentage)
    except ValidationError:
        raise
    except LaunchpadError as e:
        logger.error(f"Token creation failed: {e}")
        return error_response(500, error_message(e), step="token_creation")

    return JSONResponse(status_code=200 if result.is_done else 202, content=result.to_dict())


@api_router.get("/token/balance/{mint}")
def token_balance(mint: str, owner: Optional[str] = None, client: LaunchpadClient = Depends(get_client)):
    return client.wallet.token_balance(mint, owner)


@api_router.get("/token/metadata/{mint}")
def token_metadata(mint: str, client: LaunchpadClient = Depends(get_client)):
    return client.wallet.token_metadata(mint)


@api_router.get("/token/list")
def token_list(publicKey: Optional[str] = None, client: LaunchpadClient = Depends(get_client)):
    """Non-zero SPL balances of a wallet"""
    if not publicKey:
        raise ValidationError.missing("publicKey", "Wallet public key is required")
    return client.wallet.user_tokens(publicKey)


# ---------------------------------------------------------------- pools

@api_router.post("/pool/create")
def create_pool(body: CreatePoolRequest, client: LaunchpadClient = Depends(get_client)):
    """
    Create a pool on marketId, or create the market first when only the
    base and quote mints are given
    """
    if not body.baseAmount or not body.quoteAmount:
        raise ValidationError.missing("baseAmount", "Base amount and quote amount are required")

    market_id = body.marketId
    if not market_id:
        if not body.baseMint or not body.quoteMint:
            raise ValidationError.missing("marketId", "Market ID, or base mint and quote mint, are required")
        market_id = client.market.create_market(body.baseMint, body.quoteMint).market_id

    return client.pool.create_pool(market_id, body.baseAmount, body.quoteAmount).to_dict()


@api_router.get("/pool/list")
def pool_list(client: LaunchpadClient = Depends(get_client)):
    """Pools created by the operator wallet"""
    return [record.to_dict() for record in client.pool.get_user_pools()]


@api_router.get("/pool/token/{mint}")
def pools_by_token(mint: str, client: LaunchpadClient = Depends(get_client)):
    return [record.to_dict() for record in client.pool.get_pools_by_token(mint)]


@api_router.post("/pool/placeholder")
def create_placeholder_pool(body: PlaceholderPoolRequest, client: LaunchpadClient = Depends(get_client)):
    if not body.mint:
        raise ValidationError.missing("mint", "Token mint address is required")
    token = TokenInfo(
        mint=body.mint,
        name=body.name or PLACEHOLDER_TOKEN_NAME,
        symbol=body.symbol or "UNK",
        decimals=body.decimals if body.decimals is not None else client.launch_config.default_decimals,
        initial_supply=0,
    )
    return client.pool.create_placeholder_pool(token).to_dict()


@api_router.get("/pool/{pool_id}")
def get_pool(pool_id: str, client: LaunchpadClient = Depends(get_client)):
    """Pool record plus the operator's LP balance"""
    record = client.pool.get_pool_info(pool_id)
    if record is None:
        return error_response(404, "Pool not found or invalid pool ID")

    data: Any = record.to_dict()
    try:
        data["lpBalance"] = json_number(client.wallet.lp_balance(pool_id)["balance"])
    except LaunchpadError as e:
        logger.warning(f"LP balance for {pool_id} unavailable: {e}")
        data["lpBalance"] = 0
    return data


# ---------------------------------------------------------------- AMM operations

@api_router.post("/liquidity/add")
def add_liquidity(body: AddLiquidityRequest, client: LaunchpadClient = Depends(get_client)):
    if not body.poolId:
        raise ValidationError.missing("poolId", "Pool ID is required")
    if body.amount is None:
        raise ValidationError.missing("amount", "Amount is required")
    result = client.liquidity.add(body.poolId, body.amount, body.fixedSide, body.slippage)
    return result.to_dict()


@api_router.post("/liquidity/remove")
def remove_liquidity(body: RemoveLiquidityRequest, client: LaunchpadClient = Depends(get_client)):
    if not body.poolId:
        raise ValidationError.missing("poolId", "Pool ID is required")
    if body.lpAmount is None:
        raise ValidationError.missing("lpAmount", "LP amount is required")
    result = client.liquidity.remove(body.poolId, body.lpAmount, body.slippage)
    return result.to_dict()


@api_router.post("/swap")
def swap(body: SwapRequest, client: LaunchpadClient = Depends(get_client)):
    if not body.poolId:
        raise ValidationError.missing("poolId", "Pool ID is required")
    if not body.inputMint:
        raise ValidationError.missing("inputMint", "Input mint is required")
    if body.amount is None:
        raise ValidationError.missing("amount", "Amount is required")
    result = client.swap.swap(body.poolId, body.inputMint, body.amount, body.fixedSide, body.slippage)
    return result.to_dict()
