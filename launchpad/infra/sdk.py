"""
AMM SDK service bridge

Token issuance and the construction of market / pool / liquidity / swap
transactions are owned by the Raydium SDK, which runs as a separate service.
This module talks to it over JSON/HTTP. Build operations return serialized
transactions, unsigned by the operator (the service may already have added
signatures for keys it generated, e.g. a new mint or market), plus extra
info such as the new market id or pool id.

Service contract, for every operation:
    POST {url}/{operation}  body: JSON payload
    200 {"success": true,  "data": {...}}
    4xx/5xx or {"success": false, "error": "<message>"}
"""

from __future__ import annotations

import base64
import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from ..errors import SdkError, ErrorCode
from ..config import config as global_config

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """
    Transactions built by the SDK service

    Attributes:
        transactions: Serialized transactions, to be signed and sent in order
        ext: Extra info (marketId, poolId, lpMint, mint, ...)
    """
    transactions: List[bytes] = field(default_factory=list)
    ext: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, operation: str, data: Dict[str, Any]) -> "BuildResult":
        raw_txs = data.get("transactions")
        if not isinstance(raw_txs, list):
            raise SdkError.invalid_response(operation, "missing transactions list")
        try:
            transactions = [base64.b64decode(tx) for tx in raw_txs]
        except (TypeError, ValueError) as e:
            raise SdkError.invalid_response(operation, f"transaction is not base64: {e}")
        return cls(transactions=transactions, ext=data.get("extInfo") or {})


class AmmSdk(ABC):
    """
    Operations the launchpad needs from the AMM SDK

    Amounts are integer base units unless named *_ui.
    """

    @abstractmethod
    def get_token_info(self, mint: str) -> Optional[Dict[str, Any]]:
        """{address, name, symbol, decimals} or None when unknown"""

    @abstractmethod
    def get_token_metadata(self, mint: str) -> Dict[str, Any]:
        """On-chain metadata of a mint"""

    @abstractmethod
    def create_token(
        self,
        owner: str,
        name: str,
        symbol: str,
        decimals: int,
        initial_supply: int,
        description: Optional[str] = None,
        image: Optional[bytes] = None,
        image_content_type: Optional[str] = None,
    ) -> BuildResult:
        """Build mint + metadata + initial mint-to transactions (ext: mint, tokenAccount, metadataUri)"""

    @abstractmethod
    def build_create_market(
        self,
        owner: str,
        base_mint: str,
        base_decimals: int,
        quote_mint: str,
        quote_decimals: int,
        lot_size: float,
        tick_size: float,
        dex_program_id: str,
    ) -> BuildResult:
        """Build OpenBook market creation (ext: marketId)"""

    @abstractmethod
    def build_create_pool(
        self,
        owner: str,
        market_id: str,
        base_mint: str,
        quote_mint: str,
        base_amount: int,
        quote_amount: int,
        program_id: str,
        market_program_id: str,
        fee_destination_id: str,
    ) -> BuildResult:
        """Build AMM v4 pool creation (ext: poolId, lpMint)"""

    @abstractmethod
    def get_pool_info_from_rpc(self, pool_id: str) -> Optional[Dict[str, Any]]:
        """{"poolInfo": {...}, "poolRpcData": {...}} rebuilt from chain, or None"""

    @abstractmethod
    def build_add_liquidity(
        self,
        owner: str,
        pool_id: str,
        amount_a: int,
        amount_b: int,
        other_amount_min: int,
        fixed_side: str,
    ) -> BuildResult:
        """Build add-liquidity"""

    @abstractmethod
    def build_remove_liquidity(
        self,
        owner: str,
        pool_id: str,
        lp_amount: int,
        base_amount_min: int,
        quote_amount_min: int,
    ) -> BuildResult:
        """Build remove-liquidity"""

    @abstractmethod
    def build_swap(
        self,
        owner: str,
        pool_id: str,
        input_mint: str,
        amount_in: int,
        amount_out: int,
        fixed_side: str,
    ) -> BuildResult:
        """Build swap; amount_out is the minimum out (fixed in) or exact out (fixed out)"""

    def close(self):
        """Release resources"""


class HttpAmmSdk(AmmSdk):
    """
    HTTP client for the AMM SDK service

    Usage:
        sdk = HttpAmmSdk("http://127.0.0.1:3100", cluster="devnet")
        built = sdk.build_create_market(owner, base, 9, quote, 9, 0.01, 0.0001, program)
    """

    def __init__(
        self,
        url: Optional[str] = None,
        cluster: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self._url = (url if url is not None else global_config.sdk.url).rstrip("/")
        self._cluster = cluster if cluster is not None else global_config.network.cluster
        self._timeout = timeout if timeout is not None else global_config.sdk.timeout
        self._client: Optional[httpx.Client] = None
        self._client_lock = threading.Lock()

    @property
    def url(self) -> str:
        return self._url

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = httpx.Client(timeout=self._timeout)
        return self._client

    def _post(self, operation: str, payload: Dict[str, Any]) -> Any:
        """
        Call one service operation

        Raises:
            SdkError: transport failure, service-reported failure, or bad JSON
        """
        body = {"cluster": self._cluster, **payload}
        logger.debug(f"AMM SDK {operation} request")
        try:
            response = self._get_client().post(f"{self._url}/{operation}", json=body)
        except httpx.TimeoutException as e:
            raise SdkError(
                f"AMM SDK {operation} timed out after {self._timeout}s",
                ErrorCode.SDK_UNAVAILABLE,
                operation=operation,
                recoverable=True,
                original_error=e,
            )
        except httpx.RequestError as e:
            raise SdkError.unavailable(self._url, e)

        try:
            data = response.json()
        except ValueError:
            if response.status_code >= 400:
                raise SdkError.request_failed(operation, f"HTTP {response.status_code}: {response.text[:200]}")
            raise SdkError.invalid_response(operation, "body is not JSON")

        if not isinstance(data, dict):
            raise SdkError.invalid_response(operation, "body is not an object")

        if response.status_code >= 400 or not data.get("success", False):
            raise SdkError.request_failed(operation, str(data.get("error") or f"HTTP {response.status_code}"))

        return data.get("data")

    def _build(self, operation: str, payload: Dict[str, Any]) -> BuildResult:
        data = self._post(operation, payload)
        if not isinstance(data, dict):
            raise SdkError.invalid_response(operation, "expected an object")
        return BuildResult.from_payload(operation, data)

    def get_token_info(self, mint: str) -> Optional[Dict[str, Any]]:
        return self._post("token/info", {"mint": mint})

    def get_token_metadata(self, mint: str) -> Dict[str, Any]:
        return self._post("token/metadata", {"mint": mint}) or {}

    def create_token(
        self,
        owner: str,
        name: str,
        symbol: str,
        decimals: int,
        initial_supply: int,
        description: Optional[str] = None,
        image: Optional[bytes] = None,
        image_content_type: Optional[str] = None,
    ) -> BuildResult:
        payload = {
            "owner": owner,
            "name": name,
            "symbol": symbol,
            "decimals": decimals,
            "initialSupply": str(initial_supply),
            "description": description or "",
        }
        if image:
            payload["image"] = base64.b64encode(image).decode("ascii")
            payload["imageContentType"] = image_content_type or "application/octet-stream"
        return self._build("token/create", payload)

    def build_create_market(
        self,
        owner: str,
        base_mint: str,
        base_decimals: int,
        quote_mint: str,
        quote_decimals: int,
        lot_size: float,
        tick_size: float,
        dex_program_id: str,
    ) -> BuildResult:
        return self._build("market/create", {
            "owner": owner,
            "baseInfo": {"mint": base_mint, "decimals": base_decimals},
            "quoteInfo": {"mint": quote_mint, "decimals": quote_decimals},
            "lotSize": lot_size,
            "tickSize": tick_size,
            "dexProgramId": dex_program_id,
        })

    def build_create_pool(
        self,
        owner: str,
        market_id: str,
        base_mint: str,
        quote_mint: str,
        base_amount: int,
        quote_amount: int,
        program_id: str,
        market_program_id: str,
        fee_destination_id: str,
    ) -> BuildResult:
        return self._build("pool/create", {
            "owner": owner,
            "marketId": market_id,
            "baseMint": base_mint,
            "quoteMint": quote_mint,
            "baseAmount": str(base_amount),
            "quoteAmount": str(quote_amount),
            "programId": program_id,
            "marketProgramId": market_program_id,
            "feeDestinationId": fee_destination_id,
        })

    def get_pool_info_from_rpc(self, pool_id: str) -> Optional[Dict[str, Any]]:
        return self._post("pool/rpc-info", {"poolId": pool_id})

    def build_add_liquidity(
        self,
        owner: str,
        pool_id: str,
        amount_a: int,
        amount_b: int,
        other_amount_min: int,
        fixed_side: str,
    ) -> BuildResult:
        return self._build("liquidity/add", {
            "owner": owner,
            "poolId": pool_id,
            "amountInA": str(amount_a),
            "amountInB": str(amount_b),
            "otherAmountMin": str(other_amount_min),
            "fixedSide": fixed_side,
        })

    def build_remove_liquidity(
        self,
        owner: str,
        pool_id: str,
        lp_amount: int,
        base_amount_min: int,
        quote_amount_min: int,
    ) -> BuildResult:
        return self._build("liquidity/remove", {
            "owner": owner,
            "poolId": pool_id,
            "lpAmount": str(lp_amount),
            "baseAmountMin": str(base_amount_min),
            "quoteAmountMin": str(quote_amount_min),
        })

    def build_swap(
        self,
        owner: str,
        pool_id: str,
        input_mint: str,
        amount_in: int,
        amount_out: int,
        fixed_side: str,
    ) -> BuildResult:
        return self._build("swap", {
            "owner": owner,
            "poolId": pool_id,
            "inputMint": input_mint,
            "amountIn": str(amount_in),
            "amountOut": str(amount_out),
            "fixedSide": fixed_side,
        })

    def close(self):
        if self._client:
            self._client.close()
            self._client = None
