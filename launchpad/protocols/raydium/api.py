"""
Raydium hosted API client (api-v3)

Pool index lookups; authoritative on mainnet only.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

import httpx

from ...types import PoolSnapshot
from ...config import config as global_config
from ...errors import RpcError

logger = logging.getLogger(__name__)


class RaydiumApi:
    """
    Raydium REST API client

    Usage:
        api = RaydiumApi()
        snapshot = api.fetch_pool_by_id("58oQChx4yWmvKdwLLZzBi4ChoCc2fqCUWBkwMihLYQo2")
        pools = api.fetch_pools_by_mint("So11111111111111111111111111111111111111112")
    """

    def __init__(self, base_url: str = None, timeout: float = None):
        self._base_url = (base_url if base_url is not None else global_config.sdk.api_url).rstrip("/")
        self._timeout = timeout if timeout is not None else global_config.sdk.api_timeout
        self._client: Optional[httpx.Client] = None
        self._client_lock = threading.Lock()

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            with self._client_lock:
                if self._client is None:
                    self._client = httpx.Client(timeout=self._timeout)
        return self._client

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = self._get_client().get(url, params=params)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException:
            raise RpcError.timeout(url, self._timeout)
        except httpx.HTTPStatusError as e:
            raise RpcError(f"Raydium API HTTP error {e.response.status_code}", endpoint=url)
        except httpx.RequestError as e:
            raise RpcError.connection_failed(url, e)
        except ValueError as e:
            raise RpcError(f"Raydium API returned invalid JSON: {e}", endpoint=url)

        if not isinstance(body, dict) or body.get("success") is False:
            raise RpcError(f"Raydium API request failed: {path}", endpoint=url)
        return body.get("data")

    def fetch_pool_by_id(self, pool_id: str) -> Optional[PoolSnapshot]:
        """Pool by id, or None when the index does not know it"""
        data = self._get("/pools/info/ids", {"ids": pool_id})
        items = [item for item in (data or []) if item]
        if not items:
            return None
        try:
            return PoolSnapshot.from_api(items[0])
        except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError) as e:
            raise RpcError.invalid_response(f"{self._base_url}/pools/info/ids", f"unparseable pool item ({e})")

    def fetch_pools_by_mint(self, mint: str, page_size: int = 100) -> List[PoolSnapshot]:
        """All pools (any type) with mint on either side, first page"""
        data = self._get("/pools/info/mint", {
            "mint1": mint,
            "poolType": "all",
            "poolSortField": "default",
            "sortType": "desc",
            "pageSize": page_size,
            "page": 1,
        })
        items = (data or {}).get("data") or []
        pools = []
        for item in items:
            try:
                pools.append(PoolSnapshot.from_api(item))
            except (AttributeError, KeyError, TypeError, ValueError, ArithmeticError) as e:
                logger.warning(f"Skipping unparseable API pool item: {e}")
        return pools

    def close(self):
        if self._client:
            self._client.close()
            self._client = None
