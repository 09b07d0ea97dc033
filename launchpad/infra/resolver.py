"""
Ordered resolver pipeline

Read paths look a value up in several places (hosted API, chain via the SDK
service, local registry). A FallbackChain tries its steps in order; a step
answers with a value, or with None / a LaunchpadError meaning "try next".
"""

import logging
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Tuple, TypeVar

from ..errors import LaunchpadError
from .retry import error_message, get_correlation_id

logger = logging.getLogger(__name__)

V = TypeVar("V")


def _always() -> bool:
    return True


@dataclass
class ResolverStep(Generic[V]):
    """
    One lookup strategy

    Attributes:
        name: Source label reported with the result ("api", "rpc", "registry")
        resolve: Lookup callable; None means not found here
        enabled: Evaluated per call; disabled steps are skipped
    """
    name: str
    resolve: Callable[..., Optional[V]]
    enabled: Callable[[], bool] = _always


class FallbackChain(Generic[V]):
    """
    First non-None answer wins

    Usage:
        chain = FallbackChain("pool_info", [
            ResolverStep("api", api.fetch_pool, enabled=lambda: is_mainnet),
            ResolverStep("rpc", sdk.pool_from_rpc),
            ResolverStep("registry", registry.find_by_pool_id),
        ])
        value, source = chain.resolve_with_source(pool_id)
    """

    def __init__(self, name: str, steps: List[ResolverStep[V]]):
        self.name = name
        self.steps = list(steps)

    def __repr__(self) -> str:
        return f"FallbackChain({self.name}, {[s.name for s in self.steps]})"

    def resolve_with_source(self, *args, **kwargs) -> Tuple[Optional[V], Optional[str]]:
        """Returns (value, step name) or (None, None) when every step misses"""
        cid = get_correlation_id()
        prefix = f"[{cid}] " if cid else ""

        for step in self.steps:
            if not step.enabled():
                continue
            try:
                value = step.resolve(*args, **kwargs)
            except LaunchpadError as e:
                logger.warning(f"{prefix}[{self.name}] {step.name} lookup failed, trying next: {error_message(e)}")
                continue
            if value is not None:
                logger.debug(f"{prefix}[{self.name}] resolved by {step.name}")
                return value, step.name
            logger.debug(f"{prefix}[{self.name}] {step.name} had no result")

        return None, None

    def resolve(self, *args, **kwargs) -> Optional[V]:
        value, _ = self.resolve_with_source(*args, **kwargs)
        return value
