"""
Local pool registry
"""

from .store import PoolStore, MemoryPoolStore, JsonFilePoolStore, PoolRegistry

__all__ = [
    "PoolStore",
    "MemoryPoolStore",
    "JsonFilePoolStore",
    "PoolRegistry",
]
