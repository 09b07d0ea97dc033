"""
Pool registry storage

PoolStore is the storage interface; PoolRegistry layers PoolRecord parsing,
lookup and the append rules on top of it. Mutations go through
store.transaction(), which serialises read-modify-write sequences.
"""

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

from ..types import PoolRecord

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


class PoolStore(ABC):
    """Persistent list of serialized pool rows"""

    @abstractmethod
    def load(self) -> List[Row]:
        """
        Stored rows

        Raises:
            OSError / ValueError: store unreadable or malformed
        """

    @abstractmethod
    def save(self, rows: List[Row]):
        """Replace all rows"""

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Hold exclusive access for a read-modify-write sequence"""


class MemoryPoolStore(PoolStore):
    """In-process store, used in tests and for ephemeral deployments"""

    def __init__(self, rows: Optional[List[Row]] = None):
        self._rows: List[Row] = [dict(r) for r in rows or []]
        self._lock = threading.RLock()

    def load(self) -> List[Row]:
        with self._lock:
            return [dict(r) for r in self._rows]

    def save(self, rows: List[Row]):
        with self._lock:
            self._rows = [dict(r) for r in rows]

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            yield


class JsonFilePoolStore(PoolStore):
    """
    One JSON array on disk

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so readers never see a partial file. Locking is
    per process; a single backend process owns the file.
    """

    _locks: Dict[str, threading.RLock] = {}
    _locks_guard = threading.Lock()

    def __init__(self, path: str):
        self._path = Path(path)
        key = str(self._path.resolve())
        with JsonFilePoolStore._locks_guard:
            self._lock = JsonFilePoolStore._locks.setdefault(key, threading.RLock())

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> List[Row]:
        if not self._path.exists():
            return []
        with self._lock:
            content = self._path.read_text(encoding="utf-8")
        if not content.strip():
            return []
        data = json.loads(content)
        if not isinstance(data, list):
            raise ValueError(f"{self._path} does not hold a JSON array")
        return data

    def save(self, rows: List[Row]):
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=str(self._path.parent)
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(rows, f, indent=2)
                os.replace(tmp_path, self._path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            yield


class PoolRegistry:
    """
    Durable list of PoolRecord

    Reads never raise: an absent, unreadable or malformed store reads as
    empty, and individual malformed rows are skipped.

    Usage:
        registry = PoolRegistry(JsonFilePoolStore("data/pools.json"))
        registry.append(record)
        mine = registry.filter(lambda p: p.owner == wallet)
    """

    def __init__(self, store: PoolStore):
        self._store = store

    @property
    def store(self) -> PoolStore:
        return self._store

    def _load_rows(self) -> List[Row]:
        try:
            return self._store.load()
        except (OSError, ValueError) as e:
            logger.error(f"Error reading pools data: {e}")
            return []

    @staticmethod
    def _parse(rows: List[Row]) -> List[PoolRecord]:
        records = []
        for row in rows:
            try:
                records.append(PoolRecord.from_dict(row))
            except (KeyError, TypeError, ValueError, ArithmeticError) as e:
                logger.warning(f"Skipping malformed pool row: {e}")
        return records

    def read_all(self) -> List[PoolRecord]:
        return self._parse(self._load_rows())

    def write_all(self, records: List[PoolRecord]) -> bool:
        """Overwrite the store; on failure log and keep prior content"""
        try:
            self._store.save([r.to_dict() for r in records])
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Error writing pools data: {e}")
            return False

    def append(self, record: PoolRecord) -> PoolRecord:
        """
        Add a record

        - an existing poolId is kept; the stored record is returned
        - a real record drops placeholders for the same baseMint
        """
        with self._store.transaction():
            records = self.read_all()

            for existing in records:
                if existing.pool_id == record.pool_id:
                    logger.warning(f"Pool {record.pool_id} already registered, keeping existing entry")
                    return existing

            if not record.is_placeholder:
                superseded = [r for r in records if r.is_placeholder_for(record.base_mint)]
                if superseded:
                    logger.info(
                        f"Replacing {len(superseded)} placeholder(s) for {record.base_mint} with pool {record.pool_id}"
                    )
                    records = [r for r in records if not r.is_placeholder_for(record.base_mint)]

            records.append(record)
            self.write_all(records)
            return record

    def append_placeholder(self, record: PoolRecord) -> PoolRecord:
        """
        Add a placeholder unless the mint already has one

        Returns the existing placeholder in that case.
        """
        with self._store.transaction():
            existing = self.find_placeholder(record.base_mint)
            if existing is not None:
                return existing
            return self.append(record)

    def find(self, predicate: Callable[[PoolRecord], bool]) -> Optional[PoolRecord]:
        for record in self.read_all():
            if predicate(record):
                return record
        return None

    def filter(self, predicate: Callable[[PoolRecord], bool]) -> List[PoolRecord]:
        return [r for r in self.read_all() if predicate(r)]

    def find_by_pool_id(self, pool_id: str) -> Optional[PoolRecord]:
        return self.find(lambda r: r.pool_id == pool_id)

    def find_placeholder(self, base_mint: str) -> Optional[PoolRecord]:
        return self.find(lambda r: r.is_placeholder_for(base_mint))

    def by_owner(self, owner: str) -> List[PoolRecord]:
        return self.filter(lambda r: r.owner == owner)

    def by_mint(self, mint: str) -> List[PoolRecord]:
        return self.filter(lambda r: r.references_mint(mint))
