"""
Pool Registry Unit Tests

Covers the JSON file store and the append / placeholder rules.
"""

import json
import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from launchpad.registry import PoolRegistry, MemoryPoolStore, JsonFilePoolStore
from launchpad.types import PoolRecord, TokenInfo, NATIVE_MINT, PLACEHOLDER_PREFIX

from conftest import new_address


def _real_record(base_mint: str, pool_id: str = None, owner: str = "owner1") -> PoolRecord:
    return PoolRecord(
        pool_id=pool_id or new_address(),
        base_mint=base_mint,
        market_id=new_address(),
        tx_id="sig",
        base_symbol="TST",
        base_decimals=9,
        base_amount=Decimal(100_000_000),
        quote_mint=NATIVE_MINT,
        quote_symbol="SOL",
        quote_decimals=9,
        quote_amount=Decimal(1),
        owner=owner,
    )


def _placeholder(base_mint: str, owner: str = "owner1") -> PoolRecord:
    return PoolRecord.placeholder(TokenInfo(mint=base_mint, name="Test", symbol="TST"), owner)


@pytest.fixture
def pools_file(tmp_path):
    return tmp_path / "data" / "pools.json"


@pytest.fixture
def file_registry(pools_file):
    return PoolRegistry(JsonFilePoolStore(str(pools_file)))


class TestJsonFileStore:
    """Reading and writing the pools file"""

    def test_missing_file_reads_empty(self, file_registry):
        assert file_registry.read_all() == []

    def test_empty_file_reads_empty(self, pools_file, file_registry):
        pools_file.parent.mkdir(parents=True)
        pools_file.write_text("")
        assert file_registry.read_all() == []

    def test_malformed_file_reads_empty(self, pools_file, file_registry):
        pools_file.parent.mkdir(parents=True)
        pools_file.write_text("{not json")
        assert file_registry.read_all() == []

    def test_non_array_reads_empty(self, pools_file, file_registry):
        pools_file.parent.mkdir(parents=True)
        pools_file.write_text(json.dumps({"poolId": "x"}))
        assert file_registry.read_all() == []

    def test_malformed_rows_are_skipped(self, pools_file, file_registry):
        good = _real_record(new_address()).to_dict()
        pools_file.parent.mkdir(parents=True)
        pools_file.write_text(json.dumps([{"baseMint": "no-pool-id"}, good, {"poolId": "no-base-mint"}]))

        records = file_registry.read_all()
        assert [r.pool_id for r in records] == [good["poolId"]]

    def test_append_persists_camel_case_rows(self, pools_file, file_registry):
        record = _real_record(new_address())
        file_registry.append(record)

        rows = json.loads(pools_file.read_text())
        assert len(rows) == 1
        assert rows[0]["poolId"] == record.pool_id
        assert rows[0]["baseAmount"] == 100000000
        assert rows[0]["initialPrice"] == pytest.approx(1e-8)
        assert rows[0]["isPlaceholder"] is False

    def test_write_leaves_no_temporary_files(self, pools_file, file_registry):
        file_registry.append(_real_record(new_address()))
        file_registry.append(_real_record(new_address()))
        assert [p.name for p in pools_file.parent.iterdir()] == ["pools.json"]

    def test_unknown_keys_survive_rewrite(self, pools_file, file_registry):
        row = _real_record(new_address()).to_dict()
        row["campaign"] = "spring"
        pools_file.parent.mkdir(parents=True)
        pools_file.write_text(json.dumps([row]))

        file_registry.append(_real_record(new_address()))

        rows = json.loads(pools_file.read_text())
        assert rows[0]["campaign"] == "spring"

    def test_rewrite_preserves_content_and_order(self, pools_file, file_registry):
        for _ in range(3):
            file_registry.append(_real_record(new_address()))
        before = json.loads(pools_file.read_text(encoding="utf-8"))

        assert file_registry.write_all(file_registry.read_all()) is True

        assert json.loads(pools_file.read_text(encoding="utf-8")) == before

    def test_two_stores_on_one_path_share_state(self, pools_file):
        first = PoolRegistry(JsonFilePoolStore(str(pools_file)))
        second = PoolRegistry(JsonFilePoolStore(str(pools_file)))
        record = _real_record(new_address())
        first.append(record)
        assert second.find_by_pool_id(record.pool_id) is not None


class TestAppendRules:
    """Duplicate ids and placeholder replacement"""

    def test_duplicate_pool_id_keeps_existing(self, registry):
        mint = new_address()
        original = _real_record(mint, owner="first")
        registry.append(original)

        duplicate = _real_record(mint, pool_id=original.pool_id, owner="second")
        stored = registry.append(duplicate)

        assert stored.owner == "first"
        assert len(registry.read_all()) == 1

    def test_real_pool_replaces_placeholder(self, registry):
        mint = new_address()
        registry.append_placeholder(_placeholder(mint))
        other = registry.append_placeholder(_placeholder(new_address()))

        real = registry.append(_real_record(mint))

        pool_ids = [r.pool_id for r in registry.read_all()]
        assert pool_ids == [other.pool_id, real.pool_id]
        assert registry.find_placeholder(mint) is None

    def test_legacy_placeholder_without_flag_is_replaced(self):
        mint = new_address()
        legacy = {"poolId": f"{PLACEHOLDER_PREFIX}{mint}", "baseMint": mint}
        registry = PoolRegistry(MemoryPoolStore([legacy]))

        assert registry.read_all()[0].is_placeholder is True
        registry.append(_real_record(mint))
        assert all(not r.is_placeholder for r in registry.read_all())

    def test_placeholder_does_not_replace_real_pool(self, registry):
        mint = new_address()
        real = registry.append(_real_record(mint))
        registry.append_placeholder(_placeholder(mint))

        records = registry.read_all()
        assert real.pool_id in [r.pool_id for r in records]

    def test_placeholder_is_idempotent(self, registry):
        mint = new_address()
        first = registry.append_placeholder(_placeholder(mint, owner="a"))
        second = registry.append_placeholder(_placeholder(mint, owner="b"))

        assert second.pool_id == first.pool_id
        assert second.owner == "a"
        assert len(registry.read_all()) == 1


class TestQueries:

    def test_by_owner_and_by_mint(self, registry):
        mint = new_address()
        registry.append(_real_record(mint, owner="alice"))
        registry.append(_real_record(new_address(), owner="bob"))

        assert len(registry.by_owner("alice")) == 1
        assert len(registry.by_owner("carol")) == 0
        assert len(registry.by_mint(mint)) == 1
        # Every record is quoted in SOL
        assert len(registry.by_mint(NATIVE_MINT)) == 2

    def test_write_all_overwrites(self, registry):
        registry.append(_real_record(new_address()))
        keep = _real_record(new_address())
        assert registry.write_all([keep]) is True
        assert [r.pool_id for r in registry.read_all()] == [keep.pool_id]
