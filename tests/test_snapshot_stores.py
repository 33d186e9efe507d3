"""Tests for ledger snapshot stores."""

import asyncio
import json
import threading
from dataclasses import dataclass, field
from pathlib import Path

from protein_ledger.adapters.json_file_snapshot_store import JsonFileSnapshotStore
from protein_ledger.adapters.supabase_snapshot_store import SupabaseSnapshotStore


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    rows: list[dict[str, object]] = field(default_factory=list)
    last_payload: object | None = None
    last_on_conflict: str | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    error: Exception | None = None
    execute_threads: list[int] = field(default_factory=list)

    def select(self, *_args) -> "FakeTable":
        return self

    def upsert(self, payload, on_conflict: str = "") -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_payload = payload
        self.last_on_conflict = on_conflict
        self.rows = [payload]
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        self.execute_threads.append(threading.get_ident())
        if self.error is not None:
            raise self.error
        return FakeResponse(self.rows)


@dataclass
class FakeClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_json_file_store_missing_file_loads_none(tmp_path: Path) -> None:
    store = JsonFileSnapshotStore(path=tmp_path / "ledger.json")

    assert asyncio.run(store.load()) is None


def test_json_file_store_round_trip(tmp_path: Path) -> None:
    store = JsonFileSnapshotStore(path=tmp_path / "nested" / "ledger.json")
    payload = json.dumps({"targetProtein": 150, "meals": []})

    assert asyncio.run(store.save(payload)) is True
    assert asyncio.run(store.load()) == payload
    assert not (tmp_path / "nested" / "ledger.json.tmp").exists()


def test_json_file_store_name_derived_from_key(tmp_path: Path) -> None:
    store = JsonFileSnapshotStore.for_key(tmp_path, "@protein_tracker_data")

    assert store.path == tmp_path / "protein_tracker_data.json"


def test_json_file_store_write_failure_returns_false(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    store = JsonFileSnapshotStore(path=blocker / "ledger.json")

    assert asyncio.run(store.save("{}")) is False


def test_supabase_store_load_and_save() -> None:
    client = FakeClient()
    store = SupabaseSnapshotStore(client=client, key="@protein_tracker_data")  # type: ignore[arg-type]

    assert asyncio.run(store.load()) is None
    assert asyncio.run(store.save('{"meals": []}')) is True

    table = client.tables["ledger_snapshots"]
    assert table.last_on_conflict == "key"
    assert isinstance(table.last_payload, dict)
    assert table.last_payload["key"] == "@protein_tracker_data"
    assert asyncio.run(store.load()) == '{"meals": []}'
    assert ("key", "@protein_tracker_data") in table.last_filters


def test_supabase_store_serializes_json_column() -> None:
    client = FakeClient()
    client.table("ledger_snapshots").rows = [
        {"key": "k", "payload": {"targetProtein": 120}}
    ]
    store = SupabaseSnapshotStore(client=client, key="k")  # type: ignore[arg-type]

    loaded = asyncio.run(store.load())

    assert loaded is not None
    assert json.loads(loaded) == {"targetProtein": 120}


def test_supabase_store_failures_are_reported() -> None:
    client = FakeClient()
    client.table("ledger_snapshots").error = RuntimeError("offline")
    store = SupabaseSnapshotStore(client=client, key="k")  # type: ignore[arg-type]

    assert asyncio.run(store.load()) is None
    assert asyncio.run(store.save("{}")) is False


def test_supabase_store_queries_off_the_event_loop_thread() -> None:
    client = FakeClient()
    store = SupabaseSnapshotStore(client=client, key="k")  # type: ignore[arg-type]

    asyncio.run(store.save("{}"))
    asyncio.run(store.load())

    threads = client.tables["ledger_snapshots"].execute_threads
    assert len(threads) == 2
    assert threading.get_ident() not in threads
