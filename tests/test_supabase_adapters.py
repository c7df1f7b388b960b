"""Tests for the Supabase session store."""

from dataclasses import dataclass, field

from media_picker.adapters.supabase_session_store import SupabaseSessionStore
from tests.conftest import FakeClock, make_session


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "upsert": [], "delete": []}
    )
    last_payload: object | None = None
    last_on_conflict: str | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    executed: list[str] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def upsert(  # type: ignore[no-untyped-def]
        self, payload, on_conflict: str = ""
    ) -> "FakeTable":
        self._action = "upsert"
        self.last_payload = payload
        self.last_on_conflict = on_conflict
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        self.executed.append(action)
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_set_upserts_serialized_session_with_expiry() -> None:
    client = FakeSupabaseClient()
    clock = FakeClock()
    store = SupabaseSessionStore(client, ttl_seconds=60, clock=clock)

    store.set("u1", make_session("session-1"))

    table = client.table("picker_sessions")
    assert table.last_on_conflict == "owner_key"
    assert isinstance(table.last_payload, dict)
    assert table.last_payload["owner_key"] == "u1"
    assert table.last_payload["session_json"]["id"] == "session-1"
    assert table.last_payload["expires_at"] == "2025-01-01T12:01:00+00:00"


def test_get_returns_live_session() -> None:
    client = FakeSupabaseClient()
    clock = FakeClock()
    store = SupabaseSessionStore(client, clock=clock)
    table = client.table("picker_sessions")
    table.queue(
        "select",
        [
            {
                "owner_key": "u1",
                "session_json": make_session("session-1").to_payload(),
                "expires_at": "2025-01-01T12:29:00+00:00",
            }
        ],
    )

    session = store.get("u1")

    assert session == make_session("session-1")
    assert ("owner_key", "u1") in table.last_filters


def test_get_evicts_expired_row() -> None:
    client = FakeSupabaseClient()
    clock = FakeClock()
    store = SupabaseSessionStore(client, clock=clock)
    table = client.table("picker_sessions")
    table.queue(
        "select",
        [
            {
                "owner_key": "u1",
                "session_json": make_session("session-1").to_payload(),
                "expires_at": "2025-01-01T11:59:59+00:00",
            }
        ],
    )

    assert store.get("u1") is None
    assert table.executed == ["select", "delete"]


def test_get_missing_row_returns_none() -> None:
    store = SupabaseSessionStore(FakeSupabaseClient())

    assert store.get("u1") is None
