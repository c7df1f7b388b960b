"""Supabase-backed picker session store."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from supabase import Client

from media_picker.domain.sessions import PickerSession, parse_timestamp
from media_picker.services.cache import (
    DEFAULT_SESSION_TTL_SECONDS,
    SessionStore,
    utc_now,
)


@dataclass
class SupabaseSessionStore(SessionStore):
    """Persists the latest picker session per owner in a Supabase table."""

    client: Client
    table: str = "picker_sessions"
    ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS
    clock: Callable[[], datetime] = utc_now

    def get(self, key: str) -> PickerSession | None:
        """Return the stored session unless its row has expired."""
        response = (
            self.client.table(self.table)
            .select("owner_key, session_json, expires_at")
            .eq("owner_key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        expires_at = parse_timestamp(row.get("expires_at"))
        if expires_at is None or self.clock() >= expires_at:
            self.remove(key)
            return None
        return PickerSession.from_payload(row["session_json"])

    def set(self, key: str, value: PickerSession) -> None:
        """Upsert the session row with a fresh expiry."""
        expires_at = self.clock() + timedelta(seconds=self.ttl_seconds)
        self.client.table(self.table).upsert(
            {
                "owner_key": key,
                "session_json": value.to_payload(),
                "expires_at": expires_at.isoformat(),
            },
            on_conflict="owner_key",
        ).execute()

    def remove(self, key: str) -> None:
        self.client.table(self.table).delete().eq("owner_key", key).execute()
