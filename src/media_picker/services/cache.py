"""Per-user picker session store with a fixed TTL."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol

from media_picker.domain.sessions import PickerSession

DEFAULT_SESSION_TTL_SECONDS = 1740


class SessionStore(Protocol):
    """Storage interface for the latest picker session of each owner."""

    def get(self, key: str) -> PickerSession | None:
        """Return the stored session if present and not expired."""

    def set(self, key: str, value: PickerSession) -> None:
        """Store a session, replacing any previous entry for the key."""

    def remove(self, key: str) -> None:
        """Drop the entry for a key, if any."""


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class _CacheEntry:
    value: PickerSession
    expires_at: datetime


@dataclass
class InMemorySessionStore(SessionStore):
    """In-memory store with passive eviction on read."""

    ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS
    clock: Callable[[], datetime] = utc_now
    _entries: dict[str, _CacheEntry] = field(default_factory=dict, repr=False)

    def get(self, key: str) -> PickerSession | None:
        """Return a stored session if its TTL hasn't elapsed."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry.value

    def set(self, key: str, value: PickerSession) -> None:
        """Store a session with a fresh TTL."""
        expires_at = self.clock() + timedelta(seconds=self.ttl_seconds)
        self._entries[key] = _CacheEntry(value=value, expires_at=expires_at)

    def remove(self, key: str) -> None:
        self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)
