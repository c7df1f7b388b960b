"""Shared test fixtures."""

import asyncio
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from media_picker.adapters.picker_client import PickerClient
from media_picker.config import Settings
from media_picker.containers import AppContainer
from media_picker.domain.errors import ProviderError
from media_picker.domain.media import MediaDownload
from media_picker.domain.sessions import PickerSession
from media_picker.services.cache import InMemorySessionStore
from media_picker.services.media import MediaBrowser
from media_picker.services.sessions import SessionLifecycleManager


@dataclass
class FakePickerClient(PickerClient):
    """Fake picker service that keeps sessions in memory and records calls."""

    sessions: dict[str, dict[str, object]] = field(default_factory=dict)
    pages: dict[str | None, dict[str, object]] = field(default_factory=dict)
    media: dict[str, tuple[bytes, dict[str, str]]] = field(default_factory=dict)
    calls: list[tuple[object, ...]] = field(default_factory=list)
    fail_with: ProviderError | None = None
    complete_after_gets: int | None = None
    closed_streams: int = 0
    stream_error: Exception | None = None
    _created: int = 0
    _gets: int = 0

    async def create_session(self, auth_token: str) -> dict[str, object]:
        self.calls.append(("create", auth_token))
        if self.fail_with is not None:
            raise self.fail_with
        self._created += 1
        session_id = f"session-{self._created}"
        self.sessions[session_id] = {
            "id": session_id,
            "pickerUri": f"https://photos.google.com/picker/{session_id}",
            "mediaItemsSet": False,
            "expireTime": "2030-01-01T00:00:00.123456789Z",
            "pollingConfig": {"pollInterval": "5s", "timeoutIn": "1800s"},
        }
        return dict(self.sessions[session_id])

    async def get_session(self, auth_token: str, session_id: str) -> dict[str, object]:
        self.calls.append(("get", session_id))
        if self.fail_with is not None:
            raise self.fail_with
        if session_id not in self.sessions:
            raise ProviderError(status_code=404, body="NOT_FOUND")
        self._gets += 1
        if self.complete_after_gets is not None and (
            self._gets >= self.complete_after_gets
        ):
            self.complete(session_id)
        return dict(self.sessions[session_id])

    async def list_media_items(
        self,
        auth_token: str,
        session_id: str,
        page_size: int,
        page_token: str | None = None,
    ) -> dict[str, object]:
        self.calls.append(("list", session_id, page_size, page_token))
        if self.fail_with is not None:
            raise self.fail_with
        return self.pages.get(page_token, {"mediaItems": []})

    async def open_media_stream(self, auth_token: str, url: str) -> MediaDownload:
        self.calls.append(("media", url))
        if self.fail_with is not None:
            raise self.fail_with
        content, headers = self.media.get(url, (b"", {}))

        async def chunks() -> AsyncIterator[bytes]:
            middle = len(content) // 2
            yield content[:middle]
            if self.stream_error is not None:
                raise self.stream_error
            yield content[middle:]

        async def close() -> None:
            self.closed_streams += 1

        return MediaDownload(
            content_type=headers.get("content-type", "application/octet-stream"),
            content_disposition=headers.get("content-disposition", ""),
            byte_stream=chunks(),
            close=close,
        )

    def complete(self, session_id: str) -> None:
        self.sessions[session_id]["mediaItemsSet"] = True

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)


@dataclass
class FakeClock:
    """Controllable wall clock for TTL checks."""

    current: datetime = field(
        default_factory=lambda: datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@dataclass
class FakeTime:
    """Monotonic clock whose sleep fast-forwards instead of waiting."""

    now: float = 0.0
    sleeps: list[float] = field(default_factory=list)

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


def make_session(
    session_id: str = "session-1",
    media_items_set: bool = False,
    owner_key: str = "u1",
) -> PickerSession:
    return PickerSession(
        id=session_id,
        picker_uri=f"https://photos.google.com/picker/{session_id}",
        media_items_set=media_items_set,
        owner_key=owner_key,
        created_at=datetime(2025, 1, 1, 12, 0, tzinfo=UTC),
    )


def media_item_payload(item_id: str, item_type: str = "PHOTO") -> dict[str, object]:
    extension = "mp4" if item_type == "VIDEO" else "jpg"
    return {
        "id": item_id,
        "type": item_type,
        "createTime": "2024-06-01T10:00:00Z",
        "mediaFile": {
            "baseUrl": f"https://lh3.googleusercontent.com/{item_id}",
            "mimeType": "video/mp4" if item_type == "VIDEO" else "image/jpeg",
            "filename": f"{item_id}.{extension}",
            "mediaFileMetadata": {"width": 640, "height": 480},
        },
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(
        picker_base_url="https://picker.test/v1",
        poll_interval_seconds=0.01,
        poll_max_wait_seconds=1,
        session_store_backend="memory",
    )


@pytest.fixture
def picker_client() -> FakePickerClient:
    return FakePickerClient()


@pytest.fixture
def container(settings: Settings, picker_client: FakePickerClient) -> AppContainer:
    store = InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)
    session_manager = SessionLifecycleManager(picker_client=picker_client, store=store)
    media_browser = MediaBrowser(
        picker_client=picker_client,
        default_page_size=settings.media_page_size,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        picker_client=picker_client,
        session_store=store,
        session_manager=session_manager,
        media_browser=media_browser,
        close_resources=close_resources,
    )
