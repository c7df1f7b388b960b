"""Domain models for picked media items."""

from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum


class MediaType(str, Enum):
    """Kind of media item reported by the provider."""

    PHOTO = "PHOTO"
    VIDEO = "VIDEO"
    TYPE_UNSPECIFIED = "TYPE_UNSPECIFIED"

    @classmethod
    def parse(cls, raw: object) -> "MediaType":
        try:
            return cls(str(raw))
        except ValueError:
            return cls.TYPE_UNSPECIFIED


class MediaVariant(str, Enum):
    """Named ``baseUrl`` suffixes understood by the provider."""

    ORIGINAL = "original"
    THUMBNAIL = "thumbnail"
    DOWNLOAD = "download"
    VIDEO = "video"

    @property
    def suffix(self) -> str:
        return _VARIANT_SUFFIXES[self]


_VARIANT_SUFFIXES = {
    MediaVariant.ORIGINAL: "",
    MediaVariant.THUMBNAIL: "=w128-h128",
    MediaVariant.DOWNLOAD: "=d",
    MediaVariant.VIDEO: "=dv",
}


@dataclass(frozen=True)
class MediaItem:
    """A media item selected in a completed picker session."""

    id: str
    filename: str
    mime_type: str
    base_url: str
    type: MediaType
    create_time: str | None = None
    metadata: dict[str, object] = field(default_factory=dict)

    @classmethod
    def from_provider(cls, payload: dict[str, object]) -> "MediaItem":
        """Build an item from the provider's ``mediaItems`` entry."""
        media_file = payload.get("mediaFile")
        if not isinstance(media_file, dict):
            media_file = {}
        metadata = media_file.get("mediaFileMetadata")
        return cls(
            id=str(payload.get("id", "")),
            filename=str(media_file.get("filename", "")),
            mime_type=str(media_file.get("mimeType", "")),
            base_url=str(media_file.get("baseUrl", "")),
            type=MediaType.parse(payload.get("type")),
            create_time=payload.get("createTime"),
            metadata=metadata if isinstance(metadata, dict) else {},
        )

    def to_payload(self) -> dict[str, object]:
        return {
            "id": self.id,
            "type": self.type.value,
            "createTime": self.create_time,
            "mediaFile": {
                "baseUrl": self.base_url,
                "mimeType": self.mime_type,
                "filename": self.filename,
                "mediaFileMetadata": self.metadata,
            },
        }


@dataclass(frozen=True)
class MediaPage:
    """One page of media items plus the provider's opaque cursor."""

    items: list[MediaItem]
    next_page_token: str | None = None

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "mediaItems": [item.to_payload() for item in self.items]
        }
        if self.next_page_token:
            payload["nextPageToken"] = self.next_page_token
        return payload


@dataclass
class MediaDownload:
    """Streamed media bytes with the headers needed to relay them."""

    content_type: str
    content_disposition: str
    byte_stream: AsyncIterator[bytes]
    close: Callable[[], Awaitable[None]]
    closed: bool = field(default=False, init=False)

    async def relay(self) -> AsyncIterator[bytes]:
        """Yield the bytes and release the upstream connection however it ends."""
        try:
            async for chunk in self.byte_stream:
                yield chunk
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        """Release the upstream connection; later calls do nothing."""
        if self.closed:
            return
        self.closed = True
        await self.close()
