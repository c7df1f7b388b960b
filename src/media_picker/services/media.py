"""Browsing and downloading media from a completed picker session."""

import logging
from dataclasses import dataclass

from media_picker.adapters.picker_client import PickerClient
from media_picker.domain.errors import UnauthenticatedError
from media_picker.domain.media import (
    MediaDownload,
    MediaItem,
    MediaPage,
    MediaType,
    MediaVariant,
)

MIN_PAGE_SIZE = 25
MAX_PAGE_SIZE = 50

_DEFAULT_DISPOSITIONS = {
    MediaVariant.VIDEO: 'attachment; filename="video.mp4"',
}
_PHOTO_DISPOSITION = 'attachment; filename="photo.jpg"'

_logger = logging.getLogger(__name__)


@dataclass
class MediaBrowser:
    """Pages through picked items and relays their bytes."""

    picker_client: PickerClient
    default_page_size: int = MIN_PAGE_SIZE

    async def list_page(
        self,
        session_id: str,
        auth_token: str,
        page_token: str | None = None,
        page_size: int | None = None,
    ) -> MediaPage:
        """Return one page of picked items, forwarding the cursor untouched."""
        if not auth_token:
            raise UnauthenticatedError()
        size = clamp_page_size(page_size or self.default_page_size)
        payload = await self.picker_client.list_media_items(
            auth_token, session_id, page_size=size, page_token=page_token
        )
        raw_items = payload.get("mediaItems") or []
        items = [
            MediaItem.from_provider(raw) for raw in raw_items if isinstance(raw, dict)
        ]
        next_token = payload.get("nextPageToken") or None
        _logger.info(
            "Listed %s media items for session %s (more=%s)",
            len(items),
            session_id,
            next_token is not None,
        )
        return MediaPage(items=items, next_page_token=next_token)

    async def fetch_media_bytes(
        self,
        item: MediaItem | str,
        auth_token: str,
        variant: MediaVariant = MediaVariant.ORIGINAL,
    ) -> MediaDownload:
        """Open a streamed, authorized download of an item's capability URL."""
        if not auth_token:
            raise UnauthenticatedError()
        base_url = item.base_url if isinstance(item, MediaItem) else item
        if not base_url:
            raise ValueError("baseUrl required")
        if isinstance(item, MediaItem) and item.type is MediaType.VIDEO:
            if variant is MediaVariant.DOWNLOAD:
                variant = MediaVariant.VIDEO
        download = await self.picker_client.open_media_stream(
            auth_token, f"{base_url}{variant.suffix}"
        )
        if not download.content_disposition:
            download.content_disposition = _DEFAULT_DISPOSITIONS.get(
                variant, _PHOTO_DISPOSITION
            )
        return download


def clamp_page_size(page_size: int) -> int:
    """Keep page sizes within the range the UI requests."""
    return max(MIN_PAGE_SIZE, min(MAX_PAGE_SIZE, page_size))
