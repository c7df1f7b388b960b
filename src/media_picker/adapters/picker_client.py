"""Google Photos Picker API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from media_picker.domain.errors import ProviderError
from media_picker.domain.media import MediaDownload

DEFAULT_PICKER_BASE_URL = "https://photospicker.googleapis.com/v1"


class PickerClient(Protocol):
    """Interface for the remote picker service."""

    async def create_session(self, auth_token: str) -> dict[str, object]:
        """Create a picking session and return the raw provider payload."""

    async def get_session(self, auth_token: str, session_id: str) -> dict[str, object]:
        """Fetch a picking session by id."""

    async def list_media_items(
        self,
        auth_token: str,
        session_id: str,
        page_size: int,
        page_token: str | None = None,
    ) -> dict[str, object]:
        """List the media items picked in a session."""

    async def open_media_stream(self, auth_token: str, url: str) -> MediaDownload:
        """Start an authorized download of a media capability URL."""


@dataclass
class HttpxPickerClient(PickerClient):
    """HTTPX-backed picker client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15

    @classmethod
    def create(
        cls, base_url: str = DEFAULT_PICKER_BASE_URL, timeout: float = 15
    ) -> "HttpxPickerClient":
        """Create a picker client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def create_session(self, auth_token: str) -> dict[str, object]:
        """Create a session via ``POST /sessions``."""
        return await self._request_json(
            "POST", "/sessions", auth_token, require_id=True, json={}
        )

    async def get_session(self, auth_token: str, session_id: str) -> dict[str, object]:
        """Fetch a session via ``GET /sessions/{id}``."""
        return await self._request_json(
            "GET", f"/sessions/{session_id}", auth_token, require_id=True
        )

    async def list_media_items(
        self,
        auth_token: str,
        session_id: str,
        page_size: int,
        page_token: str | None = None,
    ) -> dict[str, object]:
        """List picked items via ``GET /mediaItems``."""
        params: dict[str, object] = {"sessionId": session_id, "pageSize": page_size}
        if page_token:
            params["pageToken"] = page_token
        return await self._request_json(
            "GET", "/mediaItems", auth_token, params=params
        )

    async def open_media_stream(self, auth_token: str, url: str) -> MediaDownload:
        """Open a streamed GET of a capability URL without buffering the body."""
        request = self.http_client.build_request(
            "GET", url, headers=_auth_headers(auth_token), timeout=self.timeout
        )
        try:
            response = await self.http_client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise ProviderError(status_code=0, body=str(exc)) from exc
        if response.is_error:
            await response.aread()
            await response.aclose()
            raise ProviderError(status_code=response.status_code, body=response.text)
        return MediaDownload(
            content_type=response.headers.get(
                "content-type", "application/octet-stream"
            ),
            content_disposition=response.headers.get("content-disposition", ""),
            byte_stream=response.aiter_bytes(),
            close=response.aclose,
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request_json(
        self,
        method: str,
        path: str,
        auth_token: str,
        require_id: bool = False,
        **kwargs: object,
    ) -> dict[str, object]:
        try:
            response = await self.http_client.request(
                method,
                f"{self.base_url}{path}",
                headers=_auth_headers(auth_token),
                timeout=self.timeout,
                **kwargs,
            )
        except httpx.HTTPError as exc:
            raise ProviderError(status_code=0, body=str(exc)) from exc
        if response.is_error:
            raise ProviderError(status_code=response.status_code, body=response.text)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(
                status_code=response.status_code, body=response.text
            ) from exc
        if not isinstance(payload, dict) or (require_id and not payload.get("id")):
            raise ProviderError(status_code=response.status_code, body=response.text)
        return payload


def _auth_headers(auth_token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {auth_token}",
        "Content-Type": "application/json",
    }
