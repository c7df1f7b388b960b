"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from media_picker.api.identity import CallerIdentity, require_identity
from media_picker.api.models import MediaContentRequest
from media_picker.app_logging import configure_logging
from media_picker.config import parse_allowed_origins
from media_picker.containers import AppContainer
from media_picker.domain.errors import (
    NotFoundError,
    PickerError,
    PollTimeoutError,
    ProviderError,
    UnauthenticatedError,
)

_ERROR_STATUS = {
    UnauthenticatedError: status.HTTP_401_UNAUTHORIZED,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ProviderError: status.HTTP_502_BAD_GATEWAY,
    PollTimeoutError: status.HTTP_504_GATEWAY_TIMEOUT,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    origins = parse_allowed_origins(container.settings.cors_allowed_origins)
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(PickerError)
    async def picker_error_handler(request: Request, exc: PickerError) -> JSONResponse:
        status_code = _ERROR_STATUS.get(
            type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR
        )
        body: dict[str, object] = {"error": str(exc), "kind": exc.kind}
        if isinstance(exc, ProviderError):
            body["providerStatus"] = exc.status_code
            logger.warning(
                "Picker provider failure on %s: %s", request.url.path, exc.status_code
            )
        return JSONResponse(status_code=status_code, content=body)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/api/session")
    async def ensure_session(
        request: Request, identity: CallerIdentity = Depends(require_identity)
    ) -> dict[str, object]:
        """Return the caller's picker session, creating one if none is tracked."""
        state_container: AppContainer = request.app.state.container
        session = await state_container.session_manager.ensure_session(
            identity.owner_key, identity.auth_token
        )
        return session.to_payload()

    @app.post("/api/session")
    async def create_session(
        request: Request, identity: CallerIdentity = Depends(require_identity)
    ) -> dict[str, object]:
        """Start over with a brand new picker session."""
        state_container: AppContainer = request.app.state.container
        session = await state_container.session_manager.create_session(
            identity.owner_key, identity.auth_token
        )
        return session.to_payload()

    @app.get("/api/session/status")
    async def session_status(
        request: Request, identity: CallerIdentity = Depends(require_identity)
    ) -> dict[str, object]:
        """Refresh the tracked session from the provider."""
        state_container: AppContainer = request.app.state.container
        session = await state_container.session_manager.refresh_status(
            identity.owner_key, identity.auth_token
        )
        return session.to_payload()

    @app.delete("/api/session")
    async def forget_session(
        request: Request, identity: CallerIdentity = Depends(require_identity)
    ) -> dict[str, bool]:
        """Stop tracking the caller's picker session."""
        state_container: AppContainer = request.app.state.container
        state_container.session_manager.forget(identity.owner_key)
        return {"success": True}

    @app.get("/api/media-items")
    async def list_media_items(
        request: Request,
        identity: CallerIdentity = Depends(require_identity),
        page_token: str | None = Query(default=None, alias="pageToken"),
        page_size: int | None = Query(default=None, alias="pageSize"),
    ) -> dict[str, object]:
        """Return one page of the items picked in the tracked session."""
        state_container: AppContainer = request.app.state.container
        session_id = state_container.session_manager.require_session_id(
            identity.owner_key
        )
        page = await state_container.media_browser.list_page(
            session_id,
            identity.auth_token,
            page_token=page_token,
            page_size=page_size,
        )
        return page.to_payload()

    @app.post("/api/media/content")
    async def media_content(
        body: MediaContentRequest,
        request: Request,
        identity: CallerIdentity = Depends(require_identity),
    ) -> StreamingResponse:
        """Relay the bytes behind a capability URL using the caller's token."""
        state_container: AppContainer = request.app.state.container
        download = await state_container.media_browser.fetch_media_bytes(
            body.base_url, identity.auth_token, body.variant
        )
        return StreamingResponse(
            download.relay(),
            media_type=download.content_type,
            headers={"Content-Disposition": download.content_disposition},
            background=BackgroundTask(download.aclose),
        )

    return app
