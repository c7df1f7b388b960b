"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from media_picker.adapters.picker_client import HttpxPickerClient, PickerClient
from media_picker.adapters.supabase_session_store import SupabaseSessionStore
from media_picker.config import Settings
from media_picker.services.cache import InMemorySessionStore, SessionStore
from media_picker.services.media import MediaBrowser
from media_picker.services.polling import PollingController
from media_picker.services.sessions import SessionLifecycleManager


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    picker_client: PickerClient
    session_store: SessionStore
    session_manager: SessionLifecycleManager
    media_browser: MediaBrowser
    close_resources: Callable[[], Awaitable[None]]

    def polling_controller(self, owner_key: str, auth_token: str) -> PollingController:
        """Build a polling controller for one owner using configured timings."""
        return PollingController.for_owner(
            self.session_manager,
            owner_key,
            auth_token,
            interval_seconds=self.settings.poll_interval_seconds,
            max_wait_seconds=self.settings.poll_max_wait_seconds,
        )


def build_session_store(settings: Settings) -> SessionStore:
    """Create the configured session store backend."""
    if settings.session_store_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase session store requires URL and service key")
        return SupabaseSessionStore(
            client=create_client(settings.supabase_url, settings.supabase_service_key),
            table=settings.supabase_table,
            ttl_seconds=settings.session_ttl_seconds,
        )
    if settings.session_store_backend != "memory":
        raise ValueError(
            f"Unknown session store backend: {settings.session_store_backend}"
        )
    return InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    session_store = build_session_store(resolved_settings)
    picker_client = HttpxPickerClient.create(
        base_url=resolved_settings.picker_base_url,
        timeout=resolved_settings.http_timeout_seconds,
    )
    session_manager = SessionLifecycleManager(
        picker_client=picker_client,
        store=session_store,
    )
    media_browser = MediaBrowser(
        picker_client=picker_client,
        default_page_size=resolved_settings.media_page_size,
    )

    async def close_resources() -> None:
        await picker_client.close()

    return AppContainer(
        settings=resolved_settings,
        picker_client=picker_client,
        session_store=session_store,
        session_manager=session_manager,
        media_browser=media_browser,
        close_resources=close_resources,
    )
