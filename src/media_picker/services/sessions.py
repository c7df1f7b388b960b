"""Picker session lifecycle.

A session moves ``NONE -> CREATING -> OPEN(pending) -> OPEN(complete)``. The
store only ever holds the latest session per owner key; failures are raised
to the caller and leave the stored entry untouched.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from media_picker.adapters.picker_client import PickerClient
from media_picker.domain.errors import NotFoundError, UnauthenticatedError
from media_picker.domain.sessions import PickerSession
from media_picker.services.cache import SessionStore, utc_now

_logger = logging.getLogger(__name__)


@dataclass
class SessionLifecycleManager:
    """Creates, refreshes and tracks picker sessions per owner."""

    picker_client: PickerClient
    store: SessionStore
    clock: Callable[[], datetime] = utc_now

    async def ensure_session(self, owner_key: str, auth_token: str) -> PickerSession:
        """Return a provider-fresh session for the owner, creating one if needed."""
        _require_identity(owner_key, auth_token)
        cached = self.store.get(owner_key)
        if cached is None:
            _logger.info("No tracked picker session for %s, creating one", owner_key)
            return await self.create_session(owner_key, auth_token)
        if cached.is_expired(self.clock()):
            _logger.info("Picker session %s expired, replacing it", cached.id)
            return await self.create_session(owner_key, auth_token)
        return await self.refresh_status(owner_key, auth_token)

    async def create_session(self, owner_key: str, auth_token: str) -> PickerSession:
        """Create a new session, replacing whatever was tracked for the owner."""
        _require_identity(owner_key, auth_token)
        payload = await self.picker_client.create_session(auth_token)
        session = PickerSession.from_provider(
            payload, owner_key=owner_key, created_at=self.clock()
        )
        self.store.set(owner_key, session)
        _logger.info("Created picker session %s for %s", session.id, owner_key)
        return session

    async def refresh_status(self, owner_key: str, auth_token: str) -> PickerSession:
        """Fetch the tracked session from the provider and store the result."""
        _require_identity(owner_key, auth_token)
        cached = self.store.get(owner_key)
        if cached is None:
            raise NotFoundError(owner_key)
        payload = await self.picker_client.get_session(auth_token, cached.id)
        session = PickerSession.from_provider(
            payload, owner_key=owner_key, created_at=cached.created_at
        )
        self.store.set(owner_key, session)
        _logger.info(
            "Refreshed picker session %s: mediaItemsSet=%s",
            session.id,
            session.media_items_set,
        )
        return session

    def get_status(self, owner_key: str) -> PickerSession:
        """Return the locally tracked session without asking the provider.

        The result is not authoritative for completion; use ``refresh_status``
        to detect that the user finished picking.
        """
        cached = self.store.get(owner_key)
        if cached is None:
            raise NotFoundError(owner_key)
        return cached

    def require_session_id(self, owner_key: str) -> str:
        """Return the id of the tracked session for media listing."""
        return self.get_status(owner_key).id

    def forget(self, owner_key: str) -> None:
        """Stop tracking the owner's session, e.g. on logout."""
        self.store.remove(owner_key)
        _logger.info("Forgot picker session for %s", owner_key)


def _require_identity(owner_key: str, auth_token: str) -> None:
    if not owner_key or not auth_token:
        raise UnauthenticatedError()
