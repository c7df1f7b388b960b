"""Caller identity extraction for picker endpoints."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Header

from media_picker.domain.errors import UnauthenticatedError


@dataclass(frozen=True)
class CallerIdentity:
    """Identity asserted by the fronting identity provider."""

    owner_key: str
    auth_token: str


async def require_identity(
    authorization: str | None = Header(default=None),
    x_owner_key: str | None = Header(default=None),
) -> CallerIdentity:
    """Read the bearer token and owner key, failing before any provider call.

    ``X-Owner-Key`` is taken as sent. The fronting proxy that authenticates the
    bearer token must set it from that identity and strip any client-supplied
    value, otherwise one caller can replace or forget another owner's session.
    """
    token = _parse_bearer(authorization)
    owner_key = (x_owner_key or "").strip()
    if not token or not owner_key:
        raise UnauthenticatedError()
    return CallerIdentity(owner_key=owner_key, auth_token=token)


def _parse_bearer(header: str | None) -> str | None:
    if not header:
        return None
    scheme, _, value = header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return value.strip() or None
