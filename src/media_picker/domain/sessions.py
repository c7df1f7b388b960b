"""Domain models for picker sessions."""

import re
from dataclasses import dataclass
from datetime import UTC, datetime

_FRACTION_RE = re.compile(r"\.(\d{6})\d+")


@dataclass(frozen=True)
class PollingConfig:
    """Polling hints returned by the provider, in seconds."""

    poll_interval: float | None = None
    timeout_in: float | None = None

    @classmethod
    def from_provider(cls, payload: dict[str, object]) -> "PollingConfig":
        """Build polling hints from the provider's duration strings."""
        return cls(
            poll_interval=parse_duration(payload.get("pollInterval")),
            timeout_in=parse_duration(payload.get("timeoutIn")),
        )

    def to_payload(self) -> dict[str, str]:
        payload: dict[str, str] = {}
        if self.poll_interval is not None:
            payload["pollInterval"] = f"{self.poll_interval:g}s"
        if self.timeout_in is not None:
            payload["timeoutIn"] = f"{self.timeout_in:g}s"
        return payload


@dataclass(frozen=True)
class PickerSession:
    """A remote picking session tracked for one user."""

    id: str
    picker_uri: str | None
    media_items_set: bool
    owner_key: str
    created_at: datetime
    expires_at: datetime | None = None
    polling_config: PollingConfig | None = None

    @classmethod
    def from_provider(
        cls,
        payload: dict[str, object],
        owner_key: str,
        created_at: datetime | None = None,
    ) -> "PickerSession":
        """Build a session from a provider response body."""
        polling = payload.get("pollingConfig")
        return cls(
            id=str(payload["id"]),
            picker_uri=_optional_str(payload.get("pickerUri")),
            media_items_set=bool(payload.get("mediaItemsSet", False)),
            owner_key=owner_key,
            created_at=created_at or datetime.now(tz=UTC),
            expires_at=parse_timestamp(payload.get("expireTime")),
            polling_config=(
                PollingConfig.from_provider(polling)
                if isinstance(polling, dict)
                else None
            ),
        )

    @classmethod
    def from_payload(cls, payload: dict[str, object]) -> "PickerSession":
        """Rebuild a session from the output of ``to_payload``."""
        created_at = parse_timestamp(payload.get("createdAt"))
        return cls.from_provider(
            payload,
            owner_key=str(payload.get("ownerKey", "")),
            created_at=created_at,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return True once the provider-side expiry has passed."""
        if self.expires_at is None:
            return False
        current = now or datetime.now(tz=UTC)
        return current > self.expires_at

    def to_payload(self) -> dict[str, object]:
        """Serialize using the provider's field names."""
        payload: dict[str, object] = {
            "id": self.id,
            "pickerUri": self.picker_uri,
            "mediaItemsSet": self.media_items_set,
            "ownerKey": self.owner_key,
            "createdAt": _format_timestamp(self.created_at),
            "expireTime": (
                _format_timestamp(self.expires_at) if self.expires_at else None
            ),
        }
        if self.polling_config is not None:
            payload["pollingConfig"] = self.polling_config.to_payload()
        return payload


def parse_duration(raw: object) -> float | None:
    """Parse a protobuf duration string such as ``"5s"`` or ``"1.5s"``."""
    if isinstance(raw, int | float):
        return float(raw)
    if not isinstance(raw, str):
        return None
    cleaned = raw.strip().removesuffix("s")
    try:
        return float(cleaned)
    except ValueError:
        return None


def parse_timestamp(raw: object) -> datetime | None:
    """Parse an RFC 3339 timestamp, tolerating nanosecond precision."""
    if not isinstance(raw, str) or not raw:
        return None
    cleaned = _FRACTION_RE.sub(r".\1", raw.strip())
    if cleaned.endswith("Z"):
        cleaned = f"{cleaned[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(cleaned)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _format_timestamp(value: datetime) -> str:
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def _optional_str(value: object) -> str | None:
    return str(value) if value else None
