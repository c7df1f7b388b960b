"""Error types raised by the picker core."""


class PickerError(Exception):
    """Base class for picker errors surfaced to callers."""

    kind = "error"


class UnauthenticatedError(PickerError):
    """Raised when the caller has no usable identity or token."""

    kind = "unauthenticated"

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class ProviderError(PickerError):
    """Raised when the remote picker service returns a non-success response."""

    kind = "provider"

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Picker provider error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class PollTimeoutError(PickerError):
    """Raised when polling gives up before the user finished picking."""

    kind = "poll_timeout"

    def __init__(self, waited_seconds: float) -> None:
        super().__init__(
            f"Picker selection not completed after {waited_seconds:g} seconds"
        )
        self.waited_seconds = waited_seconds


class NotFoundError(PickerError):
    """Raised when no picker session is tracked for an owner key."""

    kind = "not_found"

    def __init__(self, owner_key: str) -> None:
        super().__init__(f"No picker session for {owner_key}")
        self.owner_key = owner_key
