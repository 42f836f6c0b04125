"""Custom exception hierarchy for packsmith."""

from __future__ import annotations

from typing import Any


class PacksmithError(Exception):
    """Base exception for all packsmith errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class GenerationError(PacksmithError):
    """Generation produced no usable result. Shown to the user, never retried.

    Reasons: empty_result, unparseable_response, verification_empty,
    transport, safety.
    """

    def __init__(
        self,
        message: str = "",
        reason: str = "empty_result",
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.original = original


class ArchiveAssemblyError(PacksmithError):
    """The archive could not be built; the download does not proceed."""

    def __init__(self, message: str = "", original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


class CacheFullError(PacksmithError):
    """A cache store has no room left for an entry."""

    def __init__(self, message: str = "", needed_bytes: int = 0) -> None:
        super().__init__(message)
        self.needed_bytes = needed_bytes


class TransientError(PacksmithError):
    """Transient transport error — safe to retry with backoff.

    Examples: 429 rate limit, 500/502/503 server error, timeout, connection error.
    """

    def __init__(
        self,
        message: str = "",
        error_type: str = "server_error",
        http_status: int | None = None,
        retry_after: float | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.http_status = http_status
        self.retry_after = retry_after
        self.original = original


class TerminalError(PacksmithError):
    """Terminal transport error — fail fast.

    Examples: 401 auth failure, 404 model not found, bad input, content policy.
    """

    def __init__(
        self,
        message: str = "",
        error_type: str = "auth_failure",
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.http_status = http_status
