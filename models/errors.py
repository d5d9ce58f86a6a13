"""
Error taxonomy shared by adapters, the browser subsystem and the HTTP layer.

Each error carries the HTTP status the API layer answers with, a short
user-facing message and optional details.
"""

from typing import Any

PROVIDER_ERROR_CODES = {
    "timeout",
    "auth",
    "rate_limit",
    "bad_request",
    "not_found",
    "provider_error",
    "unknown",
}


class ContentError(Exception):
    status_code = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class InvalidRequest(ContentError):
    """Missing or malformed request parameter."""

    status_code = 400


class InvalidReference(InvalidRequest):
    """A thread reference that is malformed or points at a foreign host."""


class ThreadNotFound(ContentError):
    """Reference did not resolve, or resolved outside the recency window."""

    status_code = 404


class SectionNotFound(ThreadNotFound):
    pass


class ConnectionExhausted(ContentError):
    """No browser session could be acquired within the retry policy."""

    status_code = 429

    def __init__(
        self,
        message: str = "Service rebuilding... ",
        details: Any = "try again shortly.",
        last_error: BaseException | None = None,
        attempts: int = 0,
    ):
        super().__init__(message, details)
        self.last_error = last_error
        self.attempts = attempts


class NavigationError(ContentError):
    """The page failed to load."""


class NavigationTimeout(NavigationError):
    """The page did not reach its ready condition within the deadline."""


class ProviderError(ContentError):
    """
    Upstream provider failure.

    Attributes:
        provider: Adapter label the failure came from
        code: One of PROVIDER_ERROR_CODES
        transient: True when a later attempt could succeed (rate limit,
            timeout, 5xx, navigation failure)
    """

    def __init__(
        self,
        message: str,
        *,
        provider: str,
        code: str = "unknown",
        transient: bool = False,
        details: Any = None,
    ):
        super().__init__(message, details)
        self.provider = provider
        self.code = code if code in PROVIDER_ERROR_CODES else "unknown"
        self.transient = transient

    @property
    def kind(self) -> str:
        return "transient" if self.transient else "permanent"

    def __repr__(self) -> str:
        return (
            f"ProviderError(provider={self.provider!r}, code={self.code!r}, "
            f"kind={self.kind!r}, message={self.message!r})"
        )
