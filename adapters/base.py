from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any
from urllib.parse import urlparse

import httpx

from models.canonical_record import CanonicalRecord, CanonicalThread
from models.errors import InvalidReference, InvalidRequest, ProviderError
from utils.logger import get_logger

logger = get_logger(__name__)

PREVIEW_CHARS = 300


class ProviderAdapter(ABC):
    """
    Abstract base class for provider adapters.

    Adapters translate one provider's native results into canonical records
    and own the mapping of that provider's failures onto ProviderError.
    """

    name: str = "provider"

    @abstractmethod
    async def search(self, query: str, limit: int | None = None, **options) -> list[CanonicalRecord]:
        """
        Search the provider.

        Args:
            query: Free-text query (non-empty)
            limit: Optional cap below the adapter's page size
            **options: Provider-specific options (e.g. news `source`)

        Returns:
            Valid canonical records in provider order
        """

    async def thread(self, ref: str) -> CanonicalThread:
        raise ProviderError(
            f"{self.name} does not support thread lookups",
            provider=self.name,
            code="bad_request",
            transient=False,
        )

    async def aclose(self) -> None:
        """Release clients owned by the adapter."""


def require_query(query: str | None) -> str:
    if not query or not query.strip():
        raise InvalidRequest("Query parameter is required")
    return query.strip()


def require_host(ref: str | None, host_suffix: str, message: str) -> str:
    """
    Validate that a reference is an http(s) URL on the expected host.

    Raises:
        InvalidReference: before any network call when the URL is malformed
            or belongs to another domain
    """
    if not ref or not isinstance(ref, str):
        raise InvalidReference(message)
    try:
        parsed = urlparse(ref.strip())
    except ValueError as exc:
        raise InvalidReference(message) from exc

    host = (parsed.hostname or "").lower()
    if parsed.scheme not in ("http", "https") or not (
        host == host_suffix or host.endswith("." + host_suffix)
    ):
        raise InvalidReference(message, details={"url": ref})
    return ref.strip()


def cap(records: list[Any], page_size: int, limit: int | None = None) -> list[Any]:
    size = page_size if limit is None else max(0, min(limit, page_size))
    return records[:size]


def keep_valid(records: Iterable[CanonicalRecord], provider: str) -> list[CanonicalRecord]:
    records = list(records)
    valid = [r for r in records if r.is_valid]
    dropped = len(records) - len(valid)
    if dropped:
        logger.debug(
            f"Dropped {dropped} records without headline/url",
            extra={"extra_fields": {"provider": provider, "dropped": dropped}},
        )
    return valid


def preview(text: str | None, limit: int = PREVIEW_CHARS) -> str:
    raw = (text or "").strip()
    if len(raw) <= limit:
        return raw
    return raw[: limit - 3].rstrip() + "..."


def normalize_provider_error(exc: BaseException, provider: str) -> ProviderError:
    """
    Map a client-level exception onto the shared ProviderError taxonomy.

    HTTP 429 and 5xx, timeouts and transport failures are transient;
    auth and request errors are permanent.
    """
    if isinstance(exc, ProviderError):
        return exc

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        details = _error_details(exc.response)
        if status == 429:
            code, transient = "rate_limit", True
        elif status in (401, 403):
            code, transient = "auth", False
        elif status == 404:
            code, transient = "not_found", False
        elif 400 <= status < 500:
            code, transient = "bad_request", False
        else:
            code, transient = "provider_error", True
        return ProviderError(
            f"{provider} returned HTTP {status}",
            provider=provider,
            code=code,
            transient=transient,
            details=details,
        )

    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return ProviderError(
            f"{provider} request timed out", provider=provider, code="timeout", transient=True
        )

    if isinstance(exc, httpx.TransportError):
        return ProviderError(
            f"{provider} is unreachable: {exc}",
            provider=provider,
            code="provider_error",
            transient=True,
        )

    if isinstance(exc, ValueError):
        # Missing credentials / malformed payloads
        return ProviderError(str(exc), provider=provider, code="bad_request", transient=False)

    return ProviderError(
        f"Unexpected error: {exc!s}",
        provider=provider,
        code="unknown",
        transient=False,
        details={"exception_type": type(exc).__name__},
    )


def _error_details(response: httpx.Response) -> Any:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:500] or None
    if isinstance(payload, dict):
        # NewsAPI: {"status": "error", "code": ..., "message": ...}
        # Google:  {"error": {"code": ..., "message": ...}}
        if "message" in payload:
            return payload["message"]
        error = payload.get("error")
        if isinstance(error, dict) and "message" in error:
            return error["message"]
    return payload
