from abc import ABC
from typing import Any

import httpx

from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_S = 15.0


class BaseContentClient(ABC):
    """
    Abstract base class for provider HTTP clients.

    Clients are thin: they issue requests and return decoded JSON or typed
    records. Non-2xx responses raise httpx.HTTPStatusError and network
    failures raise httpx.TransportError; adapters map both onto the
    ProviderError taxonomy.
    """

    provider_name: str = "base"

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        **kwargs,
    ):
        """
        Initialize the client.

        Args:
            http_client: Shared AsyncClient (tests inject one backed by
                httpx.MockTransport). When omitted, the client owns its own.
            timeout_s: Per-request timeout for an owned AsyncClient
        """
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout_s, follow_redirects=True)

    async def _get_json(
        self,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        response = await self._http.get(url, params=params, headers=headers)
        if response.is_error:
            logger.warning(
                f"{self.provider_name} request failed with HTTP {response.status_code}",
                extra={
                    "extra_fields": {
                        "provider": self.provider_name,
                        "status_code": response.status_code,
                        "path": response.request.url.path,
                    }
                },
            )
        response.raise_for_status()
        return response.json() if response.content else {}

    async def aclose(self) -> None:
        """Close the underlying AsyncClient if this client created it."""
        if self._owns_http_client:
            await self._http.aclose()
