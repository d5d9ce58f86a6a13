"""
RequestDispatcher - routes queries to provider adapters.

Single-provider calls surface the adapter's error directly. Aggregated calls
fan out to every requested provider concurrently, each under the same
deadline, and degrade failed or late providers to zero records before
handing the results to the ResultAggregator in the requested order.
"""

import asyncio
import uuid
from collections.abc import Mapping, Sequence

from adapters.base import ProviderAdapter, normalize_provider_error, require_query
from models.canonical_record import CanonicalRecord, CanonicalThread
from models.errors import ContentError, InvalidRequest, ProviderError
from utils.logger import get_logger

from .aggregator import AggregationPolicy, AggregationRequest, ResultAggregator, SourceResult

logger = get_logger(__name__)


class RequestDispatcher:
    """
    Example usage:
        dispatcher = RequestDispatcher({"reddit": reddit_adapter, "news": news_adapter})
        posts = await dispatcher.search("reddit", "climate")
        digest = await dispatcher.aggregate("climate", ["news", "reddit"], policy)
    """

    def __init__(
        self,
        adapters: Mapping[str, ProviderAdapter],
        *,
        aggregator: ResultAggregator | None = None,
        default_policy: AggregationPolicy | None = None,
        default_providers: Sequence[str] | None = None,
        default_timeout_s: float = 60.0,
    ):
        """
        Initialize the dispatcher.

        Args:
            adapters: Adapters keyed by provider label
            aggregator: Merge strategy for aggregated queries
            default_policy: Policy used when aggregate() gets none
            default_providers: Provider order used when aggregate() gets none
            default_timeout_s: Per-call deadline in seconds
        """
        self.adapters = dict(adapters)
        self.aggregator = aggregator or ResultAggregator()
        self.default_policy = default_policy or AggregationPolicy()
        self.default_providers = tuple(default_providers or self.adapters)
        self.default_timeout_s = default_timeout_s

    def get_adapter(self, provider: str) -> ProviderAdapter:
        adapter = self.adapters.get(provider)
        if adapter is None:
            raise InvalidRequest(
                f"Unknown provider: {provider}",
                details={"available": sorted(self.adapters)},
            )
        return adapter

    async def _with_deadline(self, provider: str, call, timeout_s: float):
        try:
            return await asyncio.wait_for(call, timeout=timeout_s)
        except asyncio.TimeoutError as e:
            logger.warning(
                f"Timeout for {provider}",
                extra={"extra_fields": {"provider": provider, "timeout_s": timeout_s}},
            )
            raise ProviderError(
                f"Request timed out after {timeout_s}s",
                provider=provider,
                code="timeout",
                transient=True,
                details={"timeout_seconds": timeout_s},
            ) from e

    async def search(
        self,
        provider: str,
        query: str,
        limit: int | None = None,
        timeout_s: float | None = None,
        **options,
    ) -> list[CanonicalRecord]:
        adapter = self.get_adapter(provider)
        return await self._with_deadline(
            provider,
            adapter.search(query, limit, **options),
            timeout_s or self.default_timeout_s,
        )

    async def thread(self, provider: str, ref: str, timeout_s: float | None = None) -> CanonicalThread:
        adapter = self.get_adapter(provider)
        return await self._with_deadline(
            provider, adapter.thread(ref), timeout_s or self.default_timeout_s
        )

    async def _safe_search(
        self, provider: str, query: str, timeout_s: float, request_id: str
    ) -> SourceResult:
        """Run one provider's search; failures become an empty SourceResult."""
        try:
            records = await self.search(provider, query, timeout_s=timeout_s)
            return SourceResult(label=provider, records=tuple(records))

        except ProviderError as e:
            logger.warning(
                f"Provider {provider} failed: {e.message}",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "provider": provider,
                        "code": e.code,
                        "kind": e.kind,
                    }
                },
            )
            return SourceResult(label=provider, error=e)

        except ContentError as e:
            logger.warning(
                f"Provider {provider} failed: {e.message}",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "provider": provider,
                        "error_type": type(e).__name__,
                    }
                },
            )
            return SourceResult(
                label=provider,
                error=ProviderError(
                    e.message,
                    provider=provider,
                    code="provider_error",
                    transient=e.status_code == 429,
                    details=e.details,
                ),
            )

        except Exception as e:
            logger.error(
                f"Unexpected error for {provider}: {e}",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "provider": provider,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                },
                exc_info=True,
            )
            return SourceResult(label=provider, error=normalize_provider_error(e, provider))

    async def aggregate(
        self,
        query: str,
        providers: Sequence[str] | None = None,
        policy: AggregationPolicy | None = None,
        timeout_s: float | None = None,
    ) -> list[CanonicalRecord]:
        """
        Query several providers concurrently and merge their results.

        Args:
            query: Search text
            providers: Provider labels in merge order (defaults to default_providers)
            policy: Merge policy (defaults to default_policy)
            timeout_s: Per-provider deadline in seconds

        Returns:
            Merged records. A provider that fails contributes nothing; when
            exactly one provider was requested its error is raised instead.
        """
        query = require_query(query)
        providers = list(providers or self.default_providers)
        policy = policy or self.default_policy
        timeout = timeout_s or self.default_timeout_s
        request_id = str(uuid.uuid4())

        if not providers:
            raise InvalidRequest("At least one provider is required")
        for provider in providers:
            self.get_adapter(provider)

        if len(providers) == 1:
            records = await self.search(providers[0], query, timeout_s=timeout)
            return self.aggregator.merge([(providers[0], records)], policy)

        logger.info(
            f"Starting aggregation across {len(providers)} providers",
            extra={
                "extra_fields": {
                    "request_id": request_id,
                    "providers": providers,
                    "timeout_s": timeout,
                }
            },
        )

        results = await asyncio.gather(
            *(self._safe_search(p, query, timeout, request_id) for p in providers)
        )

        failed = [r.label for r in results if not r.ok]
        logger.info(
            f"Aggregation fan-out complete: {len(results) - len(failed)} success, {len(failed)} errors",
            extra={"extra_fields": {"request_id": request_id, "failed": failed}},
        )

        request = AggregationRequest(query=query, results=tuple(results), policy=policy)
        return self.aggregator.aggregate(request)

    async def aclose(self) -> None:
        """Close every adapter's clients."""
        for name, adapter in self.adapters.items():
            try:
                await adapter.aclose()
            except Exception as e:
                logger.warning(
                    f"Error closing adapter {name}: {e}",
                    extra={"extra_fields": {"provider": name}},
                )
