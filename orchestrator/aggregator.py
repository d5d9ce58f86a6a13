"""
ResultAggregator - merges several providers' search results into one list.

Merge order is fully determined by the order of the inputs and the policy:
1. drop invalid records (no headline/url) and records older than the cutoff
2. concatenate inputs in the given order
3. fill missing target sources from their fallbacks, or with a placeholder
4. keep one record per source, up to max_sources sources
5. truncate to max_total
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from models.canonical_record import CanonicalRecord
from models.errors import ProviderError
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PLACEHOLDER_MESSAGE = "No results found for {source}"
DEFAULT_PLACEHOLDER_URL = "about:blank"


@dataclass(frozen=True)
class AggregationPolicy:
    """
    Merge configuration for one query.

    Attributes:
        max_sources: Distinct sources kept (None = unlimited)
        max_total: Records returned (None = unlimited)
        substitutions: Target source -> ordered fallback sources. Dict order
            decides the order substitutes are placed in.
        recency_cutoff: Epoch seconds; records created before it are dropped
        placeholder_message: Format string with a {source} field
        placeholder_url: URL carried by placeholder records
    """

    max_sources: int | None = None
    max_total: int | None = None
    substitutions: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    recency_cutoff: float | None = None
    placeholder_message: str = DEFAULT_PLACEHOLDER_MESSAGE
    placeholder_url: str = DEFAULT_PLACEHOLDER_URL

    def __post_init__(self):
        if self.max_sources is not None and self.max_sources < 0:
            raise ValueError("max_sources must be >= 0")
        if self.max_total is not None and self.max_total < 0:
            raise ValueError("max_total must be >= 0")


@dataclass(frozen=True)
class SourceResult:
    """One adapter's contribution: its records, or the error it failed with."""

    label: str
    records: tuple[CanonicalRecord, ...] = ()
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class AggregationRequest:
    """Everything needed to answer one aggregated query. Never persisted."""

    query: str
    results: tuple[SourceResult, ...]
    policy: AggregationPolicy


class ResultAggregator:
    """
    Example usage:
        aggregator = ResultAggregator()
        policy = AggregationPolicy(max_sources=5, substitutions={"Bloomberg": ("Forbes",)})
        merged = aggregator.merge([("news", news_records), ("reddit", reddit_records)], policy)
    """

    def merge(
        self,
        results: Iterable[SourceResult | tuple[str, Sequence[CanonicalRecord]]],
        policy: AggregationPolicy,
    ) -> list[CanonicalRecord]:
        tagged = self._concatenate(results, policy)
        records = [record for _, record in tagged]

        substitutes = self._substitute(records, policy)
        deduped = self._dedupe(substitutes + records, policy.max_sources)

        if policy.max_total is not None:
            deduped = deduped[: policy.max_total]

        logger.info(
            "Aggregation complete",
            extra={
                "extra_fields": {
                    "input_records": len(records),
                    "substituted": len(substitutes),
                    "output_records": len(deduped),
                    "sources": len({r.source for r in deduped}),
                }
            },
        )
        return deduped

    def aggregate(self, request: AggregationRequest) -> list[CanonicalRecord]:
        return self.merge(request.results, request.policy)

    def _concatenate(
        self,
        results: Iterable[SourceResult | tuple[str, Sequence[CanonicalRecord]]],
        policy: AggregationPolicy,
    ) -> list[tuple[str, CanonicalRecord]]:
        tagged = []
        for result in results:
            if isinstance(result, SourceResult):
                label, records = result.label, result.records
            else:
                label, records = result

            kept = [
                r for r in records if r.is_valid and r.is_recent(policy.recency_cutoff)
            ]
            if len(kept) != len(records):
                logger.debug(
                    f"Excluded {len(records) - len(kept)} invalid or stale records from {label}",
                    extra={"extra_fields": {"label": label, "excluded": len(records) - len(kept)}},
                )
            tagged.extend((label, record) for record in kept)
        return tagged

    def _substitute(
        self, records: list[CanonicalRecord], policy: AggregationPolicy
    ) -> list[CanonicalRecord]:
        present = {r.source for r in records}
        substitutes = []

        for target, fallbacks in policy.substitutions.items():
            if target in present:
                continue

            substitute = None
            for fallback in fallbacks:
                substitute = next((r for r in records if r.source == fallback), None)
                if substitute is not None:
                    logger.debug(
                        f"Substituting {fallback} for missing source {target}",
                        extra={"extra_fields": {"target": target, "fallback": fallback}},
                    )
                    substitute = substitute.with_source(target)
                    break

            if substitute is None:
                substitute = self._placeholder(target, policy)
            substitutes.append(substitute)

        return substitutes

    @staticmethod
    def _placeholder(target: str, policy: AggregationPolicy) -> CanonicalRecord:
        message = policy.placeholder_message.format(source=target)
        return CanonicalRecord(
            id=None,
            headline=message,
            source=target,
            url=policy.placeholder_url,
            body_preview=message,
        )

    @staticmethod
    def _dedupe(records: list[CanonicalRecord], max_sources: int | None) -> list[CanonicalRecord]:
        seen = set()
        kept = []
        for record in records:
            if record.source in seen:
                continue
            if max_sources is not None and len(seen) >= max_sources:
                break
            seen.add(record.source)
            kept.append(record)
        return kept
