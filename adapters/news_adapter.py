from typing import Any

from api.news_client import NewsApiClient
from models.canonical_record import CanonicalRecord, looks_like_image, parse_timestamp
from models.errors import ProviderError
from utils.logger import get_logger

from .base import ProviderAdapter, cap, keep_valid, normalize_provider_error, preview, require_query

logger = get_logger(__name__)

VALID_SOURCES = (
    "bbc-news",
    "forbes",
    "bloomberg",
    "cnn",
    "nbc-news",
    "yahoo-finance",
    "reuters",
    "business-insider",
    "the-wall-street-journal",
)

# NewsAPI error codes that a later request may get past
TRANSIENT_NEWS_CODES = {"rateLimited", "unexpectedError"}
AUTH_NEWS_CODES = {"apiKeyDisabled", "apiKeyExhausted", "apiKeyInvalid", "apiKeyMissing"}


class NewsAdapter(ProviderAdapter):
    """
    NewsAPI adapter.

    A recognised `source` option narrows the query to that outlet's top
    headlines; otherwise the query runs against `everything` across every
    allow-listed outlet, newest first, from the configured start date.
    """

    name = "news"

    def __init__(
        self,
        client: NewsApiClient,
        *,
        from_date: str | None = None,
        sources: tuple[str, ...] = VALID_SOURCES,
        page_size: int = 20,
    ):
        self.client = client
        self.from_date = from_date
        self.sources = sources
        self.page_size = page_size

    def _to_record(self, article: dict[str, Any]) -> CanonicalRecord:
        source_name = (article.get("source") or {}).get("name")
        url = article.get("url") or ""
        return CanonicalRecord(
            id=url or None,
            headline=article.get("title") or "No title",
            author=article.get("author") or source_name or "Unknown",
            source=source_name or "Unknown",
            created_at=parse_timestamp(article.get("publishedAt")),
            url=url,
            thumbnail=article.get("urlToImage") or None,
            body_preview=preview(
                article.get("description") or article.get("content") or "No description available"
            ),
            is_image=looks_like_image(url),
        )

    def _check_payload(self, payload: dict[str, Any]) -> None:
        """NewsAPI can report failures inside a 200 body."""
        if payload.get("status") != "error":
            return
        code = payload.get("code") or "unexpectedError"
        if code in AUTH_NEWS_CODES:
            mapped = "auth"
        elif code == "rateLimited":
            mapped = "rate_limit"
        else:
            mapped = "provider_error"
        raise ProviderError(
            "Failed to fetch news articles",
            provider=self.name,
            code=mapped,
            transient=code in TRANSIENT_NEWS_CODES,
            details=payload.get("message"),
        )

    async def search(self, query: str, limit: int | None = None, **options) -> list[CanonicalRecord]:
        query = require_query(query)
        source = options.get("source")

        try:
            if source and source in self.sources:
                endpoint = "top-headlines"
                payload = await self.client.top_headlines(source=source, query=query)
            else:
                endpoint = "everything"
                payload = await self.client.everything(
                    sources=list(self.sources), query=query, from_date=self.from_date
                )
        except Exception as e:
            raise normalize_provider_error(e, self.name) from e

        self._check_payload(payload)

        articles = payload.get("articles") or []
        records = keep_valid((self._to_record(a) for a in articles[: self.page_size]), self.name)

        logger.info(
            "News search complete",
            extra={
                "extra_fields": {
                    "endpoint": endpoint,
                    "source": source,
                    "articles": len(articles),
                    "records": len(records),
                }
            },
        )
        return cap(records, self.page_size, limit)

    async def aclose(self) -> None:
        await self.client.aclose()
