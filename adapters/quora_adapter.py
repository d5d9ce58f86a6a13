import re
from typing import Any

from api.google_search_client import GoogleSearchClient
from models.canonical_record import CanonicalRecord, CanonicalThread, looks_like_image
from utils.logger import get_logger

from .base import ProviderAdapter, cap, keep_valid, normalize_provider_error, preview, require_query
from .quora_thread import QuoraThreadReader

logger = get_logger(__name__)

ANSWER_COUNT_PATTERN = re.compile(r"(\d[\d,]*)\s+Answers?\b", re.IGNORECASE)


def answer_count(snippet: str | None) -> int | None:
    """Parse the "N Answers" marker Quora puts in search snippets."""
    match = ANSWER_COUNT_PATTERN.search(snippet or "")
    if not match:
        return None
    return int(match.group(1).replace(",", ""))


def _thumbnail(item: dict[str, Any]) -> str | None:
    thumbnails = (item.get("pagemap") or {}).get("cse_thumbnail") or []
    if thumbnails and isinstance(thumbnails[0], dict):
        return thumbnails[0].get("src") or None
    return None


class QuoraAdapter(ProviderAdapter):
    """
    Quora search through Google Custom Search, threads through a browser.

    Search results are restricted to quora.com and to the last six months on
    the search side (dateRestrict), so no local recency filter applies.
    """

    name = "quora"

    def __init__(
        self,
        client: GoogleSearchClient,
        *,
        thread_reader: QuoraThreadReader | None = None,
        date_restrict: str = "m6",
        page_size: int = 10,
    ):
        self.client = client
        self.thread_reader = thread_reader
        self.date_restrict = date_restrict
        self.page_size = page_size

    @staticmethod
    def build_query(query: str) -> str:
        return f'site:quora.com "{query}"'

    def _to_record(self, item: dict[str, Any]) -> CanonicalRecord:
        link = item.get("link") or ""
        snippet = item.get("snippet") or ""

        count = answer_count(snippet)
        if count is not None:
            logger.debug(
                "Quora answer count parsed",
                extra={"extra_fields": {"url": link, "answers": count}},
            )

        return CanonicalRecord(
            id=link or None,
            headline=item.get("title") or "",
            author=None,
            source="Quora",
            created_at=None,
            url=link,
            thumbnail=_thumbnail(item),
            body_preview=preview(snippet),
            is_image=looks_like_image(link),
        )

    async def search(self, query: str, limit: int | None = None, **options) -> list[CanonicalRecord]:
        query = require_query(query)
        try:
            payload = await self.client.search(
                self.build_query(query), date_restrict=self.date_restrict, num=self.page_size
            )
        except Exception as e:
            raise normalize_provider_error(e, self.name) from e

        items = payload.get("items") or []
        records = keep_valid((self._to_record(item) for item in items), self.name)

        logger.info(
            "Quora search complete",
            extra={"extra_fields": {"items": len(items), "records": len(records)}},
        )
        return cap(records, self.page_size, limit)

    async def thread(self, ref: str) -> CanonicalThread:
        if self.thread_reader is None:
            return await super().thread(ref)
        return await self.thread_reader.read(ref)

    async def aclose(self) -> None:
        await self.client.aclose()
