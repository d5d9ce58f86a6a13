"""
Category pages of a server-rendered news site.

The site's home page navigation names each section; the requested section is
resolved from that menu, then its article cards are extracted with the same
declarative schema machinery the browser pipeline uses. No JavaScript is
needed, so pages are fetched over plain HTTP.
"""

from typing import Any
from urllib.parse import urlparse

from api.page_client import StaticPageClient
from browser.extractor import ExtractionMode, ExtractionSchema, FieldExtractor, FieldSpec
from models.canonical_record import CanonicalRecord, looks_like_image, parse_timestamp
from models.errors import SectionNotFound
from utils.logger import get_logger

from .base import ProviderAdapter, cap, keep_valid, normalize_provider_error, preview, require_query

logger = get_logger(__name__)

NAV_SCHEMA = ExtractionSchema(
    name="section_nav",
    root_selector="nav a",
    fields=(
        FieldSpec("label", ""),
        FieldSpec("href", "", mode=ExtractionMode.ATTRIBUTE, attribute="href", absolute_url=True),
    ),
    required=frozenset({"label", "href"}),
)

ARTICLE_SCHEMA = ExtractionSchema(
    name="section_article",
    root_selector="article, div.post, .post, .article",
    fields=(
        FieldSpec("title", "h2, h3", join_all=True),
        FieldSpec(
            "link",
            ("h2 a, h3 a", "a"),
            mode=ExtractionMode.ATTRIBUTE,
            attribute="href",
            absolute_url=True,
        ),
        FieldSpec("image", "img", mode=ExtractionMode.ATTRIBUTE, attribute="src", absolute_url=True),
        FieldSpec("content", "p:not(.author):not(.date)", join_all=True),
        FieldSpec(
            "author",
            '.author, [class*="author"], [class*="byline"]',
            join_all=True,
            strip_pattern=r"^\s*(By|Author:)",
        ),
        FieldSpec("published", "time[datetime]", mode=ExtractionMode.ATTRIBUTE, attribute="datetime"),
        FieldSpec("date", '.date, [class*="date"], time', join_all=True),
    ),
    required=frozenset({"title", "link"}),
)


class SectionsAdapter(ProviderAdapter):
    """Articles listed under one named section of a news site."""

    name = "sections"

    def __init__(
        self,
        client: StaticPageClient,
        *,
        base_url: str,
        source_label: str | None = None,
        extractor: FieldExtractor | None = None,
        page_size: int = 20,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/") + "/"
        self.source_label = source_label or urlparse(self.base_url).hostname or "sections"
        self.extractor = extractor or FieldExtractor()
        self.page_size = page_size

    async def find_section_url(self, section: str) -> str:
        """
        Resolve a section name to its URL from the home page navigation.

        Raises:
            SectionNotFound: no navigation link carries that name
        """
        html, final_url = await self.client.fetch(self.base_url)
        links = self.extractor.extract_html(html, NAV_SCHEMA, base_url=final_url)

        wanted = section.casefold()
        for link in links:
            if link["label"].casefold() == wanted:
                return link["href"]

        raise SectionNotFound(
            f"{section} category URL not found",
            details={"section": section, "links_seen": len(links)},
        )

    def _to_record(self, article: dict[str, Any]) -> CanonicalRecord:
        return CanonicalRecord(
            id=article["link"],
            headline=article["title"],
            author=article.get("author"),
            source=self.source_label,
            created_at=parse_timestamp(article.get("published")) or parse_timestamp(article.get("date")),
            url=article["link"],
            thumbnail=article.get("image"),
            body_preview=preview(article.get("content")),
            is_image=looks_like_image(article["link"]),
        )

    async def search(self, query: str, limit: int | None = None, **options) -> list[CanonicalRecord]:
        """Treat the query as a section name and list that section's articles."""
        section = require_query(query)

        try:
            section_url = await self.find_section_url(section)
            html, final_url = await self.client.fetch(section_url)
        except SectionNotFound:
            raise
        except Exception as e:
            raise normalize_provider_error(e, self.name) from e

        articles = self.extractor.extract_html(html, ARTICLE_SCHEMA, base_url=final_url)
        records = keep_valid((self._to_record(a) for a in articles), self.name)

        logger.info(
            f"Extracted {len(records)} articles from {section} section",
            extra={"extra_fields": {"section": section, "url": section_url, "records": len(records)}},
        )
        return cap(records, self.page_size, limit)

    async def aclose(self) -> None:
        await self.client.aclose()
