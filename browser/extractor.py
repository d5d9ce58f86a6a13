"""
Declarative field extraction.

An ExtractionSchema describes which elements hold which fields; the
FieldExtractor applies it to page HTML with BeautifulSoup CSS selectors.
Markup we target is unversioned, so extraction is permissive: missing
elements fall back to the field default and records lacking their required
fields are dropped instead of failing the whole page.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from utils.logger import get_logger

from .session import Session

logger = get_logger(__name__)


class ExtractionMode(str, Enum):
    TEXT = "text"
    ATTRIBUTE = "attribute"
    NESTED_LIST = "nested_list"


@dataclass(frozen=True)
class FieldSpec:
    """
    How to pull one field out of a record element.

    Attributes:
        name: Key in the output record
        selector: CSS selector, or a tuple of selectors tried in order.
            An empty selector targets the record element itself.
        mode: text, attribute or nested_list
        attribute: Attribute name for ATTRIBUTE mode
        default: Value used when nothing matched (or matched empty)
        schema: Child schema for NESTED_LIST mode
        absolute_url: Resolve ATTRIBUTE values against the page URL
        strip_pattern: Regex removed from TEXT values (e.g. a "By" prefix)
        join_all: TEXT mode joins every match instead of using the first
    """

    name: str
    selector: str | tuple[str, ...] = ""
    mode: ExtractionMode = ExtractionMode.TEXT
    attribute: str | None = None
    default: Any = None
    schema: "ExtractionSchema | None" = None
    absolute_url: bool = False
    strip_pattern: str | None = None
    join_all: bool = False

    def __post_init__(self):
        if self.mode == ExtractionMode.ATTRIBUTE and not self.attribute:
            raise ValueError(f"Field '{self.name}' needs an attribute name")
        if self.mode == ExtractionMode.NESTED_LIST and self.schema is None:
            raise ValueError(f"Field '{self.name}' needs a nested schema")

    @property
    def selectors(self) -> tuple[str, ...]:
        if isinstance(self.selector, tuple):
            return self.selector
        return (self.selector,)


@dataclass(frozen=True)
class ExtractionSchema:
    """
    A provider's page description.

    root_selector picks one element per record; None treats the whole
    document as a single record.
    """

    name: str
    fields: tuple[FieldSpec, ...]
    root_selector: str | None = None
    required: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self):
        names = {f.name for f in self.fields}
        unknown = set(self.required) - names
        if unknown:
            raise ValueError(f"Schema '{self.name}' requires unknown fields: {sorted(unknown)}")


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == []


class FieldExtractor:
    def __init__(self, parser: str = "html.parser"):
        self.parser = parser

    async def extract(self, session: Session, schema: ExtractionSchema) -> list[dict[str, Any]]:
        """Extract records from the page currently loaded in the session."""
        html = await session.content()
        base_url = await session.current_url()
        return self.extract_html(html, schema, base_url=base_url)

    def extract_html(
        self, html: str, schema: ExtractionSchema, base_url: str | None = None
    ) -> list[dict[str, Any]]:
        soup = BeautifulSoup(html or "", self.parser)
        records = self._extract_records(soup, schema, base_url)
        logger.debug(
            f"Extracted {len(records)} records with schema '{schema.name}'",
            extra={"extra_fields": {"schema": schema.name, "records": len(records)}},
        )
        return records

    def _extract_records(
        self, scope: Tag, schema: ExtractionSchema, base_url: str | None
    ) -> list[dict[str, Any]]:
        elements = scope.select(schema.root_selector) if schema.root_selector else [scope]

        records = []
        dropped = 0
        for element in elements:
            record = {spec.name: self._extract_field(element, spec, base_url) for spec in schema.fields}
            if any(_is_empty(record[name]) for name in schema.required):
                dropped += 1
                continue
            records.append(record)

        if dropped:
            logger.debug(
                f"Dropped {dropped} incomplete records",
                extra={"extra_fields": {"schema": schema.name, "dropped": dropped}},
            )
        return records

    def _match(self, element: Tag, spec: FieldSpec) -> list[Tag]:
        for selector in spec.selectors:
            if not selector:
                return [element]
            found = element.select(selector) if spec.join_all else [element.select_one(selector)]
            found = [f for f in found if f is not None]
            if found:
                return found
        return []

    def _extract_field(self, element: Tag, spec: FieldSpec, base_url: str | None) -> Any:
        if spec.mode == ExtractionMode.NESTED_LIST:
            for selector in spec.selectors:
                scope = element.select_one(selector) if selector else element
                if scope is not None:
                    return self._extract_records(scope, spec.schema, base_url)
            return list(spec.default or [])

        matches = self._match(element, spec)
        if not matches:
            return spec.default

        if spec.mode == ExtractionMode.ATTRIBUTE:
            value = matches[0].get(spec.attribute)
            if isinstance(value, list):
                value = " ".join(value)
            value = (value or "").strip()
            if value and spec.absolute_url and base_url:
                value = urljoin(base_url, value)
        else:
            texts = [m.get_text(" ", strip=True) for m in matches]
            value = " ".join(t for t in texts if t)
            if spec.strip_pattern:
                value = re.sub(spec.strip_pattern, "", value, flags=re.IGNORECASE).strip()

        return value if value else spec.default
