"""
Canonical record shapes shared by every provider adapter.

All providers are normalized into CanonicalRecord (search results) and
CanonicalThread (one item plus its replies). Attributes are snake_case in
Python; to_dict() emits the public camelCase field names.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a provider timestamp into an aware UTC datetime.

    Numbers (int/float) are epoch seconds; strings are ISO-8601 (a trailing
    "Z" is accepted). Returns None for anything unparseable or out of range.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(float(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    text = str(value).strip()
    # Bare digits ("2025", "20250301") are scraped dates, not epochs
    if text.isdigit():
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)



def format_timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def looks_like_image(url: str | None) -> bool:
    """True when the url points at a jpg/jpeg/png resource."""
    if not url:
        return False
    lowered = url.lower()
    return any(ext in lowered for ext in IMAGE_EXTENSIONS)


@dataclass(frozen=True)
class CanonicalRecord:
    headline: str
    url: str
    source: str
    id: str | None = None
    author: str | None = None
    created_at: datetime | None = None
    thumbnail: str | None = None
    body_preview: str = ""
    is_image: bool = False

    @property
    def is_valid(self) -> bool:
        return bool(self.headline and self.headline.strip()) and bool(
            self.url and self.url.strip()
        )

    def is_recent(self, cutoff: float | None) -> bool:
        """
        Recency check against an epoch cutoff (created_at >= cutoff).

        Records without a timestamp cannot be proven stale and are kept.
        """
        if cutoff is None or self.created_at is None:
            return True
        return self.created_at.timestamp() >= cutoff

    def with_source(self, source: str) -> "CanonicalRecord":
        return replace(self, source=source)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "headline": self.headline,
            "author": self.author,
            "source": self.source,
            "createdAt": format_timestamp(self.created_at),
            "url": self.url,
            "thumbnail": self.thumbnail,
            "bodyPreview": self.body_preview,
            "isImage": self.is_image,
        }


@dataclass(frozen=True)
class CanonicalReply:
    author: str
    body: str
    id: str | None = None
    created_at: datetime | None = None
    score: int | None = None

    def is_recent(self, cutoff: float | None) -> bool:
        if cutoff is None or self.created_at is None:
            return True
        return self.created_at.timestamp() >= cutoff

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "author": self.author,
            "body": self.body,
            "createdAt": format_timestamp(self.created_at),
            "score": self.score,
        }


@dataclass(frozen=True)
class CanonicalThread(CanonicalRecord):
    """A CanonicalRecord plus its replies, in provider order."""

    replies: tuple[CanonicalReply, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["replies"] = [reply.to_dict() for reply in self.replies]
        return data
