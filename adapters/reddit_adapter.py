import re
from urllib.parse import urlparse

import httpx

from api.reddit_client import RedditClient, RedditComment, RedditPost
from models.canonical_record import (
    CanonicalRecord,
    CanonicalReply,
    CanonicalThread,
    looks_like_image,
    parse_timestamp,
)
from models.errors import InvalidReference, ThreadNotFound
from utils.logger import get_logger

from .base import (
    ProviderAdapter,
    cap,
    keep_valid,
    normalize_provider_error,
    preview,
    require_host,
    require_query,
)

logger = get_logger(__name__)

REDDIT_BASE_URL = "https://www.reddit.com"
POST_ID_PATTERN = re.compile(r"^(?:t3_)?([a-z0-9]{1,12})$", re.IGNORECASE)
COMMENTS_PATH_PATTERN = re.compile(r"/comments/([a-z0-9]{1,12})(?:/|$)", re.IGNORECASE)
PLACEHOLDER_THUMBNAILS = {"", "self", "default", "nsfw", "spoiler", "image"}


def _thumbnail(post: RedditPost) -> str | None:
    if not post.thumbnail or post.thumbnail in PLACEHOLDER_THUMBNAILS:
        return None
    return post.thumbnail


def _permalink(path: str) -> str:
    return f"{REDDIT_BASE_URL}{path}" if path.startswith("/") else path


class RedditAdapter(ProviderAdapter):
    """
    Structured-API adapter for Reddit.

    Reddit search has no server-side "newer than" filter, so recency is
    applied here: fetch `fetch_limit` posts, keep those created at or after
    the cutoff, return the first `page_size`.
    """

    name = "reddit"

    def __init__(
        self,
        client: RedditClient,
        *,
        recency_cutoff: float | None,
        fetch_limit: int = 50,
        page_size: int = 10,
        comment_limit: int = 50,
        reply_page_size: int = 10,
    ):
        self.client = client
        self.recency_cutoff = recency_cutoff
        self.fetch_limit = fetch_limit
        self.page_size = page_size
        self.comment_limit = comment_limit
        self.reply_page_size = reply_page_size

    def _to_record(self, post: RedditPost) -> CanonicalRecord:
        return CanonicalRecord(
            id=post.id,
            headline=post.title,
            author=post.author,
            source=f"r/{post.subreddit}" if post.subreddit else "reddit",
            created_at=parse_timestamp(post.created_utc),
            url=_permalink(post.permalink) or post.url,
            thumbnail=_thumbnail(post),
            body_preview=preview(post.selftext),
            is_image=looks_like_image(post.url),
        )

    def _to_reply(self, comment: RedditComment) -> CanonicalReply:
        return CanonicalReply(
            id=comment.id,
            author=comment.author,
            body=comment.body,
            created_at=parse_timestamp(comment.created_utc),
            score=comment.score,
        )

    async def search(self, query: str, limit: int | None = None, **options) -> list[CanonicalRecord]:
        query = require_query(query)
        try:
            posts = await self.client.search(query, limit=self.fetch_limit)
        except Exception as e:
            raise normalize_provider_error(e, self.name) from e

        records = [self._to_record(p) for p in posts]
        recent = [r for r in keep_valid(records, self.name) if r.is_recent(self.recency_cutoff)]

        logger.info(
            "Reddit search complete",
            extra={
                "extra_fields": {
                    "fetched": len(posts),
                    "recent": len(recent),
                    "cutoff": self.recency_cutoff,
                }
            },
        )
        return cap(recent, self.page_size, limit)

    @staticmethod
    def parse_reference(ref: str | None) -> str:
        """
        Resolve a post id from a bare id, a t3_ fullname or a reddit.com URL.

        Raises:
            InvalidReference: malformed input or a URL on another host
        """
        if not ref or not ref.strip():
            raise InvalidReference("Post ID is required")
        ref = ref.strip()

        match = POST_ID_PATTERN.match(ref)
        if match:
            return match.group(1).lower()

        url = require_host(ref, "reddit.com", "Invalid or non-Reddit thread reference")
        match = COMMENTS_PATH_PATTERN.search(urlparse(url).path)
        if not match:
            raise InvalidReference("Reddit URL does not point at a thread", details={"url": ref})
        return match.group(1).lower()

    async def thread(self, ref: str) -> CanonicalThread:
        post_id = self.parse_reference(ref)

        try:
            post = await self.client.get_submission(post_id)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise ThreadNotFound("Post not found", details={"id": post_id}) from e
            raise normalize_provider_error(e, self.name) from e
        except Exception as e:
            raise normalize_provider_error(e, self.name) from e

        if post is None:
            raise ThreadNotFound("Post not found", details={"id": post_id})

        record = self._to_record(post)
        if not record.is_recent(self.recency_cutoff):
            raise ThreadNotFound("Post is older than 6 months", details={"id": post_id})

        try:
            comments = await self.client.get_comments(post_id, amount=self.comment_limit)
        except Exception as e:
            raise normalize_provider_error(e, self.name) from e

        replies = [self._to_reply(c) for c in comments]
        replies = [r for r in replies if r.is_recent(self.recency_cutoff)][: self.reply_page_size]

        return CanonicalThread(
            id=record.id,
            headline=record.headline,
            author=record.author,
            source=record.source,
            created_at=record.created_at,
            url=record.url,
            thumbnail=record.thumbnail,
            body_preview=post.selftext or "",
            is_image=record.is_image,
            replies=tuple(replies),
        )

    async def aclose(self) -> None:
        await self.client.aclose()
