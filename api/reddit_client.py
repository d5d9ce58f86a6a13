import time
from dataclasses import dataclass
from typing import Any

import httpx

from utils.logger import get_logger

from .base_client import BaseContentClient

logger = get_logger(__name__)

PUBLIC_BASE_URL = "https://www.reddit.com"
OAUTH_BASE_URL = "https://oauth.reddit.com"
TOKEN_URL = "https://www.reddit.com/api/v1/access_token"


def _epoch(value: Any) -> float | None:
    # Missing or zero timestamps mean "unknown", not 1970
    if value in (None, "", 0):
        return None
    return float(value)


@dataclass(frozen=True)
class RedditPost:
    id: str
    title: str
    subreddit: str
    author: str
    score: int
    num_comments: int
    created_utc: float | None
    thumbnail: str | None
    url: str
    permalink: str
    selftext: str = ""

    @classmethod
    def from_listing(cls, data: dict[str, Any]) -> "RedditPost":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title") or "",
            subreddit=data.get("subreddit") or "",
            author=data.get("author") or "[deleted]",
            score=int(data.get("score") or 0),
            num_comments=int(data.get("num_comments") or 0),
            created_utc=_epoch(data.get("created_utc")),
            thumbnail=data.get("thumbnail"),
            url=data.get("url") or "",
            permalink=data.get("permalink") or "",
            selftext=data.get("selftext") or "",
        )


@dataclass(frozen=True)
class RedditComment:
    id: str
    author: str
    body: str
    score: int
    created_utc: float | None
    permalink: str

    @classmethod
    def from_listing(cls, data: dict[str, Any]) -> "RedditComment":
        return cls(
            id=str(data.get("id", "")),
            author=data.get("author") or "[deleted]",
            body=data.get("body") or "",
            score=int(data.get("score") or 0),
            created_utc=_epoch(data.get("created_utc")),
            permalink=data.get("permalink") or "",
        )


class RedditClient(BaseContentClient):
    """
    Reddit JSON API client returning typed posts and comments.

    With script-app credentials it authenticates through the OAuth password
    grant and talks to oauth.reddit.com; otherwise it falls back to the
    public .json endpoints (lower rate limits).
    """

    provider_name = "reddit"

    def __init__(
        self,
        *,
        user_agent: str,
        client_id: str | None = None,
        client_secret: str | None = None,
        username: str | None = None,
        password: str | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.user_agent = user_agent
        self._credentials = (client_id, client_secret, username, password)
        self._token: str | None = None
        self._token_expires_at = 0.0

    @property
    def has_credentials(self) -> bool:
        return all(self._credentials)

    async def _access_token(self) -> str:
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        client_id, client_secret, username, password = self._credentials
        response = await self._http.post(
            TOKEN_URL,
            auth=(client_id, client_secret),
            data={"grant_type": "password", "username": username, "password": password},
            headers={"User-Agent": self.user_agent},
        )
        response.raise_for_status()
        payload = response.json()
        if "access_token" not in payload:
            # Reddit answers 200 with {"error": ...} for bad credentials
            raise httpx.HTTPStatusError(
                f"401 Unauthorized: {payload.get('error', 'no access_token')}",
                request=response.request,
                response=httpx.Response(401, request=response.request),
            )
        self._token = payload["access_token"]
        # Refresh a minute early
        self._token_expires_at = time.monotonic() + float(payload.get("expires_in", 3600)) - 60
        logger.info("Reddit OAuth token acquired")
        return self._token

    async def _request(self, path: str, params: dict[str, Any]) -> Any:
        headers = {"User-Agent": self.user_agent}
        if self.has_credentials:
            headers["Authorization"] = f"bearer {await self._access_token()}"
            url = f"{OAUTH_BASE_URL}{path}"
        else:
            url = f"{PUBLIC_BASE_URL}{path}.json"
        return await self._get_json(url, params={**params, "raw_json": 1}, headers=headers)

    async def search(self, query: str, limit: int = 50) -> list[RedditPost]:
        """Site-wide search, newest API ordering (relevance)."""
        payload = await self._request("/search", {"q": query, "limit": limit})
        children = (payload.get("data") or {}).get("children") or []
        return [RedditPost.from_listing(c["data"]) for c in children if c.get("kind") == "t3"]

    async def get_submission(self, post_id: str) -> RedditPost | None:
        listing = await self._request(f"/comments/{post_id}", {"limit": 1})
        children = _listing_children(listing, 0)
        posts = [c["data"] for c in children if c.get("kind") == "t3"]
        return RedditPost.from_listing(posts[0]) if posts else None

    async def get_comments(self, post_id: str, amount: int = 50) -> list[RedditComment]:
        """Top-level comments in the order Reddit returns them."""
        listing = await self._request(f"/comments/{post_id}", {"limit": amount, "depth": 1})
        children = _listing_children(listing, 1)
        # "more" stubs (kind t1 is a comment) are dropped
        return [RedditComment.from_listing(c["data"]) for c in children if c.get("kind") == "t1"][
            :amount
        ]


def _listing_children(listing: Any, index: int) -> list[dict[str, Any]]:
    if not isinstance(listing, list) or len(listing) <= index:
        return []
    return (listing[index].get("data") or {}).get("children") or []
