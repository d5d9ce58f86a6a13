from typing import Any

from .base_client import BaseContentClient

NEWS_API_BASE_URL = "https://newsapi.org/v2"


class NewsApiClient(BaseContentClient):
    """
    NewsAPI client.

    The key travels in the X-Api-Key header so request URLs can be logged safely.
    Payload shape: {"articles": [{title, url, description, content, author,
    publishedAt, urlToImage, source: {name}}]}.
    """

    provider_name = "news"

    def __init__(self, api_key: str | None, **kwargs):
        super().__init__(**kwargs)
        self._api_key = api_key

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise ValueError("NEWS_API_KEY is not configured")
        return {"X-Api-Key": self._api_key}

    async def top_headlines(self, *, source: str, query: str) -> dict[str, Any]:
        return await self._get_json(
            f"{NEWS_API_BASE_URL}/top-headlines",
            params={"sources": source, "q": query},
            headers=self._headers(),
        )

    async def everything(
        self,
        *,
        sources: list[str],
        query: str,
        from_date: str | None = None,
        sort_by: str = "publishedAt",
    ) -> dict[str, Any]:
        params: dict[str, Any] = {"sources": ",".join(sources), "q": query, "sortBy": sort_by}
        if from_date:
            params["from"] = from_date
        return await self._get_json(
            f"{NEWS_API_BASE_URL}/everything", params=params, headers=self._headers()
        )
