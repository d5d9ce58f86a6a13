from typing import Any

from .base_client import BaseContentClient

CUSTOM_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"


class GoogleSearchClient(BaseContentClient):
    """
    Google Custom Search JSON API client.

    Returns the decoded payload as-is: {"items": [{title, link, snippet, pagemap?}]}.
    The API returns at most 10 items per request.
    """

    provider_name = "google"

    def __init__(self, api_key: str | None, cse_id: str | None, **kwargs):
        super().__init__(**kwargs)
        self._api_key = api_key
        self._cse_id = cse_id

    async def search(
        self, query: str, *, date_restrict: str | None = None, num: int = 10
    ) -> dict[str, Any]:
        if not self._api_key or not self._cse_id:
            raise ValueError("Google Custom Search requires GOOGLE_API_KEY and GOOGLE_CX")

        params: dict[str, Any] = {
            "key": self._api_key,
            "cx": self._cse_id,
            "q": query,
            "num": min(num, 10),
        }
        if date_restrict:
            params["dateRestrict"] = date_restrict
        return await self._get_json(CUSTOM_SEARCH_URL, params=params)
