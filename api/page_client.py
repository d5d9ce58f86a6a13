from .base_client import BaseContentClient

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)


class StaticPageClient(BaseContentClient):
    """Fetches server-rendered HTML pages that need no JavaScript."""

    provider_name = "static_page"

    def __init__(self, user_agent: str = DESKTOP_USER_AGENT, **kwargs):
        super().__init__(**kwargs)
        self.user_agent = user_agent

    async def fetch(self, url: str) -> tuple[str, str]:
        """
        Fetch a page.

        Returns:
            (html, final_url) where final_url reflects redirects
        """
        response = await self._http.get(url, headers={"User-Agent": self.user_agent})
        response.raise_for_status()
        return response.text, str(response.url)
