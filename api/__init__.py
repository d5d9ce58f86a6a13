"""
Provider HTTP clients consumed by the adapters.
"""

from .base_client import BaseContentClient
from .google_search_client import GoogleSearchClient
from .news_client import NewsApiClient
from .page_client import StaticPageClient
from .reddit_client import RedditClient, RedditComment, RedditPost

__all__ = [
    "BaseContentClient",
    "GoogleSearchClient",
    "NewsApiClient",
    "RedditClient",
    "RedditComment",
    "RedditPost",
    "StaticPageClient",
]
