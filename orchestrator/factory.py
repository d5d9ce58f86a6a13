"""Builds the dispatcher and its adapters from configuration."""

from adapters.news_adapter import NewsAdapter
from adapters.quora_adapter import QuoraAdapter
from adapters.quora_thread import QuoraThreadReader
from adapters.reddit_adapter import RedditAdapter
from adapters.sections_adapter import SectionsAdapter
from api.google_search_client import GoogleSearchClient
from api.news_client import NewsApiClient
from api.page_client import StaticPageClient
from api.reddit_client import RedditClient
from browser.connector import (
    LocalBrowserLauncher,
    RemoteBrowserLauncher,
    RetryingConnector,
    RetryPolicy,
)
from browser.scroller import LazyLoadScroller
from config.config import BrowserMode, Config
from utils.logger import get_logger

from .aggregator import AggregationPolicy
from .dispatcher import RequestDispatcher

logger = get_logger(__name__)


def build_connector(config: Config) -> RetryingConnector:
    policy = RetryPolicy(
        max_attempts=config.BROWSER_MAX_ATTEMPTS,
        backoff_s=config.BROWSER_RETRY_DELAY_S,
        backoff_multiplier=config.BROWSER_BACKOFF_MULTIPLIER,
    )

    if config.BROWSER_MODE == BrowserMode.LOCAL.value:
        launcher = LocalBrowserLauncher(
            navigation_timeout_s=config.NAVIGATION_TIMEOUT_S,
            element_timeout_s=config.ELEMENT_TIMEOUT_S,
        )
    else:
        launcher = RemoteBrowserLauncher(
            config.browser_endpoint(),
            navigation_timeout_s=config.NAVIGATION_TIMEOUT_S,
            element_timeout_s=config.ELEMENT_TIMEOUT_S,
        )

    logger.info(
        "Browser connector configured",
        extra={
            "extra_fields": {
                "mode": config.BROWSER_MODE,
                "max_attempts": policy.max_attempts,
                "backoff_s": policy.backoff_s,
            }
        },
    )
    return RetryingConnector(launcher, policy)


def build_digest_policy(config: Config) -> AggregationPolicy:
    return AggregationPolicy(
        max_sources=config.DIGEST_MAX_SOURCES,
        max_total=config.DIGEST_MAX_TOTAL,
        substitutions=config.DIGEST_SUBSTITUTIONS,
        recency_cutoff=config.RECENCY_CUTOFF_EPOCH,
    )


def build_dispatcher(config: Config | None = None) -> RequestDispatcher:
    """
    Wire every adapter to its client.

    Clients live as long as the dispatcher; call dispatcher.aclose() on shutdown.
    """
    config = config or Config()
    http_options = {"timeout_s": config.HTTP_TIMEOUT_S}

    reddit = RedditAdapter(
        RedditClient(
            user_agent=config.REDDIT_USER_AGENT,
            client_id=config.REDDIT_CLIENT_ID,
            client_secret=config.REDDIT_CLIENT_SECRET,
            username=config.REDDIT_USERNAME,
            password=config.REDDIT_PASSWORD,
            **http_options,
        ),
        recency_cutoff=config.RECENCY_CUTOFF_EPOCH,
    )

    quora = QuoraAdapter(
        GoogleSearchClient(config.GOOGLE_API_KEY, config.GOOGLE_CX, **http_options),
        thread_reader=QuoraThreadReader(
            build_connector(config),
            scroller=LazyLoadScroller(
                config.SCROLL_STEP_PX,
                config.SCROLL_INTERVAL_S,
                max_steps=config.SCROLL_MAX_STEPS,
                max_duration_s=config.SCROLL_MAX_DURATION_S,
            ),
        ),
    )

    news = NewsAdapter(
        NewsApiClient(config.NEWS_API_KEY, **http_options),
        from_date=config.NEWS_FROM_DATE,
    )

    sections = SectionsAdapter(
        StaticPageClient(**http_options),
        base_url=config.SECTIONS_BASE_URL,
    )

    return RequestDispatcher(
        {
            reddit.name: reddit,
            quora.name: quora,
            news.name: news,
            sections.name: sections,
        },
        default_policy=build_digest_policy(config),
        default_providers=config.DIGEST_PROVIDERS,
        default_timeout_s=config.REQUEST_TIMEOUT_S,
    )
