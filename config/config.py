import json
import os
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_CORS_ORIGINS = "http://localhost:3000,https://reddit-user-gen-content.netlify.app"
DEFAULT_DIGEST_SUBSTITUTIONS = '{"Bloomberg": ["Forbes", "Business Insider"], "Reuters": ["BBC News", "CNN"]}'


class BrowserMode(Enum):
    """How browser sessions are obtained."""
    REMOTE = "remote"
    LOCAL = "local"


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Config:
    """Configuration management for the application."""

    def __init__(self):
        """Initialize configuration with environment variables."""
        env_path = Path(__file__).parent.parent / '.env'
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # Reddit (structured API)
        self.REDDIT_CLIENT_ID = os.getenv('REDDIT_CLIENT_ID')
        self.REDDIT_CLIENT_SECRET = os.getenv('REDDIT_CLIENT_SECRET')
        self.REDDIT_USERNAME = os.getenv('REDDIT_USERNAME')
        self.REDDIT_PASSWORD = os.getenv('REDDIT_PASSWORD')
        self.REDDIT_USER_AGENT = os.getenv('REDDIT_USER_AGENT', 'ugc-app/0.1')

        # Google Custom Search (Quora search)
        self.GOOGLE_API_KEY = os.getenv('GOOGLE_API_KEY')
        self.GOOGLE_CX = os.getenv('GOOGLE_CX')

        # NewsAPI
        self.NEWS_API_KEY = os.getenv('NEWS_API_KEY')
        self.NEWS_FROM_DATE = os.getenv('NEWS_FROM_DATE', '2025-04-01')

        # Browser sessions (Quora threads)
        self.BROWSER_MODE = self._parse_browser_mode(os.getenv('BROWSER_MODE', BrowserMode.REMOTE.value))
        self.BROWSERLESS_TOKEN = os.getenv('BROWSERLESS_TOKEN')
        self.BROWSER_WS_ENDPOINT = os.getenv('BROWSER_WS_ENDPOINT', 'wss://chrome.browserless.io')
        self.BROWSER_MAX_ATTEMPTS = _env_int('BROWSER_MAX_ATTEMPTS', 3)
        self.BROWSER_RETRY_DELAY_S = _env_float('BROWSER_RETRY_DELAY_S', 2.0)
        self.BROWSER_BACKOFF_MULTIPLIER = _env_float('BROWSER_BACKOFF_MULTIPLIER', 1.0)
        self.NAVIGATION_TIMEOUT_S = _env_float('NAVIGATION_TIMEOUT_S', 30.0)
        self.ELEMENT_TIMEOUT_S = _env_float('ELEMENT_TIMEOUT_S', 10.0)
        self.SCROLL_STEP_PX = _env_int('SCROLL_STEP_PX', 100)
        self.SCROLL_INTERVAL_S = _env_float('SCROLL_INTERVAL_S', 0.1)
        self.SCROLL_MAX_STEPS = _env_int('SCROLL_MAX_STEPS', 500)
        self.SCROLL_MAX_DURATION_S = _env_float('SCROLL_MAX_DURATION_S', 30.0)

        # Static news sections
        self.SECTIONS_BASE_URL = os.getenv('SECTIONS_BASE_URL', 'https://www.digitalworldwidenews.com')

        # Shared request behaviour
        self.RECENCY_CUTOFF_EPOCH = _env_float('RECENCY_CUTOFF_EPOCH', 1729814400)  # ~Oct 25, 2024
        self.HTTP_TIMEOUT_S = _env_float('HTTP_TIMEOUT_S', 15.0)
        self.REQUEST_TIMEOUT_S = _env_float('REQUEST_TIMEOUT_S', 60.0)
        self.CORS_ORIGINS = _env_list('CORS_ORIGINS', DEFAULT_CORS_ORIGINS)

        # Digest aggregation policy
        self.DIGEST_PROVIDERS = _env_list('DIGEST_PROVIDERS', 'news,reddit,quora')
        self.DIGEST_MAX_SOURCES = _env_int('DIGEST_MAX_SOURCES', 8)
        self.DIGEST_MAX_TOTAL = _env_int('DIGEST_MAX_TOTAL', 8)
        self.DIGEST_SUBSTITUTIONS = self._parse_substitutions(
            os.getenv('DIGEST_SUBSTITUTIONS', DEFAULT_DIGEST_SUBSTITUTIONS)
        )

    @staticmethod
    def _parse_browser_mode(raw: str) -> str:
        mode = raw.strip().lower()
        valid = [m.value for m in BrowserMode]
        if mode not in valid:
            raise ValueError(f"BROWSER_MODE must be one of {valid}, got '{raw}'")
        return mode

    @staticmethod
    def _parse_substitutions(raw: str) -> dict[str, tuple[str, ...]]:
        """
        Parse the substitution map: {"Target": ["Fallback A", "Fallback B"]}.

        Key order is preserved; it decides placement order in the digest.
        """
        if not raw or not raw.strip():
            return {}
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("DIGEST_SUBSTITUTIONS must be a JSON object")
        return {str(target): tuple(str(f) for f in fallbacks) for target, fallbacks in data.items()}

    def missing_credentials(self) -> list[str]:
        """
        List credential variables that are unset.

        Providers with missing credentials still start; their calls fail with a
        provider error at request time.
        """
        required = ['GOOGLE_API_KEY', 'GOOGLE_CX', 'NEWS_API_KEY']
        if self.BROWSER_MODE == BrowserMode.REMOTE.value:
            required.append('BROWSERLESS_TOKEN')
        return [name for name in required if not getattr(self, name)]

    def browser_endpoint(self) -> str:
        """Remote CDP endpoint including the bearer token."""
        return f"{self.BROWSER_WS_ENDPOINT}?token={self.BROWSERLESS_TOKEN or ''}"
