import asyncio

import httpx
import pytest
from dotenv import load_dotenv

from browser.connector import RetryingConnector, RetryPolicy
from browser.session import ReadyCondition

# Load environment variables from .env file for tests
load_dotenv()


class FakeSession:
    """
    In-memory Session: serves fixed HTML and a scripted page height.

    heights: successive values returned by scroll_height(); the last one
    repeats once the list is exhausted.
    """

    def __init__(
        self,
        html: str = "<html><body></body></html>",
        url: str = "https://www.quora.com/What-is-climate",
        heights: list[int] | None = None,
        navigate_error: Exception | None = None,
        navigate_delay_s: float = 0.0,
    ):
        self.html = html
        self.url = url
        self.heights = list(heights or [0])
        self.navigate_error = navigate_error
        self.navigate_delay_s = navigate_delay_s
        self.navigations: list[tuple[str, ReadyCondition]] = []
        self.scrolled = 0
        self.scroll_calls = 0
        self.close_calls = 0

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    async def navigate(self, url, ready=ReadyCondition.NETWORK_IDLE, timeout_s=None):
        self.navigations.append((url, ready))
        if self.navigate_delay_s:
            await asyncio.sleep(self.navigate_delay_s)
        if self.navigate_error is not None:
            raise self.navigate_error
        self.url = url

    async def wait_for(self, selector, timeout_s=None):
        return True

    async def scroll_height(self):
        index = min(self.scroll_calls, len(self.heights) - 1)
        return self.heights[index]

    async def scroll_by(self, distance):
        self.scroll_calls += 1
        self.scrolled += distance

    async def content(self):
        return self.html

    async def current_url(self):
        return self.url

    async def close(self):
        self.close_calls += 1


class FakeLauncher:
    """Session launcher that raises the scripted errors first, then returns sessions."""

    def __init__(self, session: FakeSession | None = None, errors: list[Exception] | None = None):
        self.session = session or FakeSession()
        self.errors = list(errors or [])
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.errors:
            raise self.errors.pop(0)
        return self.session


async def no_sleep(delay: float) -> None:
    return None


@pytest.fixture
def make_session():
    return FakeSession


@pytest.fixture
def make_connector():
    """Build a RetryingConnector around a FakeLauncher; returns (connector, launcher)."""

    def _make(session=None, errors=None, policy=None):
        launcher = FakeLauncher(session, errors)
        connector = RetryingConnector(
            launcher, policy or RetryPolicy(max_attempts=3, backoff_s=0.0), sleep=no_sleep
        )
        return connector, launcher

    return _make


@pytest.fixture
def mock_http():
    """
    Build an httpx.AsyncClient backed by a handler; every request is recorded.

    Returns (client, requests).
    """

    def _make(handler):
        requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        return httpx.AsyncClient(transport=httpx.MockTransport(_record)), requests

    return _make


@pytest.fixture
def mock_env(monkeypatch):
    """Fixture to mock environment variables for testing."""
    env_vars = {
        "GOOGLE_API_KEY": "test-google-key",
        "GOOGLE_CX": "test-cx",
        "NEWS_API_KEY": "test-news-key",
        "BROWSERLESS_TOKEN": "test-token",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars
