"""
Browser session acquisition with bounded retry.

The remote session broker answers HTTP 429 when its pool is saturated; those
failures are retried with a delay, anything else propagates on the first
attempt.
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass

from playwright.async_api import async_playwright

from models.errors import ConnectionExhausted

from .session import (
    DEFAULT_ELEMENT_TIMEOUT_S,
    DEFAULT_NAVIGATION_TIMEOUT_S,
    BrowserSession,
    Session,
)
from utils.logger import get_logger

logger = get_logger(__name__)

OVERLOAD_MARKERS = ("429", "too many requests", "overloaded", "rate limit")

SessionLauncher = Callable[[], Awaitable[Session]]


def is_overloaded(exc: BaseException) -> bool:
    """True when the failure is the broker signalling it is saturated."""
    status = getattr(exc, "status_code", None)
    if status == 429:
        return True
    text = str(exc).lower()
    return any(marker in text for marker in OVERLOAD_MARKERS)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Retry configuration for session acquisition.

    Attributes:
        max_attempts: Total attempts including the first (>= 1)
        backoff_s: Delay before the second attempt
        backoff_multiplier: 1.0 keeps the delay fixed; >1 grows it exponentially
        retryable: Predicate deciding whether a failure may be retried
    """

    max_attempts: int = 3
    backoff_s: float = 2.0
    backoff_multiplier: float = 1.0
    retryable: Callable[[BaseException], bool] = is_overloaded

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.backoff_s < 0 or self.backoff_multiplier < 1.0:
            raise ValueError("backoff_s must be >= 0 and backoff_multiplier >= 1.0")

    def delay_for(self, attempt: int) -> float:
        """Delay after the given (1-based) failed attempt."""
        return self.backoff_s * (self.backoff_multiplier ** (attempt - 1))


class RemoteBrowserLauncher:
    """Connects to a hosted Chromium over CDP (e.g. wss://chrome.browserless.io?token=...)."""

    def __init__(
        self,
        endpoint: str,
        *,
        connect_timeout_s: float = 15.0,
        navigation_timeout_s: float = DEFAULT_NAVIGATION_TIMEOUT_S,
        element_timeout_s: float = DEFAULT_ELEMENT_TIMEOUT_S,
    ):
        self._endpoint = endpoint
        self._connect_timeout_s = connect_timeout_s
        self._navigation_timeout_s = navigation_timeout_s
        self._element_timeout_s = element_timeout_s

    async def __call__(self) -> Session:
        driver = await async_playwright().start()
        try:
            browser = await driver.chromium.connect_over_cdp(
                self._endpoint, timeout=self._connect_timeout_s * 1000
            )
        except BaseException:
            # A failed connect must not leave the driver process behind
            await driver.stop()
            raise
        return BrowserSession(
            browser,
            driver=driver,
            navigation_timeout_s=self._navigation_timeout_s,
            element_timeout_s=self._element_timeout_s,
        )


class LocalBrowserLauncher:
    """Launches a local headless Chromium."""

    def __init__(
        self,
        *,
        headless: bool = True,
        navigation_timeout_s: float = DEFAULT_NAVIGATION_TIMEOUT_S,
        element_timeout_s: float = DEFAULT_ELEMENT_TIMEOUT_S,
    ):
        self._headless = headless
        self._navigation_timeout_s = navigation_timeout_s
        self._element_timeout_s = element_timeout_s

    async def __call__(self) -> Session:
        driver = await async_playwright().start()
        try:
            browser = await driver.chromium.launch(
                headless=self._headless,
                args=["--disable-blink-features=AutomationControlled"],
            )
        except BaseException:
            await driver.stop()
            raise
        return BrowserSession(
            browser,
            driver=driver,
            navigation_timeout_s=self._navigation_timeout_s,
            element_timeout_s=self._element_timeout_s,
        )


class RetryingConnector:
    """
    Acquires browser sessions, retrying transient broker overloads.

    Example usage:
        connector = RetryingConnector(RemoteBrowserLauncher(endpoint), RetryPolicy())
        async with connector.session() as session:
            await session.navigate(url)
    """

    def __init__(
        self,
        launcher: SessionLauncher,
        policy: RetryPolicy | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._launcher = launcher
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    async def acquire(self) -> Session:
        """
        Acquire a live session.

        Raises:
            ConnectionExhausted: every attempt failed with a retryable error
            Exception: the first non-retryable failure, unchanged
        """
        last_error: BaseException | None = None

        for attempt in range(1, self.policy.max_attempts + 1):
            try:
                session = await self._launcher()
            except Exception as e:
                if not self.policy.retryable(e):
                    raise
                last_error = e
                if attempt < self.policy.max_attempts:
                    delay = self.policy.delay_for(attempt)
                    logger.warning(
                        f"Browser broker overloaded, retrying ({attempt}/{self.policy.max_attempts})",
                        extra={
                            "extra_fields": {
                                "attempt": attempt,
                                "max_attempts": self.policy.max_attempts,
                                "delay_s": delay,
                            }
                        },
                    )
                    await self._sleep(delay)
                continue

            if attempt > 1:
                logger.info(
                    "Browser session acquired after retry",
                    extra={"extra_fields": {"attempt": attempt}},
                )
            return session

        logger.error(
            "Browser session pool exhausted",
            extra={
                "extra_fields": {
                    "attempts": self.policy.max_attempts,
                    "last_error": str(last_error),
                }
            },
        )
        raise ConnectionExhausted(last_error=last_error, attempts=self.policy.max_attempts)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Session]:
        """Scoped acquisition: the session is closed on every exit path."""
        session = await self.acquire()
        try:
            yield session
        finally:
            await session.close()
