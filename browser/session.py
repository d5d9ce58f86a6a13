"""
Browser session abstraction.

`Session` is the capability interface the pipeline depends on (navigate,
wait_for, scroll, content, close). `BrowserSession` implements it on top of a
Playwright browser; tests implement it with in-memory fakes.
"""

from enum import Enum
from typing import Any, Protocol, runtime_checkable

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from models.errors import NavigationError, NavigationTimeout
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_NAVIGATION_TIMEOUT_S = 30.0
DEFAULT_ELEMENT_TIMEOUT_S = 10.0


class ReadyCondition(str, Enum):
    """When navigation counts as finished (Playwright wait_until values)."""

    COMMIT = "commit"
    DOM_CONTENT_LOADED = "domcontentloaded"
    LOAD = "load"
    NETWORK_IDLE = "networkidle"


@runtime_checkable
class Session(Protocol):
    async def navigate(
        self, url: str, ready: ReadyCondition = ReadyCondition.NETWORK_IDLE, timeout_s: float | None = None
    ) -> None: ...

    async def wait_for(self, selector: str, timeout_s: float | None = None) -> bool: ...

    async def scroll_height(self) -> int: ...

    async def scroll_by(self, distance: int) -> None: ...

    async def content(self) -> str: ...

    async def current_url(self) -> str: ...

    async def close(self) -> None: ...


class BrowserSession:
    """
    One Playwright browser connection and a single page.

    The session owns the browser (and the Playwright driver that produced
    it); close() releases all of them and may be called any number of times,
    including after a failed navigation.
    """

    def __init__(
        self,
        browser: Any,
        *,
        driver: Any = None,
        navigation_timeout_s: float = DEFAULT_NAVIGATION_TIMEOUT_S,
        element_timeout_s: float = DEFAULT_ELEMENT_TIMEOUT_S,
    ):
        self._browser = browser
        self._driver = driver
        self._page = None
        self._closed = False
        self.navigation_timeout_s = navigation_timeout_s
        self.element_timeout_s = element_timeout_s

    async def _get_page(self):
        if self._closed:
            raise NavigationError("Browser session is closed")
        if self._page is None:
            self._page = await self._browser.new_page()
            self._page.set_default_timeout(self.element_timeout_s * 1000)
        return self._page

    async def navigate(
        self,
        url: str,
        ready: ReadyCondition = ReadyCondition.NETWORK_IDLE,
        timeout_s: float | None = None,
    ) -> None:
        timeout = timeout_s or self.navigation_timeout_s
        try:
            page = await self._get_page()
            await page.goto(url, wait_until=ready.value, timeout=timeout * 1000)
        except PlaywrightTimeoutError as exc:
            raise NavigationTimeout(
                f"Navigation did not reach '{ready.value}' within {timeout}s",
                details={"url": url},
            ) from exc
        except PlaywrightError as exc:
            raise NavigationError(f"Navigation failed: {exc.message}", details={"url": url}) from exc

        logger.debug(
            "Navigation complete",
            extra={"extra_fields": {"url": url, "ready": ready.value}},
        )

    async def wait_for(self, selector: str, timeout_s: float | None = None) -> bool:
        """Wait for an element to attach. Returns False on timeout."""
        page = await self._get_page()
        timeout = timeout_s or self.element_timeout_s
        try:
            await page.wait_for_selector(selector, timeout=timeout * 1000)
            return True
        except PlaywrightTimeoutError:
            return False

    async def scroll_height(self) -> int:
        page = await self._get_page()
        return int(await page.evaluate("() => document.body.scrollHeight") or 0)

    async def scroll_by(self, distance: int) -> None:
        page = await self._get_page()
        await page.evaluate("(d) => window.scrollBy(0, d)", distance)

    async def content(self) -> str:
        page = await self._get_page()
        return await page.content()

    async def current_url(self) -> str:
        page = await self._get_page()
        return page.url

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        for label, closer in (
            ("page", self._page.close if self._page else None),
            ("browser", self._browser.close),
            ("driver", self._driver.stop if self._driver else None),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except Exception as e:
                logger.warning(
                    f"Error closing {label}: {e}",
                    extra={"extra_fields": {"resource": label, "error_type": type(e).__name__}},
                )

    async def __aenter__(self) -> "BrowserSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
