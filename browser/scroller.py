"""
Lazy-load scrolling.

Pages such as Quora only render further answers after the viewport moves.
The scroller steps down the page until the distance travelled covers the
page height, bounded by a step and a wall-clock ceiling so infinite feeds
cannot hold a session forever.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable

from utils.logger import get_logger

from .session import Session

logger = get_logger(__name__)


class LazyLoadScroller:
    def __init__(
        self,
        step_px: int = 100,
        interval_s: float = 0.1,
        *,
        max_steps: int = 500,
        max_duration_s: float = 30.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        if step_px <= 0:
            raise ValueError("step_px must be positive")
        if max_steps < 1:
            raise ValueError("max_steps must be >= 1")
        self.step_px = step_px
        self.interval_s = interval_s
        self.max_steps = max_steps
        self.max_duration_s = max_duration_s
        self._sleep = sleep
        self._clock = clock

    async def scroll_to_stable(
        self,
        session: Session,
        step_px: int | None = None,
        interval_s: float | None = None,
    ) -> None:
        """
        Scroll until the travelled distance reaches the page height.

        Session errors (e.g. a dropped connection) propagate unchanged.
        """
        step = step_px or self.step_px
        interval = self.interval_s if interval_s is None else interval_s
        started = self._clock()
        travelled = 0

        for steps in range(1, self.max_steps + 1):
            height = await session.scroll_height()
            await session.scroll_by(step)
            travelled += step

            if travelled >= height:
                logger.debug(
                    "Page height stabilized",
                    extra={"extra_fields": {"steps": steps, "height": height}},
                )
                return

            if self._clock() - started >= self.max_duration_s:
                logger.warning(
                    "Scroll duration ceiling reached",
                    extra={
                        "extra_fields": {
                            "steps": steps,
                            "height": height,
                            "max_duration_s": self.max_duration_s,
                        }
                    },
                )
                return

            await self._sleep(interval)

        logger.warning(
            "Scroll step ceiling reached",
            extra={"extra_fields": {"max_steps": self.max_steps, "travelled": travelled}},
        )
