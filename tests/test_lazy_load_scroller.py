import asyncio

import pytest

from browser.scroller import LazyLoadScroller

pytestmark = pytest.mark.unit


async def no_sleep(delay):
    return None


class FakeClock:
    def __init__(self, tick_s: float):
        self.now = 0.0
        self.tick_s = tick_s

    def __call__(self):
        self.now += self.tick_s
        return self.now


def test_stops_once_height_stabilizes(make_session):
    # Height grows for the first 3 steps, then stays at 600
    session = make_session(heights=[300, 400, 500, 600])
    scroller = LazyLoadScroller(step_px=100, interval_s=0.0, sleep=no_sleep)

    asyncio.run(scroller.scroll_to_stable(session))

    assert session.scroll_calls == 6
    assert session.scrolled == 600


def test_short_page_needs_one_step(make_session):
    session = make_session(heights=[80])
    scroller = LazyLoadScroller(step_px=100, sleep=no_sleep)

    asyncio.run(scroller.scroll_to_stable(session))

    assert session.scroll_calls == 1


def test_step_ceiling_bounds_infinite_feed(make_session):
    class InfiniteFeed(make_session):
        async def scroll_height(self):
            return self.scrolled + 1000

    session = InfiniteFeed()
    scroller = LazyLoadScroller(step_px=100, max_steps=25, sleep=no_sleep)

    asyncio.run(scroller.scroll_to_stable(session))

    assert session.scroll_calls == 25


def test_duration_ceiling_bounds_slow_feed(make_session):
    session = make_session(heights=[10_000_000])
    scroller = LazyLoadScroller(
        step_px=100,
        max_steps=10_000,
        max_duration_s=1.0,
        sleep=no_sleep,
        clock=FakeClock(tick_s=0.25),
    )

    asyncio.run(scroller.scroll_to_stable(session))

    assert session.scroll_calls < 10


def test_sleeps_between_steps(make_session):
    delays = []

    async def record_sleep(delay):
        delays.append(delay)

    session = make_session(heights=[300])
    scroller = LazyLoadScroller(step_px=100, interval_s=0.1, sleep=record_sleep)

    asyncio.run(scroller.scroll_to_stable(session, interval_s=0.05))

    assert delays == [0.05, 0.05]


def test_session_errors_propagate(make_session):
    class Disconnected(make_session):
        async def scroll_by(self, distance):
            raise ConnectionError("Target closed")

    scroller = LazyLoadScroller(sleep=no_sleep)

    with pytest.raises(ConnectionError):
        asyncio.run(scroller.scroll_to_stable(Disconnected(heights=[1000])))


def test_rejects_non_positive_step():
    with pytest.raises(ValueError):
        LazyLoadScroller(step_px=0)
