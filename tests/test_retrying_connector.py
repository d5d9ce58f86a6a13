"""
Tests for browser session acquisition with bounded retry.
"""

import asyncio

import pytest

from browser.connector import RetryingConnector, RetryPolicy, is_overloaded
from models.errors import ConnectionExhausted

pytestmark = pytest.mark.unit


class TestIsOverloaded:
    def test_http_429_message(self):
        assert is_overloaded(Exception("WebSocket error: 429 Too Many Requests"))

    def test_status_code_attribute(self):
        class BrokerError(Exception):
            status_code = 429

        assert is_overloaded(BrokerError("pool saturated"))

    def test_other_failures_are_not_retryable(self):
        assert not is_overloaded(Exception("401 Unauthorized"))
        assert not is_overloaded(ValueError("bad endpoint"))


class TestRetryPolicy:
    def test_fixed_delay(self):
        policy = RetryPolicy(max_attempts=3, backoff_s=2.0)
        assert [policy.delay_for(a) for a in (1, 2)] == [2.0, 2.0]

    def test_exponential_delay(self):
        policy = RetryPolicy(max_attempts=4, backoff_s=1.0, backoff_multiplier=2.0)
        assert [policy.delay_for(a) for a in (1, 2, 3)] == [1.0, 2.0, 4.0]

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)


class TestRetryingConnector:
    def test_succeeds_on_third_attempt_after_overloads(self, make_connector):
        connector, launcher = make_connector(
            errors=[Exception("429 Too Many Requests"), Exception("429 Too Many Requests")]
        )

        session = asyncio.run(connector.acquire())

        assert session is launcher.session
        assert launcher.calls == 3

    def test_permanent_failure_is_not_retried(self, make_connector):
        connector, launcher = make_connector(errors=[PermissionError("401 Unauthorized")])

        with pytest.raises(PermissionError):
            asyncio.run(connector.acquire())

        assert launcher.calls == 1

    def test_exhaustion_carries_last_error(self, make_connector):
        errors = [Exception(f"429 attempt {i}") for i in range(3)]
        connector, launcher = make_connector(errors=list(errors))

        with pytest.raises(ConnectionExhausted) as exc_info:
            asyncio.run(connector.acquire())

        assert launcher.calls == 3
        assert exc_info.value.last_error is errors[-1]
        assert exc_info.value.attempts == 3
        assert exc_info.value.status_code == 429

    def test_waits_between_retries_only(self, make_session):
        delays = []

        async def record_sleep(delay):
            delays.append(delay)

        errors = [Exception("429"), Exception("429"), Exception("429")]

        async def launcher():
            if errors:
                raise errors.pop(0)
            return make_session()

        connector = RetryingConnector(
            launcher,
            RetryPolicy(max_attempts=3, backoff_s=0.5, backoff_multiplier=2.0),
            sleep=record_sleep,
        )

        with pytest.raises(ConnectionExhausted):
            asyncio.run(connector.acquire())

        # No wait after the final attempt
        assert delays == [0.5, 1.0]

    def test_scoped_session_closed_on_success(self, make_connector):
        connector, launcher = make_connector()

        async def use():
            async with connector.session() as session:
                await session.navigate("https://www.quora.com/q")

        asyncio.run(use())
        assert launcher.session.close_calls == 1

    def test_scoped_session_closed_on_failure(self, make_connector):
        connector, launcher = make_connector()

        async def use():
            async with connector.session():
                raise RuntimeError("extraction blew up")

        with pytest.raises(RuntimeError):
            asyncio.run(use())
        assert launcher.session.close_calls == 1

    def test_scoped_session_closed_on_cancellation(self, make_connector, make_session):
        session = make_session(navigate_delay_s=5.0)
        connector, launcher = make_connector(session=session)

        async def use():
            async with connector.session() as s:
                await s.navigate("https://www.quora.com/q")

        async def run():
            await asyncio.wait_for(use(), timeout=0.05)

        with pytest.raises(asyncio.TimeoutError):
            asyncio.run(run())
        assert session.close_calls == 1
