"""
Tests for browser-rendered Quora threads.

The reader is driven end to end (connector -> navigate -> scroll -> extract)
against fake sessions, so no browser is launched.
"""

import asyncio

import pytest

from adapters.quora_adapter import QuoraAdapter
from adapters.quora_thread import QuoraThreadReader
from browser.connector import RetryPolicy
from browser.extractor import ExtractionMode, ExtractionSchema, FieldSpec
from browser.scroller import LazyLoadScroller
from browser.session import ReadyCondition
from models.errors import ConnectionExhausted, InvalidReference, NavigationError, NavigationTimeout, ProviderError

pytestmark = pytest.mark.unit

THREAD_URL = "https://www.quora.com/Why-is-the-climate-changing"

SIMPLE_SCHEMA = ExtractionSchema(
    name="simple_thread",
    fields=(
        FieldSpec("title", "h1", default="Untitled"),
        FieldSpec(
            "answers",
            "",
            mode=ExtractionMode.NESTED_LIST,
            default=[],
            schema=ExtractionSchema(
                name="simple_answer",
                root_selector=".answer",
                fields=(
                    FieldSpec("author", ".author", default="Anonymous"),
                    FieldSpec("body", ".body"),
                ),
                required=frozenset({"body"}),
            ),
        ),
    ),
)

THREAD_HTML = """
<h1>Why is the climate changing?</h1>
<div class="answer"><span class="author">Dr. Lee</span><span class="body">Greenhouse gases.</span></div>
<div class="answer"><span class="body">Mostly CO2.</span></div>
<div class="answer"><span class="author">Spam</span></div>
"""


async def no_sleep(delay):
    return None


def make_reader(connector, schema=SIMPLE_SCHEMA):
    return QuoraThreadReader(
        connector, scroller=LazyLoadScroller(sleep=no_sleep), schema=schema
    )


class TestReferenceValidation:
    @pytest.mark.parametrize(
        "ref",
        [
            "https://www.reddit.com/r/climate/comments/abc123/",
            "https://notquora.com/question",
            "ftp://www.quora.com/question",
            "not a url",
            "",
        ],
    )
    def test_rejects_before_any_session(self, make_connector, ref):
        connector, launcher = make_connector()

        with pytest.raises(InvalidReference):
            asyncio.run(make_reader(connector).read(ref))

        assert launcher.calls == 0


class TestThreadExtraction:
    def test_extracts_title_and_answers_in_order(self, make_connector, make_session):
        session = make_session(html=THREAD_HTML, heights=[250])
        connector, _ = make_connector(session=session)

        thread = asyncio.run(make_reader(connector).read(THREAD_URL))

        assert thread.headline == "Why is the climate changing?"
        assert thread.url == THREAD_URL
        assert thread.source == "Quora"
        assert [(r.author, r.body) for r in thread.replies] == [
            ("Dr. Lee", "Greenhouse gases."),
            ("Anonymous", "Mostly CO2."),
        ]
        assert session.navigations == [(THREAD_URL, ReadyCondition.NETWORK_IDLE)]
        assert session.scroll_calls == 3
        assert session.close_calls == 1

    def test_page_without_answers_is_empty_thread(self, make_connector, make_session):
        connector, _ = make_connector(session=make_session(html="<p>nothing here</p>"))

        thread = asyncio.run(make_reader(connector).read(THREAD_URL))

        assert thread.headline == "Untitled"
        assert thread.replies == ()

    def test_default_schema_reads_title(self, make_connector, make_session):
        connector, _ = make_connector(session=make_session(html="<h1>Question?</h1>"))

        thread = asyncio.run(QuoraThreadReader(connector, scroller=LazyLoadScroller(sleep=no_sleep)).read(THREAD_URL))

        assert thread.headline == "Question?"
        assert thread.replies == ()


class TestFailures:
    def test_navigation_timeout_is_transient_and_releases_session(self, make_connector, make_session):
        session = make_session(navigate_error=NavigationTimeout("slow page"))
        connector, _ = make_connector(session=session)

        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(make_reader(connector).read(THREAD_URL))

        assert exc_info.value.transient
        assert exc_info.value.code == "timeout"
        assert session.close_calls == 1

    def test_navigation_error_is_transient(self, make_connector, make_session):
        session = make_session(navigate_error=NavigationError("net::ERR_ABORTED"))
        connector, _ = make_connector(session=session)

        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(make_reader(connector).read(THREAD_URL))

        assert exc_info.value.transient
        assert exc_info.value.code == "provider_error"
        assert session.close_calls == 1

    def test_unexpected_error_still_releases_session(self, make_connector, make_session):
        class Broken(make_session):
            async def content(self):
                raise RuntimeError("Target closed")

        session = Broken()
        connector, _ = make_connector(session=session)

        with pytest.raises(ProviderError):
            asyncio.run(make_reader(connector).read(THREAD_URL))

        assert session.close_calls == 1

    def test_exhausted_pool_propagates(self, make_connector):
        connector, launcher = make_connector(
            errors=[Exception("429")] * 2, policy=RetryPolicy(max_attempts=2, backoff_s=0.0)
        )

        with pytest.raises(ConnectionExhausted):
            asyncio.run(make_reader(connector).read(THREAD_URL))

        assert launcher.calls == 2


class TestQuoraAdapterThread:
    def test_delegates_to_reader(self, make_connector, make_session):
        connector, _ = make_connector(session=make_session(html=THREAD_HTML))
        adapter = QuoraAdapter(client=None, thread_reader=make_reader(connector))

        thread = asyncio.run(adapter.thread(THREAD_URL))

        assert len(thread.replies) == 2

    def test_without_reader_threads_are_unsupported(self):
        adapter = QuoraAdapter(client=None)

        with pytest.raises(ProviderError) as exc_info:
            asyncio.run(adapter.thread(THREAD_URL))

        assert not exc_info.value.transient
