"""
Browser-rendered Quora threads.

Quora renders answers client-side and lazily, so a thread is read by driving
a browser: acquire a session, navigate until the network is idle, scroll
until the page stops growing, then extract the title and answer blocks.
"""

from browser.connector import RetryingConnector
from browser.extractor import ExtractionMode, ExtractionSchema, FieldExtractor, FieldSpec
from browser.scroller import LazyLoadScroller
from browser.session import ReadyCondition
from models.canonical_record import CanonicalReply, CanonicalThread
from models.errors import ContentError, NavigationError, NavigationTimeout, ProviderError
from utils.logger import get_logger

from .base import normalize_provider_error, require_host

logger = get_logger(__name__)

PROVIDER = "quora"

# Quora ships no stable class names; answers are located structurally
ANSWER_SELECTOR = (
    "div.q-box > div > div > div > div > div > div > div > div > div > "
    "div:nth-child(2) > div > div > div > div > div > div > div"
)
ANSWER_AUTHOR_SELECTOR = "div > div > div > a > span > span"
ANSWER_BODY_SELECTOR = "div > div:nth-child(2) > div > div > span > span"

ANSWER_SCHEMA = ExtractionSchema(
    name="quora_answer",
    root_selector=ANSWER_SELECTOR,
    fields=(
        FieldSpec("author", ANSWER_AUTHOR_SELECTOR, default="Anonymous"),
        FieldSpec("body", ANSWER_BODY_SELECTOR),
    ),
    required=frozenset({"body"}),
)

QUORA_THREAD_SCHEMA = ExtractionSchema(
    name="quora_thread",
    fields=(
        FieldSpec("title", "h1", default="Untitled"),
        FieldSpec("answers", "", mode=ExtractionMode.NESTED_LIST, schema=ANSWER_SCHEMA, default=[]),
    ),
)


class QuoraThreadReader:
    def __init__(
        self,
        connector: RetryingConnector,
        *,
        scroller: LazyLoadScroller | None = None,
        extractor: FieldExtractor | None = None,
        schema: ExtractionSchema = QUORA_THREAD_SCHEMA,
    ):
        self.connector = connector
        self.scroller = scroller or LazyLoadScroller()
        self.extractor = extractor or FieldExtractor()
        self.schema = schema

    async def read(self, url: str) -> CanonicalThread:
        """
        Load a Quora thread and its answers.

        Raises:
            InvalidReference: url is not an http(s) quora.com URL (no session acquired)
            ConnectionExhausted: no browser session within the retry policy
            ProviderError: navigation failed or timed out (transient)
        """
        url = require_host(url, "quora.com", "Invalid or non-Quora URL provided")

        try:
            async with self.connector.session() as session:
                await session.navigate(url, ReadyCondition.NETWORK_IDLE)
                await self.scroller.scroll_to_stable(session)
                records = await self.extractor.extract(session, self.schema)
        except NavigationError as e:
            raise ProviderError(
                e.message,
                provider=PROVIDER,
                code="timeout" if isinstance(e, NavigationTimeout) else "provider_error",
                transient=True,
                details=e.details,
            ) from e
        except ContentError:
            raise
        except Exception as e:
            logger.error(
                f"Quora thread extraction failed: {e}",
                extra={"extra_fields": {"url": url, "error_type": type(e).__name__}},
                exc_info=True,
            )
            raise normalize_provider_error(e, PROVIDER) from e

        page = records[0] if records else {}
        replies = tuple(
            CanonicalReply(author=answer["author"], body=answer["body"])
            for answer in page.get("answers") or []
        )

        logger.info(
            "Quora thread extracted",
            extra={"extra_fields": {"url": url, "answers": len(replies)}},
        )
        return CanonicalThread(
            id=url,
            headline=page.get("title") or "Untitled",
            url=url,
            source="Quora",
            replies=replies,
        )
