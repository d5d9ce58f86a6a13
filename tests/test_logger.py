"""
Tests that credentials carried in browser endpoints never reach the log files.
"""

import asyncio
import logging
import sys

import pytest

from adapters.quora_thread import QuoraThreadReader
from models.errors import ConnectionExhausted, ProviderError
from utils.logger import JsonFormatter, RedactingFormatter, redact_secrets

pytestmark = pytest.mark.unit

TOKEN = "s3cret-browserless-token"
ENDPOINT = f"wss://chrome.example.io?token={TOKEN}"


def rendered(caplog) -> str:
    formatter = JsonFormatter()
    return "\n".join(formatter.format(record) for record in caplog.records)


@pytest.mark.parametrize(
    "text, expected",
    [
        (ENDPOINT, "wss://chrome.example.io?token=***"),
        ("https://newsapi.org/v2/everything?q=a&apiKey=abc123&page=2", "https://newsapi.org/v2/everything?q=a&apiKey=***&page=2"),
        ("no credentials here", "no credentials here"),
    ],
)
def test_redact_secrets(text, expected):
    assert redact_secrets(text) == expected


def test_formatters_mask_message_and_traceback():
    try:
        raise RuntimeError(f"connect_over_cdp: 401 Unauthorized\n  - <ws connecting> {ENDPOINT}")
    except RuntimeError:
        record = logging.getLogger("test").makeRecord(
            "test", logging.ERROR, __file__, 1, f"failed {ENDPOINT}", None, sys.exc_info()
        )

    assert TOKEN not in JsonFormatter().format(record)
    assert TOKEN not in RedactingFormatter("%(message)s").format(record)


def test_exhausted_pool_log_hides_token(make_connector, caplog):
    errors = [Exception(f"429 Too Many Requests connecting to {ENDPOINT}") for _ in range(3)]
    connector, _ = make_connector(errors=errors)

    with caplog.at_level(logging.INFO):
        with pytest.raises(ConnectionExhausted):
            asyncio.run(connector.acquire())

    output = rendered(caplog)
    assert "Browser session pool exhausted" in output
    assert TOKEN not in output


def test_failed_thread_read_log_hides_token(make_connector, caplog):
    connector, _ = make_connector(errors=[Exception(f"401 Unauthorized: {ENDPOINT}")])
    reader = QuoraThreadReader(connector)

    with caplog.at_level(logging.INFO):
        with pytest.raises(ProviderError):
            asyncio.run(reader.read("https://www.quora.com/What-is-climate"))

    output = rendered(caplog)
    assert "Quora thread extraction failed" in output
    assert TOKEN not in output
