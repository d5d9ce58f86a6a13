import asyncio

import httpx
import pytest

from adapters.quora_adapter import QuoraAdapter, answer_count
from api.google_search_client import GoogleSearchClient
from models.errors import ProviderError

pytestmark = pytest.mark.unit

ITEMS = [
    {
        "title": "What causes climate change? - Quora",
        "link": "https://www.quora.com/What-causes-climate-change",
        "snippet": "12 Answers · Greenhouse gases trap heat...",
        "pagemap": {"cse_thumbnail": [{"src": "https://encrypted-tbn0.gstatic.com/a.jpg"}]},
    },
    {
        "title": "Is climate change reversible?",
        "link": "https://www.quora.com/Is-climate-change-reversible",
        "snippet": "Partly.",
    },
    {"title": "", "link": "https://www.quora.com/untitled", "snippet": "dropped"},
]


def make_adapter(mock_http, handler, api_key="k", cx="cx"):
    http, requests = mock_http(handler)
    return QuoraAdapter(GoogleSearchClient(api_key, cx, http_client=http)), requests


def test_builds_site_restricted_query(mock_http):
    adapter, requests = make_adapter(mock_http, lambda r: httpx.Response(200, json={"items": ITEMS}))

    asyncio.run(adapter.search("climate change"))

    [request] = requests
    assert request.url.host == "www.googleapis.com"
    assert request.url.params["q"] == 'site:quora.com "climate change"'
    assert request.url.params["dateRestrict"] == "m6"
    assert request.url.params["cx"] == "cx"


def test_maps_items_to_records(mock_http):
    adapter, _ = make_adapter(mock_http, lambda r: httpx.Response(200, json={"items": ITEMS}))

    records = asyncio.run(adapter.search("climate change"))

    assert len(records) == 2
    first, second = records
    assert first.headline == "What causes climate change? - Quora"
    assert first.url == "https://www.quora.com/What-causes-climate-change"
    assert first.thumbnail == "https://encrypted-tbn0.gstatic.com/a.jpg"
    assert first.body_preview.startswith("12 Answers")
    assert first.source == "Quora"
    assert second.thumbnail is None
    assert second.created_at is None


def test_no_items_is_empty(mock_http):
    adapter, _ = make_adapter(mock_http, lambda r: httpx.Response(200, json={}))

    assert asyncio.run(adapter.search("climate")) == []


def test_quota_exceeded_is_transient(mock_http):
    adapter, _ = make_adapter(
        mock_http,
        lambda r: httpx.Response(429, json={"error": {"code": 429, "message": "Quota exceeded"}}),
    )

    with pytest.raises(ProviderError) as exc_info:
        asyncio.run(adapter.search("climate"))

    assert exc_info.value.code == "rate_limit"
    assert exc_info.value.details == "Quota exceeded"


def test_missing_credentials_make_no_request(mock_http):
    adapter, requests = make_adapter(mock_http, lambda r: httpx.Response(200, json={}), api_key=None)

    with pytest.raises(ProviderError):
        asyncio.run(adapter.search("climate"))

    assert requests == []


@pytest.mark.parametrize(
    "snippet, expected",
    [("12 Answers · text", 12), ("1,204 answers", 1204), ("1 Answer", 1), ("no count", None)],
)
def test_answer_count(snippet, expected):
    assert answer_count(snippet) == expected
