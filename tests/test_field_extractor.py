"""
Tests for declarative field extraction.

Schemas are plain data, so they are exercised here against static HTML and
a fake session instead of a live browser.
"""

import asyncio

import pytest

from browser.extractor import ExtractionMode, ExtractionSchema, FieldExtractor, FieldSpec

pytestmark = pytest.mark.unit

CARDS_HTML = """
<html><body>
  <div class="card">
    <h2><a href="/posts/1">First post</a></h2>
    <span class="byline">By Jane Doe</span>
    <img src="/img/1.png">
    <p>Preview one.</p>
  </div>
  <div class="card">
    <h2>Second post</h2>
    <a href="https://example.com/posts/2">read</a>
  </div>
  <div class="card">
    <span class="byline">By Nobody</span>
  </div>
</body></html>
"""

CARD_SCHEMA = ExtractionSchema(
    name="cards",
    root_selector="div.card",
    fields=(
        FieldSpec("title", "h2"),
        FieldSpec(
            "link",
            ("h2 a", "a"),
            mode=ExtractionMode.ATTRIBUTE,
            attribute="href",
            absolute_url=True,
        ),
        FieldSpec("author", ".byline", default="Unknown", strip_pattern=r"^\s*By"),
        FieldSpec("image", "img", mode=ExtractionMode.ATTRIBUTE, attribute="src"),
        FieldSpec("preview", "p"),
    ),
    required=frozenset({"title"}),
)


class TestExtractHtml:
    def setup_method(self):
        self.extractor = FieldExtractor()
        self.records = self.extractor.extract_html(
            CARDS_HTML, CARD_SCHEMA, base_url="https://example.com/news/"
        )

    def test_drops_records_missing_required_fields(self):
        assert [r["title"] for r in self.records] == ["First post", "Second post"]

    def test_resolves_relative_urls(self):
        assert self.records[0]["link"] == "https://example.com/posts/1"

    def test_falls_back_to_next_selector(self):
        assert self.records[1]["link"] == "https://example.com/posts/2"

    def test_missing_fields_use_defaults(self):
        second = self.records[1]
        assert second["author"] == "Unknown"
        assert second["image"] is None
        assert second["preview"] is None

    def test_strip_pattern(self):
        assert self.records[0]["author"] == "Jane Doe"

    def test_attribute_without_absolute_resolution_is_raw(self):
        assert self.records[0]["image"] == "/img/1.png"


def test_whole_document_is_one_record_without_root():
    schema = ExtractionSchema(name="page", fields=(FieldSpec("title", "h1", default="Untitled"),))

    assert FieldExtractor().extract_html("<h1>Hello</h1>", schema) == [{"title": "Hello"}]
    assert FieldExtractor().extract_html("<p>no heading</p>", schema) == [{"title": "Untitled"}]


def test_nested_list_keeps_document_order():
    answers = ExtractionSchema(
        name="answers",
        root_selector=".answer",
        fields=(
            FieldSpec("author", ".who", default="Anonymous"),
            FieldSpec("body", ".text"),
        ),
        required=frozenset({"body"}),
    )
    schema = ExtractionSchema(
        name="thread",
        fields=(
            FieldSpec("title", "h1"),
            FieldSpec("answers", "", mode=ExtractionMode.NESTED_LIST, schema=answers, default=[]),
        ),
    )
    html = """
    <h1>Why is the sky blue?</h1>
    <div class="answer"><span class="who">Ann</span><span class="text">Rayleigh.</span></div>
    <div class="answer"><span class="text">Scattering.</span></div>
    <div class="answer"><span class="who">Empty</span></div>
    """

    [record] = FieldExtractor().extract_html(html, schema)

    assert record["answers"] == [
        {"author": "Ann", "body": "Rayleigh."},
        {"author": "Anonymous", "body": "Scattering."},
    ]


def test_join_all_concatenates_matches():
    schema = ExtractionSchema(
        name="joined", fields=(FieldSpec("text", "p", join_all=True),)
    )

    [record] = FieldExtractor().extract_html("<p>one</p><p>two</p>", schema)

    assert record["text"] == "one two"


def test_extract_reads_session_page(make_session):
    session = make_session(
        html='<div class="card"><h2><a href="q/1">Q</a></h2></div>',
        url="https://www.quora.com/",
    )

    records = asyncio.run(FieldExtractor().extract(session, CARD_SCHEMA))

    assert records[0]["link"] == "https://www.quora.com/q/1"


def test_empty_page_is_not_an_error():
    assert FieldExtractor().extract_html("", CARD_SCHEMA) == []


class TestSchemaValidation:
    def test_attribute_mode_requires_attribute(self):
        with pytest.raises(ValueError):
            FieldSpec("link", "a", mode=ExtractionMode.ATTRIBUTE)

    def test_nested_mode_requires_schema(self):
        with pytest.raises(ValueError):
            FieldSpec("answers", "", mode=ExtractionMode.NESTED_LIST)

    def test_required_fields_must_exist(self):
        with pytest.raises(ValueError):
            ExtractionSchema(name="bad", fields=(FieldSpec("title", "h1"),), required=frozenset({"body"}))
