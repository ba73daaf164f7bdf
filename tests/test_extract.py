# tests/test_extract.py
from __future__ import annotations

from pathlib import Path

from mdx_localize.extract import (
    classify_header_value,
    extract_body_urls,
    extract_document_urls,
    extract_header_urls,
)
from mdx_localize.models import Document, ListValue, RecordListValue, ScalarValue

KEYS = ("cover", "images", "gallery")


def test_three_syntaxes_collapse_to_one_url():
    body = (
        "![a](https://x/y.png)\n"
        '<img src="https://x/y.png">\n'
        '<Comp :src="https://x/y.png" />\n'
    )
    assert extract_body_urls(body) == {"https://x/y.png"}


def test_binding_spellings_and_img_attributes():
    body = (
        '<img class="hero" src="https://a.com/1.jpg" alt="one">\n'
        '<Pic v-bind:src="http://b.com/2.gif"/>\n'
        '<Pic :src="https://c.com/3.webp"/>\n'
    )
    assert extract_body_urls(body) == {
        "https://a.com/1.jpg",
        "http://b.com/2.gif",
        "https://c.com/3.webp",
    }


def test_local_and_data_references_are_ignored():
    body = (
        "![l](./local.png) ![d](data:image/png;base64,AAAA)\n"
        '<img src="/static/x.png"> <img src="//cdn.com/x.png">\n'
        "![ftp](ftp://host/x.png)\n"
    )
    assert extract_body_urls(body) == set()


def test_entities_are_decoded_and_deduplicated():
    body = (
        '<img src="https://x.com/i.png?a=1&amp;b=2">\n'
        "![same](https://x.com/i.png?a=1&b=2)\n"
    )
    assert extract_body_urls(body) == {"https://x.com/i.png?a=1&b=2"}


def test_malformed_markup_is_a_miss_not_an_error():
    body = "![broken](https://x.com/a.png\n<img src=\"https://x.com/b.png\"\n![also broken"
    assert extract_body_urls(body) == set()


def test_header_scalar_list_and_records():
    header = {
        "cover": "https://x.com/cover.jpg",
        "images": ["https://x.com/1.jpg", "./local.jpg", 3],
        "gallery": [{"url": "https://x.com/g.jpg", "alt": "G"}, {"alt": "no url"}, "https://x.com/h.jpg"],
        "title": "https://x.com/not-an-image-key.jpg",
    }
    assert extract_header_urls(header, KEYS) == {
        "https://x.com/cover.jpg",
        "https://x.com/1.jpg",
        "https://x.com/g.jpg",
        "https://x.com/h.jpg",
    }


def test_header_unrelated_types_are_ignored():
    header = {"cover": 42, "images": {"url": "https://x.com/a.jpg"}, "gallery": None}
    assert extract_header_urls(header, KEYS) == set()
    assert extract_header_urls({}, KEYS) == set()
    assert extract_header_urls(None, KEYS) == set()


def test_header_values_are_entity_decoded():
    header = {"cover": "https://x.com/c.jpg?w=1&amp;h=2"}
    assert extract_header_urls(header, KEYS) == {"https://x.com/c.jpg?w=1&h=2"}


def test_classify_header_value_variants():
    assert classify_header_value("https://x") == ScalarValue("https://x")
    assert classify_header_value(["a", "b"]) == ListValue(("a", "b"))
    assert isinstance(classify_header_value([{"url": "u"}, "a"]), RecordListValue)
    assert classify_header_value(7) is None
    assert classify_header_value({"url": "u"}) is None


def test_document_urls_union_body_and_header():
    doc = Document(
        path=Path("doc.md"),
        header={"cover": "https://x.com/c.jpg"},
        body="![b](https://x.com/b.jpg)",
        raw="",
    )
    assert extract_document_urls(doc, KEYS) == {"https://x.com/c.jpg", "https://x.com/b.jpg"}
