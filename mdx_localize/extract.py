"""Discovery of remote image URLs in document bodies and headers."""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping, Optional, Set

from .models import Document, HeaderValue, ListValue, RecordListValue, ScalarValue
from .utils import decode_html_entities, is_remote_url

MARKDOWN_IMAGE_RE = re.compile(r"!\[[^\]]*\]\(([^)]+)\)")
HTML_IMAGE_RE = re.compile(r'<img[^>]+src="([^"]+)"[^>]*>')
BINDING_SRC_RE = re.compile(r'(?::src|v-bind:src)="([^"]+)"')

URL_PATTERNS = (MARKDOWN_IMAGE_RE, HTML_IMAGE_RE, BINDING_SRC_RE)


def _accept(value: Any) -> Optional[str]:
    if is_remote_url(value):
        return decode_html_entities(value)
    return None


def extract_body_urls(text: str) -> Set[str]:
    """Return the distinct remote URLs referenced as images in ``text``."""
    urls: Set[str] = set()
    for pattern in URL_PATTERNS:
        for match in pattern.finditer(text):
            url = _accept(match.group(1))
            if url:
                urls.add(url)
    return urls


def classify_header_value(value: Any) -> Optional[HeaderValue]:
    """Tag a raw header value; ``None`` for shapes that never hold URLs."""
    if isinstance(value, str):
        return ScalarValue(value)
    if isinstance(value, (list, tuple)):
        items = tuple(value)
        if any(isinstance(item, Mapping) for item in items):
            return RecordListValue(items)
        return ListValue(items)
    return None


def _header_value_urls(tagged: HeaderValue) -> Iterable[Optional[str]]:
    if isinstance(tagged, ScalarValue):
        yield _accept(tagged.value)
        return
    for item in tagged.items:
        if isinstance(item, str):
            yield _accept(item)
        elif isinstance(tagged, RecordListValue) and isinstance(item, Mapping):
            yield _accept(item.get("url"))


def extract_header_urls(header: Optional[Mapping[str, Any]], keys: Iterable[str]) -> Set[str]:
    """Return remote URLs stored under the recognized header ``keys``."""
    urls: Set[str] = set()
    if not header:
        return urls
    for key in keys:
        tagged = classify_header_value(header.get(key))
        if tagged is None:
            continue
        urls.update(url for url in _header_value_urls(tagged) if url)
    return urls


def extract_document_urls(document: Document, keys: Iterable[str]) -> Set[str]:
    return extract_body_urls(document.body) | extract_header_urls(document.header, keys)
