"""Utility helpers for URL normalization, hashing and path handling."""

from __future__ import annotations

import hashlib
import re
from pathlib import PurePosixPath
from urllib.parse import urlparse

DEFAULT_EXTENSION = ".jpg"

# Order matters: "&amp;" is decoded first and encoded first.
_ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#039;", "'"),
)

_SLASH_RUN = re.compile(r"/{2,}")


def decode_html_entities(value: str) -> str:
    """Decode the fixed set of HTML entities that may wrap a URL in markup."""
    for entity, char in _ENTITIES:
        value = value.replace(entity, char)
    return value


def encode_html_entities(value: str) -> str:
    """Inverse of :func:`decode_html_entities`."""
    for entity, char in _ENTITIES:
        value = value.replace(char, entity)
    return value


def is_remote_url(value: object) -> bool:
    return isinstance(value, str) and value.startswith(("http://", "https://"))


def content_hash(url: str) -> str:
    """Stable digest of the URL string (not of the downloaded bytes)."""
    return hashlib.md5(url.encode("utf-8")).hexdigest()


def url_extension(url: str) -> str:
    """Return the lower-cased path extension of ``url`` or ``.jpg``."""
    try:
        path = urlparse(url).path
    except ValueError:
        return DEFAULT_EXTENSION
    suffix = PurePosixPath(path).suffix.lower()
    if not suffix or suffix == ".":
        return DEFAULT_EXTENSION
    return suffix


def normalize_base_path(base: str | None) -> str:
    """Force a site base path to start and end with a single slash."""
    base = base or "/"
    if not base.startswith("/"):
        base = "/" + base
    if not base.endswith("/"):
        base += "/"
    return _SLASH_RUN.sub("/", base)


def build_public_base(base: str | None, sub_dir: str) -> str:
    """Public URL prefix under which localized images are served."""
    sub_dir = sub_dir.strip("/")
    return _SLASH_RUN.sub("/", f"{normalize_base_path(base)}{sub_dir}/")
