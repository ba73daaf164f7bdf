"""YAML front matter codec for Markdown/HTML sources."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

import yaml

from .errors import FrontMatterError
from .models import Document

FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)(?:\r?\n)?^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)


def parse(text: str) -> Tuple[Dict[str, Any], str]:
    """Split ``text`` into its header mapping and body.

    Text without a leading ``---`` block has an empty header and is returned
    whole as the body.
    """
    match = FRONT_MATTER_RE.match(text)
    if not match:
        return {}, text
    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"Invalid front matter: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise FrontMatterError(
            f"Front matter must be a mapping, got {type(data).__name__}"
        )
    return data, text[match.end():]


def serialize(header: Mapping[str, Any], body: str, keep_empty_block: bool = False) -> str:
    """Render ``header`` as a YAML block followed by ``body``.

    An empty header yields the bare body unless ``keep_empty_block`` asks for
    the source's empty ``---`` pair to be written back.
    """
    if not header:
        return f"---\n---\n{body}" if keep_empty_block else body
    try:
        dumped = yaml.safe_dump(
            dict(header),
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"Could not serialize front matter: {exc}") from exc
    return f"---\n{dumped}---\n{body}"


def load_document(path: Path) -> Document:
    raw = Path(path).read_text(encoding="utf-8")
    header, body = parse(raw)
    return Document(
        path=Path(path),
        header=header,
        body=body,
        raw=raw,
        had_header=FRONT_MATTER_RE.match(raw) is not None,
    )
