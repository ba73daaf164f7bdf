"""Substitution of localized paths into document headers and bodies."""

from __future__ import annotations

import copy
import re
from typing import Any, Callable, Dict, Iterable, List, Mapping, Tuple

from .extract import classify_header_value
from .models import RecordListValue, RewriteResult, ScalarValue
from .utils import decode_html_entities, encode_html_entities

Substitution = Callable[[re.Match], str]


def _lookup(value: Any, mapping: Mapping[str, str]) -> str | None:
    if not isinstance(value, str):
        return None
    return mapping.get(decode_html_entities(value))


def rewrite_header(
    header: Mapping[str, Any],
    mapping: Mapping[str, str],
    keys: Iterable[str],
) -> Tuple[Dict[str, Any], bool]:
    """Return a copy of ``header`` with mapped URLs under ``keys`` replaced."""
    updated = copy.deepcopy(dict(header))
    changed = False
    for key in keys:
        if key not in updated:
            continue
        tagged = classify_header_value(updated[key])
        if tagged is None:
            continue
        if isinstance(tagged, ScalarValue):
            local = _lookup(tagged.value, mapping)
            if local is not None:
                updated[key] = local
                changed = True
            continue

        items: List[Any] = []
        for item in tagged.items:
            local = _lookup(item, mapping)
            if local is not None:
                items.append(local)
                changed = True
            elif isinstance(tagged, RecordListValue) and isinstance(item, Mapping):
                local = _lookup(item.get("url"), mapping)
                if local is not None:
                    item = {**item, "url": local}
                    changed = True
                items.append(item)
            else:
                items.append(item)
        updated[key] = items
    return updated, changed


def _url_alternation(url: str) -> str:
    variants = {url, encode_html_entities(url)}
    # Longest first so the encoded form wins when both could start a match.
    return "|".join(re.escape(v) for v in sorted(variants, key=len, reverse=True))


def _patterns_for(url: str, local_path: str) -> List[Tuple[re.Pattern, Substitution]]:
    literal = re.escape(url)
    either = _url_alternation(url)
    return [
        (
            re.compile(r"!\[([^\]]*)\]\(" + literal + r"\)"),
            lambda m: f"![{m.group(1)}]({local_path})",
        ),
        (
            re.compile(r"(<img[^>]*src=)([\"'])(?:" + either + r")\2([^>]*>)", re.IGNORECASE),
            lambda m: f"{m.group(1)}{m.group(2)}{local_path}{m.group(2)}{m.group(3)}",
        ),
        (
            re.compile(r"((?::src|v-bind:src)=)([\"'])(?:" + either + r")\2", re.IGNORECASE),
            lambda m: f"{m.group(1)}{m.group(2)}{local_path}{m.group(2)}",
        ),
    ]


def rewrite_body(body: str, mapping: Mapping[str, str]) -> Tuple[str, bool]:
    """Replace mapped URLs inside image markup, ``<img src>`` and ``:src`` bindings."""
    updated = body
    for url, local_path in mapping.items():
        for pattern, substitute in _patterns_for(url, local_path):
            updated = pattern.sub(substitute, updated)
    return updated, updated != body


def rewrite_document(
    header: Mapping[str, Any],
    body: str,
    mapping: Mapping[str, str],
    keys: Iterable[str],
) -> RewriteResult:
    new_header, header_changed = rewrite_header(header, mapping, keys)
    new_body, body_changed = rewrite_body(body, mapping)
    return RewriteResult(
        header=new_header,
        body=new_body,
        header_changed=header_changed,
        body_changed=body_changed,
    )
