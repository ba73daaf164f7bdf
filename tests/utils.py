# tests/utils.py
from __future__ import annotations

import io
import threading
from collections import Counter
from typing import Dict, Optional

import requests
from PIL import Image


def png_bytes(width: int = 8, height: int = 8, color=(200, 30, 30, 255)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


class FakeResponse:
    def __init__(self, *, status: int = 200, body: bytes = b"") -> None:
        self.status_code = status
        self.content = body
        self.headers: Dict[str, str] = {}

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")


class FakeSession:
    """Stand-in for ``requests.Session`` that serves canned bodies per URL.

    URLs missing from ``bodies`` answer 404; URLs listed in ``errors`` raise
    a connection error. Every call is counted.
    """

    def __init__(
        self,
        bodies: Optional[Dict[str, bytes]] = None,
        errors: Optional[Dict[str, Exception]] = None,
        default: Optional[bytes] = None,
    ) -> None:
        self.bodies = dict(bodies or {})
        self.errors = dict(errors or {})
        self.default = default
        self.calls: Counter = Counter()
        self.timeouts: list = []
        self._lock = threading.Lock()

    def get(self, url: str, *, timeout: float, headers: Optional[Dict[str, str]] = None) -> FakeResponse:
        with self._lock:
            self.calls[url] += 1
            self.timeouts.append(timeout)
        if url in self.errors:
            raise self.errors[url]
        body = self.bodies.get(url, self.default)
        if body is None:
            return FakeResponse(status=404)
        return FakeResponse(status=200, body=body)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())
