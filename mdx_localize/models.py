"""Data models used throughout the localization pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union


@dataclass(frozen=True)
class ScalarValue:
    """Header value holding a single string."""

    value: str


@dataclass(frozen=True)
class ListValue:
    """Header value holding a list whose entries may be strings or anything else."""

    items: Tuple[Any, ...]


@dataclass(frozen=True)
class RecordListValue:
    """Header value holding a list of mappings, some exposing a ``url`` field."""

    items: Tuple[Any, ...]


HeaderValue = Union[ScalarValue, ListValue, RecordListValue]


class AssetStatus(str, enum.Enum):
    FETCHED = "fetched"
    REUSED = "reused"
    FAILED = "failed"


@dataclass
class AssetResult:
    """Outcome of resolving one remote URL to a local asset."""

    url: str
    status: AssetStatus
    public_path: Optional[str] = None
    local_path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is not AssetStatus.FAILED


@dataclass
class FetchSummary:
    """Aggregated outcome of one scheduler pass."""

    mapping: Dict[str, str] = field(default_factory=dict)
    fetched: int = 0
    reused: int = 0
    failed: int = 0
    attempts: int = 0
    results: List[AssetResult] = field(default_factory=list)


@dataclass
class Document:
    """A source file split into its parsed header and body."""

    path: Path
    header: Dict[str, Any]
    body: str
    raw: str
    had_header: bool = False


@dataclass
class RewriteResult:
    header: Mapping[str, Any]
    body: str
    header_changed: bool = False
    body_changed: bool = False

    @property
    def changed(self) -> bool:
        return self.header_changed or self.body_changed


@dataclass
class RunSummary:
    """Counts reported at the end of a localization run."""

    discovered_urls: int = 0
    candidate_documents: int = 0
    fetched: int = 0
    reused: int = 0
    failed: int = 0
    mapped: int = 0
    updated_documents: int = 0
    skipped_documents: int = 0
    updated_paths: List[Path] = field(default_factory=list)

    @property
    def fully_mapped(self) -> bool:
        return self.mapped == self.discovered_urls

    def describe(self) -> str:
        lines = [
            f"Discovered {self.discovered_urls} unique remote URL(s) across "
            f"{self.candidate_documents} file(s).",
            f"Downloaded/processed new: {self.fetched}",
            f"Reused existing local: {self.reused}",
            f"Failed: {self.failed}",
            f"Total images mapped to local paths: {self.mapped}",
            f"Updated source files: {self.updated_documents}",
        ]
        return "\n".join(lines)
