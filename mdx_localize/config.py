"""Configuration objects and constants for the localizer."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

import yaml

from .transcode import PIL_FORMATS

DEFAULT_IMAGE_SUB_DIR = "fetched-images"
DEFAULT_METADATA_KEYS: Tuple[str, ...] = (
    "cover",
    "banner",
    "thumbnail",
    "image",
    "feature",
    "heroImage",
    "ogImage",
    "twitterImage",
    "galleryImages",
    "images",
    "photos",
)
DEFAULT_USER_AGENT = "mdx-localize/0.1 (+image mirroring)"

# Option names as they appear in site configuration files.
_CAMEL_ALIASES = {
    "imageSubDirName": "image_sub_dir_name",
    "convertToTargetFormat": "convert_to_target_format",
    "targetFormat": "target_format",
    "targetQuality": "target_quality",
    "acceptedFileExtensions": "accepted_file_extensions",
    "metadataKeys": "metadata_keys",
    "fetchTimeoutMs": "fetch_timeout_ms",
    "debugLogging": "debug_logging",
    "maxWorkers": "max_workers",
    "userAgent": "user_agent",
}


@dataclass
class LocalizeConfig:
    """Settings that control discovery, fetching and rewriting."""

    image_sub_dir_name: str = DEFAULT_IMAGE_SUB_DIR
    convert_to_target_format: bool = True
    target_format: str = "webp"
    target_quality: int = 80
    accepted_file_extensions: Tuple[str, ...] = (".md", ".html")
    metadata_keys: Tuple[str, ...] = DEFAULT_METADATA_KEYS
    fetch_timeout_ms: int = 15_000
    debug_logging: bool = False
    max_workers: int = 8
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        self.accepted_file_extensions = tuple(
            ext.lower() if ext.startswith(".") else f".{ext.lower()}"
            for ext in self.accepted_file_extensions
        )
        self.metadata_keys = tuple(self.metadata_keys)
        self.target_format = self.target_format.lower().lstrip(".")
        if self.target_format not in PIL_FORMATS:
            raise ValueError(
                f"Unsupported target_format {self.target_format!r}; "
                f"expected one of {sorted(PIL_FORMATS)}"
            )
        if not 0 < int(self.target_quality) <= 100:
            raise ValueError("target_quality must be between 1 and 100")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

    @property
    def fetch_timeout_seconds(self) -> float:
        return self.fetch_timeout_ms / 1000.0

    @property
    def target_extension(self) -> str:
        return ".jpg" if self.target_format == "jpeg" else f".{self.target_format}"

    def with_overrides(self, **overrides: Any) -> "LocalizeConfig":
        """Return a copy with every non-None override applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self


def _normalize_options(data: Mapping[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(LocalizeConfig)}
    options: Dict[str, Any] = {}
    for key, value in data.items():
        name = _CAMEL_ALIASES.get(key, key)
        if name not in known:
            raise ValueError(f"Unknown localizer option: {key}")
        if name in ("accepted_file_extensions", "metadata_keys"):
            if isinstance(value, str):
                value = [value]
            value = tuple(value)
        options[name] = value
    return options


def load_config(path: Path) -> LocalizeConfig:
    """Read options from a YAML file; camelCase and snake_case names are accepted."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return LocalizeConfig(**_normalize_options(data))
