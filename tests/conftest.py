from __future__ import annotations

from pathlib import Path

import pytest

from mdx_localize.config import LocalizeConfig
from mdx_localize.store import AssetStore
from tests.utils import FakeSession, png_bytes as _make_png


@pytest.fixture
def png_bytes():
    """Factory returning a small valid PNG."""
    return _make_png


@pytest.fixture
def plain_config() -> LocalizeConfig:
    """Config that stores originals (no transcoding)."""
    return LocalizeConfig(convert_to_target_format=False)


@pytest.fixture
def make_store(tmp_path: Path):
    def _factory(config: LocalizeConfig | None = None, session: FakeSession | None = None) -> AssetStore:
        return AssetStore(
            tmp_path / "public" / "fetched-images",
            "/fetched-images/",
            config or LocalizeConfig(convert_to_target_format=False),
            session=session or FakeSession(),
        )

    return _factory


@pytest.fixture
def site(tmp_path: Path):
    """Factory writing documents into a fresh source tree."""
    root = tmp_path / "docs"
    root.mkdir()

    def _write(relative: str, text: str) -> Path:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    _write.root = root
    return _write
