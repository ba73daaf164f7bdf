"""Content-addressed local storage for mirrored remote images."""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests
from filetype import guess

from .config import LocalizeConfig
from .errors import ASSET_ERRORS, AssetWriteError, FetchError
from .models import AssetResult, AssetStatus
from .transcode import transcode_image
from .utils import content_hash, url_extension

logger = logging.getLogger("mdx_localize.store")

Transcoder = Callable[[bytes, str, int], bytes]


@dataclass(frozen=True)
class AssetTarget:
    """Where a remote URL lives once localized."""

    url: str
    filename: str
    path: Path
    public_path: str
    original_extension: str


def image_signature_ok(data: bytes | str) -> bool:
    """True unless ``filetype`` recognizes ``data`` as a non-image type.

    ``data`` is raw bytes or a file path. SVG and other text formats have no
    signature and are accepted.
    """
    kind = guess(data)
    return kind is None or kind.mime.startswith("image/")


def looks_like_valid_asset(path: Path) -> bool:
    """Reject empty files and files whose signature is a non-image type."""
    try:
        size = path.stat().st_size
    except OSError:
        return False
    if size == 0:
        return False
    return image_signature_ok(str(path))


class AssetStore:
    """Maps remote URLs to files under ``output_dir`` and fetches missing ones."""

    def __init__(
        self,
        output_dir: Path,
        public_base: str,
        config: LocalizeConfig,
        session: Optional[requests.Session] = None,
        transcoder: Transcoder = transcode_image,
    ) -> None:
        self.output_dir = Path(output_dir)
        self.public_base = public_base
        self.config = config
        self.session = session or requests.Session()
        self.transcoder = transcoder

    def plan(self, url: str) -> AssetTarget:
        original_ext = url_extension(url)
        ext = self.config.target_extension if self.config.convert_to_target_format else original_ext
        filename = content_hash(url) + ext
        return AssetTarget(
            url=url,
            filename=filename,
            path=self.output_dir / filename,
            public_path=self.public_base + filename,
            original_extension=original_ext,
        )

    def existing(self, url: str) -> Optional[AssetTarget]:
        """Return the target if a usable asset is already on disk."""
        target = self.plan(url)
        if not target.path.exists():
            return None
        if looks_like_valid_asset(target.path):
            return target
        logger.warning("Ignoring unusable cached asset %s for %s", target.path, url)
        return None

    def ensure_output_dir(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _download(self, url: str) -> bytes:
        logger.debug("Downloading: %s", url)
        try:
            resp = self.session.get(
                url,
                timeout=self.config.fetch_timeout_seconds,
                headers={"User-Agent": self.config.user_agent, "Accept": "image/*,*/*;q=0.8"},
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(f"Download failed for {url}: {exc}") from exc
        data = resp.content
        if not data:
            raise FetchError(f"Download failed for {url}: empty response body")
        # Same rule existing() applies, so whatever is written gets reused later.
        if not image_signature_ok(data):
            raise FetchError(f"Download failed for {url}: response is not an image")
        return data

    def _write_atomic(self, destination: Path, data: bytes) -> None:
        tmp_path: Optional[Path] = None
        try:
            self.ensure_output_dir()
            with tempfile.NamedTemporaryFile(
                prefix="dl_", suffix=".part", delete=False, dir=str(destination.parent)
            ) as tf:
                tmp_path = Path(tf.name)
                tf.write(data)
            os.replace(tmp_path, destination)
        except OSError as exc:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise AssetWriteError(f"Could not write {destination}: {exc}") from exc

    def _fetch(self, target: AssetTarget) -> Path:
        data = self._download(target.url)
        destination = target.path
        if self.config.convert_to_target_format:
            logger.debug("Converting to %s: %s", self.config.target_format, destination)
            data = self.transcoder(data, self.config.target_format, self.config.target_quality)
        # Without transcoding plan() already named the file after the URL's extension.
        logger.debug("Saving %s to %s", target.url, destination)
        self._write_atomic(destination, data)
        return destination

    def resolve(self, url: str) -> AssetResult:
        """Produce the local asset for ``url``, reusing it when already on disk."""
        cached = self.existing(url)
        if cached is not None:
            logger.debug('Mapped (existing local file): "%s" -> "%s"', url, cached.public_path)
            return AssetResult(
                url=url,
                status=AssetStatus.REUSED,
                public_path=cached.public_path,
                local_path=cached.path,
            )

        target = self.plan(url)
        try:
            local_path = self._fetch(target)
        except ASSET_ERRORS as exc:
            logger.warning("Failed to localize %s: %s", url, exc)
            return AssetResult(url=url, status=AssetStatus.FAILED, error=str(exc))

        logger.debug('Mapped (downloaded): "%s" -> "%s"', url, target.public_path)
        return AssetResult(
            url=url,
            status=AssetStatus.FETCHED,
            public_path=target.public_path,
            local_path=local_path,
        )
