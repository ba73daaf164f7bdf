"""High-level orchestration: discover, localize, rewrite."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Set

import requests

from .config import LocalizeConfig
from .errors import FrontMatterError
from .extract import extract_document_urls
from .frontmatter import load_document, serialize
from .models import RunSummary
from .rewrite import rewrite_document
from .scheduler import FetchScheduler
from .store import AssetStore
from .utils import build_public_base

logger = logging.getLogger("mdx_localize")


def iter_documents(
    source_root: Path,
    extensions: Sequence[str],
    exclude: Iterable[Path] = (),
) -> Iterator[Path]:
    """Yield source files under ``source_root`` with an accepted extension."""
    excluded = {Path(p).resolve() for p in exclude}
    for dirpath, dirnames, filenames in os.walk(source_root):
        current = Path(dirpath)
        dirnames[:] = sorted(
            name
            for name in dirnames
            if not name.startswith(".")
            and name != "node_modules"
            and (current / name).resolve() not in excluded
        )
        for name in sorted(filenames):
            path = current / name
            if path.suffix.lower() in extensions:
                yield path


class ImageLocalizer:
    """Mirror remote images referenced by a document tree into ``public_root``."""

    def __init__(
        self,
        public_root: Path,
        base_path: str = "/",
        config: Optional[LocalizeConfig] = None,
        session: Optional[requests.Session] = None,
        store: Optional[AssetStore] = None,
    ) -> None:
        self.config = config or LocalizeConfig()
        if self.config.debug_logging:
            logger.setLevel(logging.DEBUG)
        self.public_root = Path(public_root)
        self.output_dir = self.public_root / self.config.image_sub_dir_name
        self.public_base = build_public_base(base_path, self.config.image_sub_dir_name)
        self.store = store or AssetStore(
            self.output_dir, self.public_base, self.config, session=session
        )
        self.scheduler = FetchScheduler(self.store, max_workers=self.config.max_workers)
        self._prepare_output_dir()

    def _prepare_output_dir(self) -> None:
        try:
            self.store.ensure_output_dir()
        except OSError as exc:
            logger.critical(
                "Error creating destination directory %s: %s", self.output_dir, exc
            )
        logger.debug("Output directory: %s", self.output_dir)
        logger.debug("Public base image path: %s", self.public_base)

    def discover(self, paths: Iterable[Path]) -> tuple[Set[str], List[Path]]:
        """Collect the global URL set and the documents that reference any of it."""
        all_urls: Set[str] = set()
        candidates: List[Path] = []
        for path in paths:
            path = Path(path)
            if path.suffix.lower() not in self.config.accepted_file_extensions:
                continue
            try:
                document = load_document(path)
            except FrontMatterError as exc:
                logger.error("Skipping %s: %s", path, exc)
                continue
            except (OSError, UnicodeDecodeError) as exc:
                logger.error("Could not read %s: %s", path, exc)
                continue
            urls = extract_document_urls(document, self.config.metadata_keys)
            if urls:
                all_urls.update(urls)
                candidates.append(path)
        return all_urls, candidates

    def update_document(self, path: Path, mapping: dict[str, str]) -> bool:
        """Rewrite one document in place; return True when the file was written."""
        if not path.exists():
            logger.debug("Skipping update for non-existent file: %s", path)
            return False
        document = load_document(path)
        result = rewrite_document(
            document.header, document.body, mapping, self.config.metadata_keys
        )
        if not result.changed:
            return False
        new_text = serialize(result.header, result.body, keep_empty_block=document.had_header)
        if new_text == document.raw:
            logger.debug("%s was rebuilt but resulted in no textual change.", path)
            return False
        path.write_text(new_text, encoding="utf-8")
        logger.info("Updated source file: %s", path)
        return True

    def run(self, paths: Iterable[Path]) -> RunSummary:
        summary = RunSummary()
        logger.info("Starting image discovery and processing.")
        urls, candidates = self.discover(paths)
        summary.discovered_urls = len(urls)
        summary.candidate_documents = len(candidates)
        logger.info(
            "Found %d unique remote URLs across %d file(s).", len(urls), len(candidates)
        )
        if not urls:
            logger.info("No remote URLs found to process.")
            return summary
        for url in sorted(urls):
            logger.debug('Discovered remote URL: "%s"', url)

        fetch = self.scheduler.schedule(urls)
        summary.fetched = fetch.fetched
        summary.reused = fetch.reused
        summary.failed = fetch.failed
        summary.mapped = len(fetch.mapping)
        logger.info(
            "Image summary: %d new, %d reused, %d failed, %d mapped",
            fetch.fetched,
            fetch.reused,
            fetch.failed,
            summary.mapped,
        )
        if not summary.fully_mapped:
            logger.warning(
                "Not all remote URLs were successfully mapped. Check logs for download failures."
            )
        if not fetch.mapping:
            return summary

        for path in candidates:
            try:
                written = self.update_document(path, fetch.mapping)
            except FrontMatterError as exc:
                logger.error("Skipping update of %s: %s", path, exc)
                summary.skipped_documents += 1
                continue
            except (OSError, UnicodeDecodeError) as exc:
                logger.error("Error updating source file %s: %s", path, exc)
                summary.skipped_documents += 1
                continue
            if written:
                summary.updated_documents += 1
                summary.updated_paths.append(path)

        if summary.updated_documents:
            logger.info("Successfully updated %d source file(s).", summary.updated_documents)
        else:
            logger.info("No source files required textual updating after processing.")
        return summary

    def run_tree(self, source_root: Path) -> RunSummary:
        paths = iter_documents(
            source_root,
            self.config.accepted_file_extensions,
            exclude=[self.public_root],
        )
        return self.run(paths)


def localize_site(
    source_root: Path,
    public_root: Optional[Path] = None,
    base_path: str = "/",
    config: Optional[LocalizeConfig] = None,
) -> RunSummary:
    """Run one localization pass over ``source_root``.

    ``public_root`` defaults to ``<source_root>/public``.
    """
    source_root = Path(source_root)
    localizer = ImageLocalizer(
        public_root if public_root is not None else source_root / "public",
        base_path=base_path,
        config=config,
    )
    return localizer.run_tree(source_root)
