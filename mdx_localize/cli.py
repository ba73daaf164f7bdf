"""Command-line entry point for the image localizer."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Dict, Optional, Sequence

from .config import LocalizeConfig, load_config
from .pipeline import ImageLocalizer, iter_documents

logger = logging.getLogger("mdx_localize.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Mirror remote images referenced by Markdown/HTML sources into a local "
            "public directory and rewrite the references."
        ),
    )
    parser.add_argument("source", type=Path, help="Directory holding the source documents")
    parser.add_argument(
        "--public-dir",
        type=Path,
        default=None,
        help="Directory served as the site root (default: SOURCE/public)",
    )
    parser.add_argument(
        "--base",
        default="/",
        help="Base path the site is served under",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with localizer options",
    )
    parser.add_argument(
        "--no-convert",
        action="store_true",
        help="Store images in their original format instead of transcoding",
    )
    parser.add_argument(
        "--format",
        dest="target_format",
        default=None,
        help="Target image format when transcoding (default: webp)",
    )
    parser.add_argument(
        "--quality",
        type=int,
        default=None,
        help="Encoder quality used when transcoding",
    )
    parser.add_argument(
        "--ext",
        action="append",
        default=None,
        help="Accepted document extension; repeat for several (default: .md .html)",
    )
    parser.add_argument(
        "--key",
        action="append",
        default=None,
        help="Front matter key scanned for image URLs; repeat for several",
    )
    parser.add_argument(
        "--timeout-ms",
        type=int,
        default=None,
        help="Per-image download timeout in milliseconds",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Maximum number of concurrent downloads",
    )
    parser.add_argument(
        "--watch",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Keep running and re-localize whenever a source file changes",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    argv = list(sys.argv[1:] if argv is None else argv)
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> LocalizeConfig:
    config = load_config(args.config) if args.config else LocalizeConfig()
    return config.with_overrides(
        convert_to_target_format=False if args.no_convert else None,
        target_format=args.target_format,
        target_quality=args.quality,
        accepted_file_extensions=tuple(args.ext) if args.ext else None,
        metadata_keys=tuple(args.key) if args.key else None,
        fetch_timeout_ms=args.timeout_ms,
        max_workers=args.workers,
        debug_logging=True if args.verbose else None,
    )


def _snapshot(localizer: ImageLocalizer, source: Path) -> Dict[Path, float]:
    snapshot: Dict[Path, float] = {}
    for path in iter_documents(
        source, localizer.config.accepted_file_extensions, exclude=[localizer.public_root]
    ):
        try:
            snapshot[path] = path.stat().st_mtime
        except OSError:
            continue
    return snapshot


def _watch(localizer: ImageLocalizer, source: Path, interval: float) -> None:
    logger.info("Watching %s every %.1fs (Ctrl+C to stop)", source, interval)
    previous: Optional[Dict[Path, float]] = _snapshot(localizer, source)
    try:
        while True:
            time.sleep(interval)
            current = _snapshot(localizer, source)
            if current == previous:
                continue
            localizer.run_tree(source)
            # Our own rewrites change mtimes; take the snapshot after the pass.
            previous = _snapshot(localizer, source)
    except KeyboardInterrupt:
        logger.info("Stopped watching %s", source)


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    config = build_config(args)
    logging.basicConfig(
        level=logging.DEBUG if config.debug_logging else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    source = args.source.resolve()
    public_root = (args.public_dir or source / "public").resolve()
    localizer = ImageLocalizer(public_root, base_path=args.base, config=config)

    overall_start = time.perf_counter()
    summary = localizer.run_tree(source)
    logger.info("Finished in %.2fs", time.perf_counter() - overall_start)
    for line in summary.describe().splitlines():
        logger.info("  - %s", line)

    if args.watch:
        _watch(localizer, source, args.watch)


if __name__ == "__main__":
    main()
