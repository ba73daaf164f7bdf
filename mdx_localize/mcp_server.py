"""MCP server exposing the image localizer as a tool."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from .config import LocalizeConfig
from .pipeline import localize_site

logger = logging.getLogger("mdx_localize.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="mdx-localize")


@mcp.tool()
async def localize(
    source: str,
    public_dir: str | None = None,
    base: str = "/",
    convert: bool = True,
) -> str:
    """Mirror remote images referenced under a source tree and rewrite the references."""

    source_root = Path(source).expanduser()
    if not source_root.is_dir():
        raise FileNotFoundError(f"Source directory does not exist: {source_root}")

    config = LocalizeConfig(convert_to_target_format=convert)
    # The pass drives its own event loop for the fetch stage.
    summary = await asyncio.to_thread(
        localize_site,
        source_root,
        Path(public_dir).expanduser() if public_dir else None,
        base_path=base,
        config=config,
    )
    return summary.describe()


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
