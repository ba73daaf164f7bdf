"""
Typed errors raised inside the localization pipeline.

None of these abort a run: the asset store turns fetch/transcode/write errors
into failed results and the orchestrator skips documents whose header cannot
be parsed.
"""

from __future__ import annotations


class LocalizeError(RuntimeError):
    """Base class for localization failures."""


class FetchError(LocalizeError):
    """HTTP/transport failure or timeout while downloading a remote image."""


class TranscodeError(LocalizeError):
    """Downloaded bytes could not be decoded or re-encoded."""


class AssetWriteError(LocalizeError):
    """The local asset could not be written to the output directory."""


class FrontMatterError(LocalizeError):
    """A document header could not be parsed or serialized."""


ASSET_ERRORS = (FetchError, TranscodeError, AssetWriteError)

__all__ = [
    "LocalizeError",
    "FetchError",
    "TranscodeError",
    "AssetWriteError",
    "FrontMatterError",
    "ASSET_ERRORS",
]
