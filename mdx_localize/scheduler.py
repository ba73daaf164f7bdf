"""Concurrent resolution of the discovered URL set."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List

from .models import AssetResult, AssetStatus, FetchSummary
from .store import AssetStore

logger = logging.getLogger("mdx_localize.scheduler")


class FetchScheduler:
    """Resolve every URL once through an :class:`AssetStore` on a bounded pool.

    The scheduler outlives a single pass so that a long-lived process (watch
    mode) remembers which URLs it already localized. That record is only
    trusted while the asset file is still on disk.
    """

    def __init__(self, store: AssetStore, max_workers: int = 8) -> None:
        self.store = store
        self.max_workers = max_workers
        self._resolved: Dict[str, str] = {}

    def _remembered(self, url: str) -> AssetResult | None:
        if url not in self._resolved:
            return None
        target = self.store.existing(url)
        if target is None:
            del self._resolved[url]
            return None
        return AssetResult(
            url=url,
            status=AssetStatus.REUSED,
            public_path=target.public_path,
            local_path=target.path,
        )

    async def _resolve_one(self, url: str, semaphore: asyncio.Semaphore) -> AssetResult:
        async with semaphore:
            return await asyncio.to_thread(self.store.resolve, url)

    async def run(self, urls: Iterable[str]) -> FetchSummary:
        """Resolve ``urls`` concurrently and join on all of them."""
        summary = FetchSummary()
        pending: List[str] = []
        for url in sorted(set(urls)):
            remembered = self._remembered(url)
            if remembered is not None:
                summary.results.append(remembered)
            else:
                pending.append(url)

        semaphore = asyncio.Semaphore(self.max_workers)
        tasks = [self._resolve_one(url, semaphore) for url in pending]
        summary.attempts = len(tasks)
        results = await asyncio.gather(*tasks, return_exceptions=True)

        for url, result in zip(pending, results):
            if isinstance(result, BaseException):
                logger.error("Unexpected error localizing %s: %s", url, result)
                result = AssetResult(url=url, status=AssetStatus.FAILED, error=str(result))
            summary.results.append(result)

        for result in summary.results:
            if result.status is AssetStatus.FAILED:
                summary.failed += 1
                continue
            if result.status is AssetStatus.FETCHED:
                summary.fetched += 1
            else:
                summary.reused += 1
            summary.mapping[result.url] = result.public_path
            self._resolved[result.url] = result.public_path
        return summary

    def schedule(self, urls: Iterable[str]) -> FetchSummary:
        """Blocking wrapper around :meth:`run`."""
        return asyncio.run(self.run(urls))
