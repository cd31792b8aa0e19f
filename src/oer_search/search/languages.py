"""
Document language cache.

Holds the set of document languages present in the index. It is filled
once at startup and only changes when `refresh()` runs again, either on
demand or from the optional background task.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional

from ..index.client import IndexClient
from .query import compile_language_aggregation

logger = logging.getLogger("oer.languages")


class LanguageCache:
    def __init__(self) -> None:
        self._languages: List[str] = []
        self.refreshed_at: Optional[datetime] = None
        self._lock = asyncio.Lock()

    @property
    def languages(self) -> List[str]:
        return list(self._languages)

    async def refresh(self, index: IndexClient) -> List[str]:
        """
        Reload the language codes from a terms aggregation.

        The previous contents stay in place if the query fails.
        """
        async with self._lock:
            output = await index.search(compile_language_aggregation())
            buckets = output.get("aggregations", {}).get("languages", {}).get("buckets", [])
            self._languages = [bucket["key"] for bucket in buckets]
            self.refreshed_at = datetime.now(timezone.utc)
            logger.info("Language cache refreshed: %d languages", len(self._languages))
            return self.languages

    async def run_periodic(self, index: IndexClient, interval: float) -> None:
        """
        Background task refreshing the cache every `interval` seconds.
        """
        logger.info("Language refresh task started (every %ss).", interval)
        while True:
            try:
                await asyncio.sleep(interval)
                await self.refresh(index)
            except asyncio.CancelledError:
                logger.info("Language refresh task cancelled.")
                break
            except Exception:
                logger.exception("Language cache refresh failed")
                continue
