from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Dict, Hashable, Optional

from .config import DEFAULT_CACHE_MAX_BYTES, DEFAULT_CACHE_MAX_ENTRIES

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheKey:
    """Identifies one page image of one document."""

    document_id: str
    page_index: int


def format_size(num_bytes: int) -> str:
    """Human readable byte count."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.2f} KB"
    if num_bytes < 1024 * 1024 * 1024:
        return f"{num_bytes / (1024 * 1024):.2f} MB"
    return f"{num_bytes / (1024 * 1024 * 1024):.2f} GB"


class ImageCache:
    """LRU store of encoded page images, capped by entry count and bytes."""

    def __init__(
        self,
        max_entries: int = DEFAULT_CACHE_MAX_ENTRIES,
        max_bytes: int = DEFAULT_CACHE_MAX_BYTES,
    ) -> None:
        if max_entries < 1 or max_bytes < 1:
            raise ValueError(
                f"Cache bounds must be positive (max_entries={max_entries}, max_bytes={max_bytes})"
            )
        self.max_entries = max_entries
        self.max_bytes = max_bytes
        self._entries: "OrderedDict[Hashable, bytes]" = OrderedDict()
        self._current_bytes = 0
        self.hits = 0
        self.misses = 0

    # --- Accessors ---
    @property
    def current_bytes(self) -> int:
        return self._current_bytes

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        # Membership checks leave recency untouched
        return key in self._entries

    def get(self, key: Hashable) -> Optional[bytes]:
        data = self._entries.get(key)
        if data is None:
            self.misses += 1
            logger.debug("Cache miss: %s", key)
            return None
        self._entries.move_to_end(key)
        self.hits += 1
        logger.debug("Cache hit: %s", key)
        return data

    # --- Mutation ---
    def put(self, key: Hashable, data: bytes) -> None:
        if not data:
            logger.warning("Not caching empty image data: %s", key)
            return

        if key in self._entries:
            self._current_bytes -= len(self._entries.pop(key))

        size = len(data)
        if size > self.max_bytes:
            logger.warning(
                "Not caching %s: %s exceeds the %s budget",
                key, format_size(size), format_size(self.max_bytes),
            )
            return

        self._ensure_capacity(size)
        self._entries[key] = data
        self._current_bytes += size
        logger.debug(
            "Cached %s (%s, total %s)", key, format_size(size), format_size(self._current_bytes)
        )

    def remove(self, key: Hashable) -> None:
        data = self._entries.pop(key, None)
        if data is not None:
            self._current_bytes -= len(data)
            logger.debug("Removed from cache: %s", key)

    def remove_document(self, document_id: str) -> int:
        """Drop every page of one document; returns how many entries went."""
        doomed = [
            k for k in self._entries if getattr(k, "document_id", None) == document_id
        ]
        for key in doomed:
            self.remove(key)
        if doomed:
            logger.debug("Cleared %d cached pages of %s", len(doomed), document_id)
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()
        self._current_bytes = 0
        self.hits = 0
        self.misses = 0
        logger.debug("Image cache cleared")

    def _ensure_capacity(self, incoming: int) -> None:
        while self._entries and (
            len(self._entries) >= self.max_entries
            or self._current_bytes + incoming > self.max_bytes
        ):
            oldest_key, oldest = self._entries.popitem(last=False)
            self._current_bytes -= len(oldest)
            logger.debug("Evicted %s (%s)", oldest_key, format_size(len(oldest)))

    # --- Observability ---
    def stats(self) -> Dict[str, Any]:
        lookups = self.hits + self.misses
        hit_rate = (self.hits / lookups * 100) if lookups else 0.0
        return {
            "entries": len(self._entries),
            "max_entries": self.max_entries,
            "size_bytes": self._current_bytes,
            "max_size_bytes": self.max_bytes,
            "size_formatted": format_size(self._current_bytes),
            "max_size_formatted": format_size(self.max_bytes),
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": f"{hit_rate:.2f}%",
        }

    def log_stats(self) -> None:
        s = self.stats()
        logger.info(
            "Image cache: %d/%d entries, %s/%s, hit rate %s (%d hits / %d misses)",
            s["entries"], s["max_entries"], s["size_formatted"], s["max_size_formatted"],
            s["hit_rate"], s["hits"], s["misses"],
        )
