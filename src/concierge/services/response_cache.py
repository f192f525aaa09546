"""
Response cache for context-free (FAQ-style) replies.

Keys are the normalized guest text. Reads are synchronous; writes are a
best-effort side effect submitted to a small thread pool. A failed write is
logged and dropped, and nothing orders it relative to the caller's return.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor
from threading import Lock
from typing import List, Optional

from concierge.models.response import CachedResponse
from concierge.utils.cache_service import LRUCache
from concierge.utils.logging_config import get_logger, preview

logger = get_logger(__name__)


def normalize_query(query: str) -> str:
    return (query or "").strip().casefold()


class ResponseCache:
    """TTL exact-match cache with fire-and-forget writes."""

    def __init__(
        self,
        ttl_seconds: int = 3600,
        max_size: int = 500,
        store: Optional[LRUCache] = None,
        max_workers: int = 1,
    ):
        self.ttl_seconds = ttl_seconds
        self.store = store or LRUCache(max_size=max_size, ttl_seconds=ttl_seconds)
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="response-cache")
        self._pending: List[Future] = []
        self._pending_lock = Lock()

    def get(self, query: str) -> Optional[CachedResponse]:
        """Return a live entry for the normalized query, or None."""
        key = normalize_query(query)
        if not key:
            return None
        entry = self.store.get_entry(key)
        if entry is None:
            return None
        value, stored_at = entry
        return CachedResponse(response=value["response"], intent=value.get("intent"), created_at=stored_at)

    def set(self, query: str, response: str, intent: Optional[str] = None) -> Future:
        """Schedule a write; the returned future never raises."""
        future = self._executor.submit(self._write, query, response, intent)
        with self._pending_lock:
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(future)
        return future

    def _write(self, query: str, response: str, intent: Optional[str]) -> bool:
        try:
            key = normalize_query(query)
            if not key:
                return False
            self.store.set(key, {"response": response, "intent": intent})
            return True
        except Exception as exc:
            logger.error(
                "Failed to cache response",
                extra={"query": preview(query), "error": str(exc)},
            )
            return False

    def flush(self, timeout: Optional[float] = None) -> None:
        """Wait for writes already submitted (tests, shutdown)."""
        with self._pending_lock:
            pending = list(self._pending)
            self._pending = []
        for future in pending:
            future.result(timeout=timeout)

    def invalidate(self, query: str) -> bool:
        return self.store.delete(normalize_query(query))

    def clear(self) -> None:
        self.store.clear()
        logger.info("Response cache cleared")

    def stats(self) -> dict:
        return self.store.stats()

    def close(self) -> None:
        self._executor.shutdown(wait=True)
