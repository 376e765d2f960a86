# adapters/external/cache/price_cache_memory.py

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Optional

from core.domain.entities.price_entity import PriceQuote
from core.domain.repositories.price_cache_interface import PriceCacheRepository

DEFAULT_TTL_SEC = 60.0


class InMemoryPriceCache(PriceCacheRepository):
    """
    Process-local price cache with a fixed validity window.

    Expiry is checked at read time: a stale entry behaves as absent and is
    replaced by the next `put`, nothing is evicted in the background.
    Failed fetches are never stored (there is no negative caching).
    """

    def __init__(self, ttl_sec: float = DEFAULT_TTL_SEC, clock: Callable[[], float] = time.time) -> None:
        if ttl_sec <= 0:
            raise ValueError("ttl_sec must be > 0")
        self.ttl_sec = float(ttl_sec)
        self._clock = clock
        self._entries: Dict[str, PriceQuote] = {}
        self._lock = threading.Lock()

    def get(self, token_id: str) -> Optional[PriceQuote]:
        with self._lock:
            hit = self._entries.get(token_id)
        if hit is None:
            return None
        if hit.age_sec(self._clock()) < self.ttl_sec:
            return hit
        return None

    def put(self, token_id: str, quote: PriceQuote) -> None:
        with self._lock:
            self._entries[token_id] = quote

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
