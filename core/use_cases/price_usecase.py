from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, Tuple

from adapters.external.cache.price_cache_memory import InMemoryPriceCache
from adapters.external.pricing.coingecko_http_client import CoinGeckoHttpClient
from config import get_settings
from core.domain.entities.price_entity import PriceQuote
from core.domain.entities.swap_entity import SwapQuote
from core.domain.repositories.price_cache_interface import PriceCacheRepository
from core.domain.repositories.price_source_interface import PriceSource
from core.services import swap_math

logger = logging.getLogger(__name__)


def _norm(s: str) -> str:
    return (s or "").strip()


@dataclass
class PriceUseCase:
    """
    Spot prices with a read-through cache, and the price-based swap quote /
    impact built on top of them.

    Concurrent misses for the same token share a single upstream fetch; the
    result (or the failure) is handed to every waiter and failures are not
    cached.
    """

    source: PriceSource
    cache: PriceCacheRepository
    clock: Callable[[], float] = time.time
    _inflight: Dict[str, asyncio.Task] = field(default_factory=dict, init=False, repr=False)

    @classmethod
    def from_settings(cls) -> "PriceUseCase":
        s = get_settings()
        return cls(
            source=CoinGeckoHttpClient.from_settings(),
            cache=InMemoryPriceCache(ttl_sec=s.PRICE_CACHE_TTL_SEC),
        )

    async def _fetch_and_store(self, token_id: str) -> PriceQuote:
        try:
            price = await self.source.fetch(token_id)
            quote = PriceQuote(token_id=token_id, price_usd=price, fetched_at=self.clock())
            self.cache.put(token_id, quote)
            return quote
        except Exception as exc:
            logger.warning("price fetch failed token=%s: %s", token_id, exc)
            raise
        finally:
            self._inflight.pop(token_id, None)

    @staticmethod
    def _retrieve(task: asyncio.Task) -> None:
        # every caller may have gone away before the fetch finished
        if not task.cancelled():
            task.exception()

    async def get_price(self, token_id: str) -> PriceQuote:
        token_id = _norm(token_id)

        hit = self.cache.get(token_id)
        if hit is not None:
            return hit

        task = self._inflight.get(token_id)
        if task is None:
            logger.debug("price miss token=%s, fetching upstream", token_id)
            task = asyncio.ensure_future(self._fetch_and_store(token_id))
            task.add_done_callback(self._retrieve)
            self._inflight[token_id] = task
        else:
            logger.debug("price miss token=%s, joining in-flight fetch", token_id)

        # a cancelled caller leaves the shared fetch running for the others
        return await asyncio.shield(task)

    async def _price_pair(self, input_token: str, output_token: str) -> Tuple[PriceQuote, PriceQuote]:
        p_in = await self.get_price(input_token)
        p_out = await self.get_price(output_token)
        return p_in, p_out

    async def calculate_swap(self, *, input_token: str, output_token: str, input_amount: Decimal) -> SwapQuote:
        p_in, p_out = await self._price_pair(input_token, output_token)
        return swap_math.quote(input_amount, p_in.price_usd, p_out.price_usd)

    async def price_impact(self, *, input_token: str, output_token: str, input_amount: Decimal) -> Decimal:
        # one snapshot for both legs of the comparison
        p_in, p_out = await self._price_pair(input_token, output_token)
        return swap_math.price_impact(input_amount, p_in.price_usd, p_out.price_usd)
