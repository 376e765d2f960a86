import asyncio
from decimal import Decimal
from typing import Dict

import pytest

from adapters.external.cache.price_cache_memory import InMemoryPriceCache
from core.domain.repositories.price_source_interface import PriceSource
from core.services.exceptions import PriceUnavailable
from core.use_cases.price_usecase import PriceUseCase


class FakePriceSource(PriceSource):
    """In-memory provider; unknown ids fail like the real one does."""

    def __init__(self, prices: Dict[str, str], delay: float = 0.0):
        self.prices = {k: Decimal(v) for k, v in prices.items()}
        self.delay = delay
        self.calls: list[str] = []

    async def fetch(self, token_id: str) -> Decimal:
        self.calls.append(token_id)
        if self.delay:
            await asyncio.sleep(self.delay)
        if token_id not in self.prices:
            raise PriceUnavailable(token_id, f"Failed to fetch token price (unknown token id '{token_id}')")
        return self.prices[token_id]


@pytest.fixture
def price_source():
    return FakePriceSource({"ethereum": "2", "usd-coin": "4", "bitcoin": "65000"})


@pytest.fixture
def price_use_case(price_source):
    return PriceUseCase(source=price_source, cache=InMemoryPriceCache(ttl_sec=60))
