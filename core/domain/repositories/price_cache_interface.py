from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from core.domain.entities.price_entity import PriceQuote


class PriceCacheRepository(ABC):
    @abstractmethod
    def get(self, token_id: str) -> Optional[PriceQuote]:
        """Return a still-valid quote, or None when missing or expired."""
        raise NotImplementedError

    @abstractmethod
    def put(self, token_id: str, quote: PriceQuote) -> None:
        raise NotImplementedError
