from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal


class PriceSource(ABC):
    @abstractmethod
    async def fetch(self, token_id: str) -> Decimal:
        """
        Return the USD spot price for `token_id`.

        Raises:
            PriceUnavailable: network error, non-2xx or unknown identifier.
        """
        raise NotImplementedError
