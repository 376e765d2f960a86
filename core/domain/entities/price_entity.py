# core/domain/entities/price_entity.py
from __future__ import annotations

import time
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class PriceQuote(BaseModel):
    """
    USD spot price of a token identifier at the moment it was fetched.

    Immutable once created; `fetched_at` is epoch seconds.
    """

    token_id: str
    price_usd: Decimal = Field(..., gt=0)
    fetched_at: float = Field(default_factory=time.time)

    model_config = ConfigDict(frozen=True)

    def age_sec(self, now: float) -> float:
        return now - self.fetched_at
