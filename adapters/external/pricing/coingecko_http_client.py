from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import httpx

from config import get_settings
from core.domain.repositories.price_source_interface import PriceSource
from core.services.exceptions import PriceUnavailable

logger = logging.getLogger(__name__)


@dataclass
class CoinGeckoHttpClient(PriceSource):
    base_url: str
    vs_currency: str = "usd"
    api_key: str = ""
    timeout_sec: float = 15.0
    retries: int = 2
    transport: Optional[httpx.AsyncBaseTransport] = None

    @classmethod
    def from_settings(cls) -> "CoinGeckoHttpClient":
        st = get_settings()
        return cls(
            base_url=(st.PRICE_API_URL or "").rstrip("/"),
            vs_currency=st.PRICE_VS_CURRENCY,
            api_key=st.PRICE_API_KEY,
            timeout_sec=st.PRICE_FETCH_TIMEOUT_SEC,
            retries=st.PRICE_FETCH_RETRIES,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["x-cg-demo-api-key"] = self.api_key
        return headers

    async def _get_json(self, token_id: str) -> Any:
        """
        Calls:
          GET /simple/price?ids={token_id}&vs_currencies={vs}

        Only transport errors (connect/read timeouts, resets) are retried;
        an HTTP error status is final.
        """
        url = f"{self.base_url}/simple/price"
        params = {"ids": token_id, "vs_currencies": self.vs_currency}

        attempts = 1 + max(0, int(self.retries))
        last_exc: Optional[Exception] = None
        async with httpx.AsyncClient(timeout=self.timeout_sec, transport=self.transport) as cli:
            for attempt in range(1, attempts + 1):
                try:
                    res = await cli.get(url, params=params, headers=self._headers())
                except httpx.TransportError as exc:
                    last_exc = exc
                    logger.warning(
                        "price fetch transport error token=%s attempt=%d/%d: %s",
                        token_id, attempt, attempts, exc,
                    )
                    continue

                if res.status_code >= 400:
                    raise PriceUnavailable(
                        token_id,
                        f"Failed to fetch token price (provider status {res.status_code})",
                        cause=httpx.HTTPStatusError(
                            f"price_provider_error_{res.status_code}", request=res.request, response=res
                        ),
                    )
                try:
                    return res.json()
                except ValueError as exc:
                    raise PriceUnavailable(token_id, "Failed to fetch token price (invalid JSON)", cause=exc) from exc

        raise PriceUnavailable(token_id, cause=last_exc) from last_exc

    async def fetch(self, token_id: str) -> Decimal:
        token_id = (token_id or "").strip()
        if not token_id:
            raise PriceUnavailable(token_id, "Failed to fetch token price (empty token id)")

        data = await self._get_json(token_id)

        row = data.get(token_id) if isinstance(data, dict) else None
        raw = row.get(self.vs_currency) if isinstance(row, dict) else None
        if raw is None or isinstance(raw, bool):
            # provider answers {} for ids it does not know
            raise PriceUnavailable(token_id, f"Failed to fetch token price (unknown token id '{token_id}')")

        try:
            price = Decimal(str(raw))
        except InvalidOperation as exc:
            raise PriceUnavailable(token_id, "Failed to fetch token price (malformed price)", cause=exc) from exc

        if not price.is_finite() or price <= 0:
            raise PriceUnavailable(token_id, f"Failed to fetch token price (non-positive price {raw})")
        return price
