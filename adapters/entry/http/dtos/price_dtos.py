from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PriceOut(BaseModel):
    price: float


class SwapPriceRequest(BaseModel):
    """Body shared by /calculate-swap and /price-impact."""

    model_config = ConfigDict(populate_by_name=True)

    input_token: str = Field(..., alias="inputToken", description='Provider token id (e.g. "ethereum")')
    output_token: str = Field(..., alias="outputToken")
    input_amount: Decimal = Field(..., alias="inputAmount", gt=0, allow_inf_nan=False)

    @field_validator("input_token", "output_token")
    @classmethod
    def _token_id(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("Field is required.")
        return v


class CalculateSwapOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    input_token: str = Field(..., alias="inputToken")
    output_token: str = Field(..., alias="outputToken")
    input_amount: float = Field(..., alias="inputAmount")
    input_price: float = Field(..., alias="inputPrice")
    output_price: float = Field(..., alias="outputPrice")
    output_amount: float = Field(..., alias="outputAmount")
    fee: float
    exchange_rate: float = Field(..., alias="exchangeRate")


class PriceImpactOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    price_impact: float = Field(..., alias="priceImpact")
