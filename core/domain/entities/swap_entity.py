# core/domain/entities/swap_entity.py
from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SwapQuote(BaseModel):
    """
    Price-based swap estimate.

    Invariants:
      fee = pre_fee_output * FEE_RATE
      output_amount = pre_fee_output - fee
      exchange_rate = input_price / output_price
    """

    input_amount: Decimal
    input_price: Decimal
    output_price: Decimal
    output_amount: Decimal
    fee: Decimal
    exchange_rate: Decimal

    model_config = ConfigDict(frozen=True)

    @property
    def pre_fee_output(self) -> Decimal:
        return self.output_amount + self.fee


class ExecutionResult(BaseModel):
    """
    Produced only after both on-chain legs (approve, swap) were mined with status=1.
    `gas_used` is the swap receipt's gasUsed.
    """

    approval_tx_hash: str
    swap_tx_hash: str
    gas_used: int

    expected_amount_out: Optional[int] = None
    amount_out_min: Optional[int] = None
    deadline: Optional[int] = None
    path: List[str] = Field(default_factory=list)
