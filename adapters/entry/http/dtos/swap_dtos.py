from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator
from web3 import Web3


ZERO = "0x0000000000000000000000000000000000000000"


def _validate_addr(v: str) -> str:
    v = (v or "").strip()
    if not Web3.is_address(v):
        raise ValueError("Invalid address (expected 0x...).")
    v = Web3.to_checksum_address(v)
    if v.lower() == ZERO:
        raise ValueError("Address cannot be zero.")
    return v


class SwapRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    input_token_address: str = Field(..., alias="inputTokenAddress")
    output_token_address: str = Field(..., alias="outputTokenAddress")
    amount: int = Field(..., gt=0, description="Amount in the input token's smallest unit")
    wallet_address: str = Field(..., alias="walletAddress")

    signer_id: Optional[str] = Field(default=None, alias="signerId", description="Configured signer reference")
    private_key: Optional[SecretStr] = Field(
        default=None,
        alias="privateKey",
        description="Deprecated; accepted only when ALLOW_INLINE_PRIVATE_KEY is enabled",
    )
    slippage_tolerance: Optional[Decimal] = Field(
        default=None,
        alias="slippageTolerance",
        ge=0,
        le=100,
        allow_inf_nan=False,
        description="Percent, 0.5 = 0.5% = 50 bps",
    )

    @field_validator("input_token_address", "output_token_address", "wallet_address")
    @classmethod
    def _addr(cls, v: str) -> str:
        return _validate_addr(v)

    @field_validator("signer_id")
    @classmethod
    def _signer_id(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip()
        return v or None

    @model_validator(mode="after")
    def _credential(self) -> "SwapRequest":
        if not self.signer_id and not (self.private_key and self.private_key.get_secret_value()):
            raise ValueError("signerId is required.")
        return self


class SwapOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    approval_tx_hash: str = Field(..., alias="approvalTxHash")
    swap_tx_hash: str = Field(..., alias="swapTxHash")
    gas_used: int = Field(..., alias="gasUsed")

    amount_out_min: Optional[str] = Field(default=None, alias="amountOutMin")
    expected_amount_out: Optional[str] = Field(default=None, alias="expectedAmountOut")
    deadline: Optional[int] = None
    path: List[str] = Field(default_factory=list)


class AllowanceOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    token_address: str = Field(..., alias="tokenAddress")
    wallet_address: str = Field(..., alias="walletAddress")
    allowance: str = Field(..., description="uint256 as a decimal string")
