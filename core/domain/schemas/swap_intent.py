from __future__ import annotations

from dataclasses import dataclass

from core.domain.repositories.transaction_signer_interface import TransactionSigner


@dataclass
class SwapIntent:
    """
    A validated request to swap `amount` (smallest unit) of the input token.

    Consumed once by the swap executor; never persisted. `signer` is a
    reference to a signing capability, not key material.
    """

    input_token_address: str
    output_token_address: str
    amount: int
    wallet_address: str
    signer: TransactionSigner
    slippage_bps: int = 50
