from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List

from web3 import Web3

from adapters.chain.swap_router import SwapRouterAdapter
from config import get_settings
from core.domain.entities.swap_entity import ExecutionResult
from core.domain.enums.swap_enums import SwapStage
from core.domain.schemas.swap_intent import SwapIntent
from core.services import swap_math
from core.services.exceptions import (
    InsufficientAllowance,
    InsufficientBalance,
    SwapServiceError,
    TransactionReverted,
    ValidationError,
)
from core.services.tx_service import TxService
from core.services.utils import checksum_or_none

logger = logging.getLogger(__name__)

DEFAULT_DEADLINE_SEC = 1200


def _require_addr(v: str, field: str) -> str:
    out = checksum_or_none(v)
    if out is None:
        raise ValidationError(f"{field} must be a valid address (0x...)")
    return out


@dataclass
class SwapExecutorUseCase:
    """
    Approve + swap as one logical operation.

    Stages run strictly in order (pending -> approving -> approved -> quoting
    -> submitting -> confirmed); any failure moves to `failed` and propagates
    with its original kind. Nothing is rolled back: a mined approval stays
    valid on-chain, so a caller may retry the swap alone.
    """

    chain: SwapRouterAdapter
    txs: TxService
    intermediate_token: str
    deadline_sec: int = DEFAULT_DEADLINE_SEC
    clock: Callable[[], float] = time.time

    @classmethod
    def from_settings(cls) -> "SwapExecutorUseCase":
        s = get_settings()
        return cls(
            chain=SwapRouterAdapter.from_settings(),
            txs=TxService.from_settings(),
            intermediate_token=s.INTERMEDIATE_TOKEN_ADDRESS,
            deadline_sec=s.SWAP_DEADLINE_SEC,
        )

    # -------- helpers --------

    def build_path(self, token_in: str, token_out: str) -> List[str]:
        """
        [token_in, intermediate, token_out]; the hop is dropped when one side
        already is the intermediate token.
        """
        mid = Web3.to_checksum_address(self.intermediate_token)
        if mid in (token_in, token_out):
            return [token_in, token_out]
        return [token_in, mid, token_out]

    def _deadline(self) -> int:
        return int(self.clock()) + int(self.deadline_sec)

    @staticmethod
    def _advance(swap_id: str, stage: SwapStage) -> SwapStage:
        logger.info("swap %s -> %s", swap_id, stage.value)
        return stage

    # -------- reads --------

    def get_allowance(self, *, token_address: str, wallet_address: str) -> int:
        token = _require_addr(token_address, "tokenAddress")
        wallet = _require_addr(wallet_address, "walletAddress")
        return self.chain.allowance(token, wallet, self.chain.router_address)

    # -------- execution --------

    def _validate(self, intent: SwapIntent) -> tuple[str, str, str]:
        token_in = _require_addr(intent.input_token_address, "inputTokenAddress")
        token_out = _require_addr(intent.output_token_address, "outputTokenAddress")
        wallet = _require_addr(intent.wallet_address, "walletAddress")

        if token_in == token_out:
            raise ValidationError("inputTokenAddress and outputTokenAddress must differ")
        if isinstance(intent.amount, bool) or not isinstance(intent.amount, int) or intent.amount <= 0:
            raise ValidationError("amount must be a positive integer (token smallest unit)")
        if Web3.to_checksum_address(intent.signer.address) != wallet:
            raise ValidationError("walletAddress does not match the signer's address")
        return token_in, token_out, wallet

    def execute(self, intent: SwapIntent) -> ExecutionResult:
        token_in, token_out, wallet = self._validate(intent)
        signer = intent.signer
        amount = int(intent.amount)
        swap_id = f"{wallet[:10]}:{token_in[:10]}->{token_out[:10]}"

        stage = self._advance(swap_id, SwapStage.PENDING)
        try:
            balance = self.chain.balance_of(token_in, wallet)
            if balance < amount:
                raise InsufficientBalance(f"balance {balance} < amount {amount}")

            stage = self._advance(swap_id, SwapStage.APPROVING)
            approval = self.txs.send(
                self.chain.fn_approve(token_in, self.chain.router_address, amount),
                signer,
                label="approve",
            )
            stage = self._advance(swap_id, SwapStage.APPROVED)

            allowance = self.chain.allowance(token_in, wallet, self.chain.router_address)
            if allowance < amount:
                raise InsufficientAllowance(f"allowance {allowance} < amount {amount} after approval")

            stage = self._advance(swap_id, SwapStage.QUOTING)
            path = self.build_path(token_in, token_out)
            amounts = self.chain.get_amounts_out(amount, path)
            expected_out = int(amounts[-1]) if amounts else 0
            if expected_out <= 0:
                raise TransactionReverted(f"getAmountsOut returned no output for path {path}")

            min_out = swap_math.min_amount_out(expected_out, intent.slippage_bps)
            deadline = self._deadline()

            stage = self._advance(swap_id, SwapStage.SUBMITTING)
            swap = self.txs.send(
                self.chain.fn_swap_exact_tokens_for_tokens(amount, min_out, path, wallet, deadline),
                signer,
                label="swap",
            )
            self._advance(swap_id, SwapStage.CONFIRMED)
        except SwapServiceError as exc:
            logger.warning("swap %s -> %s at stage=%s: %s: %s", swap_id, SwapStage.FAILED.value, stage.value, exc.kind, exc)
            raise

        return ExecutionResult(
            approval_tx_hash=approval["tx_hash"],
            swap_tx_hash=swap["tx_hash"],
            gas_used=int(swap["gas"]["used"]),
            expected_amount_out=expected_out,
            amount_out_min=min_out,
            deadline=deadline,
            path=path,
        )
