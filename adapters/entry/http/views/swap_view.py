from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from adapters.entry.http.dtos.swap_dtos import AllowanceOut, SwapOut, SwapRequest
from adapters.external.signing.local_account_signer import SignerRegistry
from config import get_settings
from core.domain.schemas.swap_intent import SwapIntent
from core.services import swap_math
from core.services.exceptions import SwapServiceError, TransactionReverted, ValidationError
from core.use_cases.swap_executor_usecase import SwapExecutorUseCase

logger = logging.getLogger(__name__)

router = APIRouter(tags=["swap"])


def get_use_case() -> SwapExecutorUseCase:
    return SwapExecutorUseCase.from_settings()


def get_signer_registry(request: Request) -> SignerRegistry:
    return request.app.state.signer_registry


def _swap_failed(exc: BaseException, *, kind: str = "internal_error") -> HTTPException:
    detail = {"error": "Swap failed", "details": str(exc), "kind": kind}
    if isinstance(exc, TransactionReverted) and exc.tx_hash:
        detail["txHash"] = exc.tx_hash
    return HTTPException(status_code=500, detail=detail)


@router.post("/swap", response_model=SwapOut)
def execute_swap(
    req: SwapRequest,
    signers: SignerRegistry = Depends(get_signer_registry),
    use_case: SwapExecutorUseCase = Depends(get_use_case),
):
    """
    Approve the router for `amount` of the input token, then swap through
    [input, intermediate, output] with a slippage-protected minimum output.

    Blocking: the response is sent once both transactions are mined.
    """
    try:
        signer = signers.resolve(
            signer_id=req.signer_id,
            private_key=req.private_key.get_secret_value() if req.private_key else None,
        )
        slippage_bps = (
            swap_math.percent_to_bps(req.slippage_tolerance)
            if req.slippage_tolerance is not None
            else get_settings().DEFAULT_SLIPPAGE_BPS
        )
        intent = SwapIntent(
            input_token_address=req.input_token_address,
            output_token_address=req.output_token_address,
            amount=int(req.amount),
            wallet_address=req.wallet_address,
            signer=signer,
            slippage_bps=slippage_bps,
        )
    except SwapServiceError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        res = use_case.execute(intent)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SwapServiceError as exc:
        raise _swap_failed(exc, kind=exc.kind) from exc
    except Exception as exc:
        logger.exception("unexpected swap failure")
        raise _swap_failed(exc) from exc

    return SwapOut(
        success=True,
        approval_tx_hash=res.approval_tx_hash,
        swap_tx_hash=res.swap_tx_hash,
        gas_used=res.gas_used,
        amount_out_min=str(res.amount_out_min) if res.amount_out_min is not None else None,
        expected_amount_out=str(res.expected_amount_out) if res.expected_amount_out is not None else None,
        deadline=res.deadline,
        path=res.path,
    )


@router.get("/allowance/{token_address}/{wallet_address}", response_model=AllowanceOut)
def get_allowance(
    token_address: str,
    wallet_address: str,
    use_case: SwapExecutorUseCase = Depends(get_use_case),
):
    try:
        allowance = use_case.get_allowance(token_address=token_address, wallet_address=wallet_address)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to read allowance: {exc}") from exc

    return AllowanceOut(
        token_address=token_address,
        wallet_address=wallet_address,
        allowance=str(allowance),
    )
