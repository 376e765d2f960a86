from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from adapters.entry.http.dtos.price_dtos import CalculateSwapOut, PriceImpactOut, PriceOut, SwapPriceRequest
from core.services.exceptions import SwapServiceError, ValidationError
from core.use_cases.price_usecase import PriceUseCase


router = APIRouter(tags=["prices"])


def get_use_case(request: Request) -> PriceUseCase:
    # one instance per app: it owns the price cache
    return request.app.state.price_use_case


@router.get("/prices/{token_id}", response_model=PriceOut)
async def get_price(
    token_id: str,
    use_case: PriceUseCase = Depends(get_use_case),
):
    try:
        quote = await use_case.get_price(token_id)
        return PriceOut(price=float(quote.price_usd))
    except SwapServiceError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to fetch token price: {exc}") from exc


@router.post("/calculate-swap", response_model=CalculateSwapOut)
async def calculate_swap(
    req: SwapPriceRequest,
    use_case: PriceUseCase = Depends(get_use_case),
):
    try:
        q = await use_case.calculate_swap(
            input_token=req.input_token,
            output_token=req.output_token,
            input_amount=req.input_amount,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SwapServiceError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to calculate swap: {exc}") from exc

    return CalculateSwapOut(
        input_token=req.input_token,
        output_token=req.output_token,
        input_amount=float(q.input_amount),
        input_price=float(q.input_price),
        output_price=float(q.output_price),
        output_amount=float(q.output_amount),
        fee=float(q.fee),
        exchange_rate=float(q.exchange_rate),
    )


@router.post("/price-impact", response_model=PriceImpactOut)
async def price_impact(
    req: SwapPriceRequest,
    use_case: PriceUseCase = Depends(get_use_case),
):
    try:
        impact = await use_case.price_impact(
            input_token=req.input_token,
            output_token=req.output_token,
            input_amount=req.input_amount,
        )
        return PriceImpactOut(price_impact=float(impact))
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SwapServiceError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=500, detail=f"Failed to calculate price impact: {exc}") from exc
