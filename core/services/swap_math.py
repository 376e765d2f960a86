# core/services/swap_math.py
"""
Pure swap arithmetic: no I/O, no settings.

Price-based quotes use Decimal so fee / output values are exact for the
inputs given; on-chain minimum output uses integers in the token's smallest
unit.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext
from typing import Union

from core.domain.entities.swap_entity import SwapQuote
from core.services.exceptions import InvalidAmount, InvalidPrice

PRECISION = 50

FEE_RATE = Decimal("0.003")  # flat 0.3%, Uniswap V2 style
BPS_DENOMINATOR = 10_000

Number = Union[Decimal, int, float, str]


def _dec(v: Number, name: str, err: type) -> Decimal:
    if isinstance(v, bool):
        raise err(f"{name} must be a number")
    try:
        d = v if isinstance(v, Decimal) else Decimal(str(v))
    except (InvalidOperation, ValueError) as exc:
        raise err(f"{name} must be a number") from exc
    if not d.is_finite():
        raise err(f"{name} must be finite")
    return d


def quote(input_amount: Number, input_price: Number, output_price: Number) -> SwapQuote:
    """
    Estimate the output of swapping `input_amount` units of a token priced at
    `input_price` USD into a token priced at `output_price` USD.

    Raises:
        InvalidAmount: input_amount <= 0
        InvalidPrice: either price <= 0
    """
    amount = _dec(input_amount, "inputAmount", InvalidAmount)
    p_in = _dec(input_price, "inputPrice", InvalidPrice)
    p_out = _dec(output_price, "outputPrice", InvalidPrice)

    if amount <= 0:
        raise InvalidAmount("inputAmount must be > 0")
    if p_in <= 0:
        raise InvalidPrice("inputPrice must be > 0")
    if p_out <= 0:
        raise InvalidPrice("outputPrice must be > 0")

    with localcontext() as ctx:
        ctx.prec = PRECISION
        pre_fee = amount * p_in / p_out
        fee = pre_fee * FEE_RATE
        return SwapQuote(
            input_amount=amount,
            input_price=p_in,
            output_price=p_out,
            output_amount=pre_fee - fee,
            fee=fee,
            exchange_rate=p_in / p_out,
        )


def price_impact(input_amount: Number, input_price: Number, output_price: Number) -> Decimal:
    """
    Absolute percentage deviation between the exchange rate at `input_amount`
    and at one unit, for the same price pair.

    The exchange rate here is a pure price ratio, so the result is always 0
    for a single price pair. Kept as-is: there is no pool depth in this model.
    """
    base = quote(1, input_price, output_price)
    actual = quote(input_amount, input_price, output_price)
    with localcontext() as ctx:
        ctx.prec = PRECISION
        return abs((actual.exchange_rate - base.exchange_rate) / base.exchange_rate * 100)


def min_amount_out(expected_out: int, slippage_bps: int) -> int:
    """
    expected_out * (1000 - bps/10) / 1000, in integer smallest-unit math.

    >>> min_amount_out(1000, 50)
    995
    """
    if isinstance(expected_out, bool) or not isinstance(expected_out, int):
        raise InvalidAmount("expected amount out must be an integer (smallest unit)")
    if isinstance(slippage_bps, bool) or not isinstance(slippage_bps, int):
        raise InvalidAmount("slippage must be an integer number of bps")
    if expected_out < 0:
        raise InvalidAmount("expected amount out must be >= 0")
    if not 0 <= slippage_bps <= BPS_DENOMINATOR:
        raise InvalidAmount(f"slippage must be within 0..{BPS_DENOMINATOR} bps")
    return expected_out * (BPS_DENOMINATOR - slippage_bps) // BPS_DENOMINATOR


def percent_to_bps(pct: Number) -> int:
    """
    0.5 (%) -> 50 bps. Rejects values outside [0, 100] and sub-bps precision.
    """
    d = _dec(pct, "slippageTolerance", InvalidAmount)
    if d < 0 or d > 100:
        raise InvalidAmount("slippageTolerance must be between 0 and 100 (%)")
    bps = d * 100
    if bps != bps.to_integral_value():
        raise InvalidAmount("slippageTolerance supports at most 2 decimal places")
    return int(bps)
