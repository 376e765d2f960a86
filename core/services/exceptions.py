from __future__ import annotations

from typing import Optional


class SwapServiceError(Exception):
    """
    Base class for every failure the pricing / execution core can surface.

    `kind` is a stable machine-readable name used by the HTTP layer, `cause`
    keeps the original exception for diagnostics.
    """

    kind: str = "swap_service_error"

    def __init__(self, msg: str, *, cause: Optional[BaseException] = None):
        super().__init__(msg)
        self.msg = msg
        self.cause = cause


class ValidationError(SwapServiceError):
    """Missing or malformed request fields."""

    kind = "validation_error"


class PriceUnavailable(SwapServiceError):
    """Upstream price fetch failed (network, non-2xx, unknown identifier)."""

    kind = "price_unavailable"

    def __init__(self, token_id: str, msg: str = "Failed to fetch token price", *, cause: Optional[BaseException] = None):
        super().__init__(msg, cause=cause)
        self.token_id = token_id


class InvalidAmount(SwapServiceError):
    kind = "invalid_amount"


class InvalidPrice(SwapServiceError):
    kind = "invalid_price"


class ChainError(SwapServiceError):
    kind = "chain_error"


class ChainUnavailable(ChainError):
    """The RPC endpoint could not be reached or timed out."""

    kind = "chain_unavailable"


class TransactionReverted(ChainError):
    """
    The network rejected the transaction, or it was mined with status=0.

    `tx_hash` is only present when the transaction was broadcast.
    """

    kind = "transaction_reverted"

    def __init__(
        self,
        msg: str,
        *,
        tx_hash: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(msg, cause=cause)
        self.tx_hash = tx_hash


class InsufficientAllowance(TransactionReverted):
    kind = "insufficient_allowance"


class InsufficientBalance(TransactionReverted):
    kind = "insufficient_balance"
