# adapters/chain/chain_errors.py
"""
Translation of web3 / transport exceptions into the service's error kinds.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from requests.exceptions import RequestException
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from core.services.exceptions import (
    ChainUnavailable,
    InsufficientAllowance,
    InsufficientBalance,
    SwapServiceError,
    TransactionReverted,
)

_ALLOWANCE_MARKERS = ("allowance", "transfer_from_failed", "transferfrom failed")
_BALANCE_MARKERS = ("exceeds balance", "insufficient balance", "insufficient funds")


def revert_reason(exc: BaseException) -> str:
    msg = getattr(exc, "message", None)
    if isinstance(msg, str) and msg:
        return msg
    if exc.args and isinstance(exc.args[0], dict):
        # web3 v6 surfaces RPC errors as ValueError({"code": .., "message": ..})
        return str(exc.args[0].get("message") or exc.args[0])
    return str(exc)


def classify_revert(action: str, exc: BaseException) -> TransactionReverted:
    reason = revert_reason(exc)
    low = reason.lower()
    if any(m in low for m in _ALLOWANCE_MARKERS):
        return InsufficientAllowance(f"{action}: {reason}", cause=exc)
    if any(m in low for m in _BALANCE_MARKERS):
        return InsufficientBalance(f"{action}: {reason}", cause=exc)
    return TransactionReverted(f"{action}: {reason}", cause=exc)


@contextmanager
def chain_call(action: str) -> Iterator[None]:
    """
    Wrap a block of Web3 calls so failures surface as ChainUnavailable or
    TransactionReverted (refined to allowance / balance when the reason says so).
    """
    try:
        yield
    except SwapServiceError:
        raise
    except ContractLogicError as exc:
        raise classify_revert(action, exc) from exc
    except TimeExhausted as exc:
        raise ChainUnavailable(f"{action}: timed out waiting for the node ({exc})", cause=exc) from exc
    except (RequestException, OSError) as exc:
        raise ChainUnavailable(f"{action}: RPC endpoint unreachable ({exc})", cause=exc) from exc
    except (Web3Exception, ValueError) as exc:
        raise classify_revert(action, exc) from exc
