# adapters/chain/web3_provider.py

from __future__ import annotations

from functools import lru_cache

from web3 import Web3
from web3.providers.rpc import HTTPProvider


@lru_cache(maxsize=16)
def get_web3(rpc_url: str, timeout_sec: float = 30.0) -> Web3:
    """
    One Web3 instance per (rpc_url, timeout) so HTTPProvider sessions are reused
    across requests. The timeout bounds every JSON-RPC round trip.
    """
    url = (rpc_url or "").strip()
    if not url:
        raise ValueError("rpc_url is required")
    return Web3(HTTPProvider(url, request_kwargs={"timeout": float(timeout_sec)}))
