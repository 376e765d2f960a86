# core/services/utils.py
from typing import Any
from collections.abc import Mapping
from hexbytes import HexBytes
from web3 import Web3


def to_json_safe(obj: Any) -> Any:
    """
    Flatten receipts / AttributeDicts into JSON primitives.

    HexBytes and bytes become "0x.." strings, mappings and sequences are
    converted recursively, anything else unknown is stringified.
    """
    if isinstance(obj, HexBytes):
        return Web3.to_hex(obj)
    if isinstance(obj, (bytes, bytearray)):
        return "0x" + bytes(obj).hex()
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, Mapping):
        return {str(k): to_json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set)):
        return [to_json_safe(v) for v in obj]
    return str(obj)


def checksum_or_none(addr: str) -> str | None:
    """Checksummed address, or None when `addr` is not a valid 20-byte hex address."""
    v = (addr or "").strip()
    if not Web3.is_address(v):
        return None
    return Web3.to_checksum_address(v)
