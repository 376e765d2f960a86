import os
from dotenv import load_dotenv
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List

load_dotenv()


def _parse_csv(value: str) -> List[str]:
    if not value:
        return []
    items = [x.strip() for x in value.split(",")]
    return [x for x in items if x]


def _parse_signer_keys(value: str) -> Dict[str, str]:
    """
    Parses "id:0xkey,other:0xkey" into {"id": "0xkey", "other": "0xkey"}.
    Entries without a ':' separator are ignored.
    """
    out: Dict[str, str] = {}
    for item in _parse_csv(value):
        signer_id, sep, key = item.partition(":")
        if not sep or not signer_id.strip() or not key.strip():
            continue
        out[signer_id.strip()] = key.strip()
    return out


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    # chain
    RPC_URL_DEFAULT: str
    ROUTER_ADDRESS: str
    INTERMEDIATE_TOKEN_ADDRESS: str

    # price provider
    PRICE_API_URL: str
    PRICE_API_KEY: str = ""
    PRICE_VS_CURRENCY: str = "usd"

    # timings
    RPC_TIMEOUT_SEC: float = 30.0
    RECEIPT_TIMEOUT_SEC: float = 180.0
    PRICE_FETCH_TIMEOUT_SEC: float = 15.0
    PRICE_CACHE_TTL_SEC: float = 60.0
    SWAP_DEADLINE_SEC: int = 1200

    # transient read retries (never applied to broadcasts)
    PRICE_FETCH_RETRIES: int = 2
    CHAIN_READ_RETRIES: int = 2

    DEFAULT_SLIPPAGE_BPS: int = 50

    # signing
    SIGNER_KEYS: Dict[str, str] = field(default_factory=dict)
    ALLOW_INLINE_PRIVATE_KEY: bool = False

    # generic
    PORT: int = 3000
    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    rpc_url = os.getenv("RPC_URL_DEFAULT") or os.getenv(
        "WEB3_PROVIDER_URL", "https://sepolia.infura.io/v3/YOUR_PROJECT_ID"
    )

    return Settings(
        # Core chain
        RPC_URL_DEFAULT=rpc_url,
        ROUTER_ADDRESS=os.getenv("ROUTER_ADDRESS", "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"),
        INTERMEDIATE_TOKEN_ADDRESS=os.getenv(
            "INTERMEDIATE_TOKEN_ADDRESS", "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
        ),

        # Price provider
        PRICE_API_URL=os.getenv("PRICE_API_URL", "https://api.coingecko.com/api/v3"),
        PRICE_API_KEY=os.getenv("PRICE_API_KEY", ""),
        PRICE_VS_CURRENCY=os.getenv("PRICE_VS_CURRENCY", "usd").strip().lower(),

        RPC_TIMEOUT_SEC=float(os.getenv("RPC_TIMEOUT_SEC", "30")),
        RECEIPT_TIMEOUT_SEC=float(os.getenv("RECEIPT_TIMEOUT_SEC", "180")),
        PRICE_FETCH_TIMEOUT_SEC=float(os.getenv("PRICE_FETCH_TIMEOUT_SEC", "15")),
        PRICE_CACHE_TTL_SEC=float(os.getenv("PRICE_CACHE_TTL_SEC", "60")),
        SWAP_DEADLINE_SEC=int(os.getenv("SWAP_DEADLINE_SEC", "1200")),

        PRICE_FETCH_RETRIES=int(os.getenv("PRICE_FETCH_RETRIES", "2")),
        CHAIN_READ_RETRIES=int(os.getenv("CHAIN_READ_RETRIES", "2")),

        DEFAULT_SLIPPAGE_BPS=int(os.getenv("DEFAULT_SLIPPAGE_BPS", "50")),

        # Signing
        SIGNER_KEYS=_parse_signer_keys(os.getenv("SIGNER_KEYS", "")),
        ALLOW_INLINE_PRIVATE_KEY=_env_bool("ALLOW_INLINE_PRIVATE_KEY", False),

        PORT=int(os.getenv("PORT", "3000")),
        ENV=os.getenv("ENV", "dev"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
    )
