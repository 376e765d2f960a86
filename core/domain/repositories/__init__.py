from .price_cache_interface import PriceCacheRepository
from .price_source_interface import PriceSource
from .transaction_signer_interface import TransactionSigner

__all__ = [
    "PriceCacheRepository",
    "PriceSource",
    "TransactionSigner",
]
