from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class TransactionSigner(ABC):
    """
    Signing capability for a single account.

    Implementations decide where the key lives (process keyring, KMS, ...);
    callers only ever see the address and the signed bytes.
    """

    @property
    @abstractmethod
    def address(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def sign_transaction(self, tx: dict[str, Any]) -> bytes:
        """Return the raw signed transaction ready for eth_sendRawTransaction."""
        raise NotImplementedError
