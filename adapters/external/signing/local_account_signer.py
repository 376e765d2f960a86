from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from config import get_settings
from core.domain.repositories.transaction_signer_interface import TransactionSigner
from core.services.exceptions import ValidationError

logger = logging.getLogger(__name__)


class LocalAccountSigner(TransactionSigner):
    """
    Signs with an eth_account LocalAccount held in process memory.
    """

    def __init__(self, account: LocalAccount):
        self._account = account

    @classmethod
    def from_private_key(cls, private_key: str) -> "LocalAccountSigner":
        try:
            return cls(Account.from_key((private_key or "").strip()))
        except (ValueError, TypeError):
            # never echo the key back
            raise ValidationError("Invalid private key") from None

    @property
    def address(self) -> str:
        return self._account.address

    def sign_transaction(self, tx: dict[str, Any]) -> bytes:
        signed = self._account.sign_transaction(tx)
        return bytes(signed.raw_transaction)

    def __repr__(self) -> str:
        return f"LocalAccountSigner(address={self.address})"


class SignerRegistry:
    """
    Resolves signer ids to signing capabilities configured out of band
    (SIGNER_KEYS), so request bodies only carry an id.
    """

    def __init__(self, signers: Optional[Dict[str, TransactionSigner]] = None, *, allow_inline_keys: bool = False):
        self._signers: Dict[str, TransactionSigner] = dict(signers or {})
        self.allow_inline_keys = bool(allow_inline_keys)

    @classmethod
    def from_settings(cls) -> "SignerRegistry":
        s = get_settings()
        signers: Dict[str, TransactionSigner] = {}
        for signer_id, key in s.SIGNER_KEYS.items():
            try:
                signers[signer_id] = LocalAccountSigner.from_private_key(key)
            except ValidationError:
                logger.error("SIGNER_KEYS entry '%s' is not a valid private key, skipping", signer_id)
        return cls(signers, allow_inline_keys=s.ALLOW_INLINE_PRIVATE_KEY)

    def resolve(self, *, signer_id: Optional[str] = None, private_key: Optional[str] = None) -> TransactionSigner:
        if signer_id:
            signer = self._signers.get(signer_id)
            if signer is None:
                raise ValidationError(f"Unknown signerId '{signer_id}'")
            return signer
        if private_key:
            if not self.allow_inline_keys:
                raise ValidationError("Inline privateKey is disabled; use a configured signerId")
            return LocalAccountSigner.from_private_key(private_key)
        raise ValidationError("signerId is required")
