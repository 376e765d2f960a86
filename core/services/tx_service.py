from __future__ import annotations

import logging
from datetime import UTC, datetime
from decimal import Decimal
from typing import Callable, TypeVar

from web3 import Web3
from web3.contract.contract import ContractFunction

from adapters.chain.chain_errors import chain_call
from adapters.chain.web3_provider import get_web3
from config import get_settings
from core.domain.repositories.transaction_signer_interface import TransactionSigner
from core.services.exceptions import ChainUnavailable, TransactionReverted
from core.services.utils import to_json_safe

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TxService:
    """
    Sends state-changing contract calls.

    Every send follows the same ordered sequence:
      estimate gas -> gas price -> pending nonce -> build -> sign -> broadcast -> receipt

    Gas price is the node's current suggestion (legacy `gasPrice`). Only the
    gas-price and nonce reads are retried; a broadcast is never retried.
    """

    def __init__(self, w3: Web3, *, read_retries: int = 2, receipt_timeout_sec: float = 180.0):
        self.w3 = w3
        self.read_retries = max(0, int(read_retries))
        self.receipt_timeout_sec = float(receipt_timeout_sec)

    @classmethod
    def from_settings(cls) -> "TxService":
        s = get_settings()
        return cls(
            get_web3(s.RPC_URL_DEFAULT, s.RPC_TIMEOUT_SEC),
            read_retries=s.CHAIN_READ_RETRIES,
            receipt_timeout_sec=s.RECEIPT_TIMEOUT_SEC,
        )

    # ---------- internal helpers ----------

    def _read_with_retry(self, label: str, read: Callable[[], T]) -> T:
        attempts = 1 + self.read_retries
        for attempt in range(1, attempts + 1):
            try:
                with chain_call(label):
                    return read()
            except ChainUnavailable as exc:
                if attempt == attempts:
                    raise
                logger.warning("%s failed (attempt %d/%d): %s", label, attempt, attempts, exc)
        raise AssertionError("unreachable")

    def _estimate_gas(self, fn: ContractFunction, sender: str) -> int:
        """
        Node estimate padded by 25% + 10k. A revert during estimation is
        surfaced as-is: the tx would revert on-chain too.
        """
        with chain_call("estimate gas"):
            base_estimate = int(fn.estimate_gas({"from": sender}))
        return int(base_estimate * 1.25) + 10_000

    def _gas_price(self) -> int:
        return int(self._read_with_retry("read gas price", lambda: self.w3.eth.gas_price))

    def _next_nonce(self, sender: str) -> int:
        return int(self._read_with_retry(
            "read nonce", lambda: self.w3.eth.get_transaction_count(sender, "pending")
        ))

    def _build_tx(self, fn: ContractFunction, *, sender: str, gas: int, gas_price: int, nonce: int) -> dict:
        with chain_call("build transaction"):
            return fn.build_transaction(
                {
                    "from": sender,
                    "gas": int(gas),
                    "gasPrice": int(gas_price),
                    "nonce": int(nonce),
                    "value": 0,
                }
            )

    def _sign_and_send(self, tx: dict, signer: TransactionSigner) -> str:
        raw = signer.sign_transaction(tx)
        with chain_call("broadcast transaction"):
            txh = self.w3.eth.send_raw_transaction(raw)
        return Web3.to_hex(txh)

    def _wait_receipt(self, tx_hash: str) -> dict:
        with chain_call(f"wait receipt {tx_hash}"):
            rcpt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.receipt_timeout_sec)
        return dict(rcpt)

    # ---------- public API ----------

    def send(self, fn: ContractFunction, signer: TransactionSigner, *, label: str = "tx") -> dict:
        """
        Broadcast `fn` signed by `signer` and block until it is mined.

        Returns:
            {
              "tx_hash": "0x..",
              "status": 1,
              "block_number": int,
              "gas": {"limit", "used", "price_wei", "effective_price_wei", "cost_eth"},
              "receipt": {...},
              "ts": iso8601
            }

        Raises:
            ChainUnavailable: RPC unreachable / receipt wait timed out.
            TransactionReverted (or a refined subclass): rejected by the node,
                reverted during estimation, or mined with status=0.
        """
        sender = Web3.to_checksum_address(signer.address)

        gas_limit = self._estimate_gas(fn, sender)
        gas_price_wei = self._gas_price()
        nonce = self._next_nonce(sender)

        tx = self._build_tx(fn, sender=sender, gas=gas_limit, gas_price=gas_price_wei, nonce=nonce)
        tx_hash = self._sign_and_send(tx, signer)
        logger.info("%s broadcast tx=%s nonce=%d gas=%d gas_price_wei=%d", label, tx_hash, nonce, gas_limit, gas_price_wei)

        rcpt = self._wait_receipt(tx_hash)
        status = int(rcpt.get("status", 0))
        if status == 0:
            raise TransactionReverted(
                f"{label}: transaction reverted (status=0). Possibly out-of-gas or require() failed",
                tx_hash=tx_hash,
            )

        gas_used = int(rcpt.get("gasUsed") or 0)
        eff_price_wei = int(rcpt.get("effectiveGasPrice") or 0)
        cost_eth = None
        if gas_used and eff_price_wei:
            cost_eth = float((Decimal(gas_used) * Decimal(eff_price_wei)) / Decimal(10**18))

        logger.info("%s mined tx=%s block=%s gas_used=%d", label, tx_hash, rcpt.get("blockNumber"), gas_used)
        return to_json_safe(
            {
                "tx_hash": tx_hash,
                "status": status,
                "block_number": rcpt.get("blockNumber"),
                "gas": {
                    "limit": int(gas_limit),
                    "used": gas_used,
                    "price_wei": int(gas_price_wei),
                    "effective_price_wei": eff_price_wei,
                    "cost_eth": cost_eth,
                },
                "receipt": rcpt,
                "ts": datetime.now(UTC).isoformat(),
            }
        )
