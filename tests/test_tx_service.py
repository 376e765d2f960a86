from unittest.mock import Mock, PropertyMock

import pytest
import requests
from hexbytes import HexBytes
from web3 import Web3
from web3.exceptions import ContractLogicError

from core.services.exceptions import ChainUnavailable, InsufficientAllowance, TransactionReverted
from core.services.tx_service import TxService

SENDER = Web3.to_checksum_address("0x" + "11" * 20)
TX_HASH = HexBytes("0x" + "ab" * 32)


@pytest.fixture
def calls():
    return []


@pytest.fixture
def signer(calls):
    s = Mock()
    s.address = SENDER
    s.sign_transaction.side_effect = lambda tx: calls.append(("sign", tx["nonce"])) or b"\x01signed"
    return s


@pytest.fixture
def w3(calls):
    w3 = Mock()
    type(w3.eth).gas_price = PropertyMock(side_effect=lambda: calls.append(("gas_price",)) or 7)
    w3.eth.get_transaction_count.side_effect = lambda addr, block: calls.append(("nonce", block)) or 42
    w3.eth.send_raw_transaction.side_effect = lambda raw: calls.append(("broadcast", raw)) or TX_HASH
    w3.eth.wait_for_transaction_receipt.side_effect = lambda h, timeout: calls.append(("receipt", h)) or {
        "status": 1,
        "gasUsed": 51_234,
        "effectiveGasPrice": 7,
        "blockNumber": 100,
        "transactionHash": TX_HASH,
    }
    return w3


@pytest.fixture
def fn(calls):
    fn = Mock()
    fn.estimate_gas.side_effect = lambda tx: calls.append(("estimate", tx["from"])) or 40_000
    fn.build_transaction.side_effect = lambda tx: calls.append(("build", dict(tx))) or dict(tx, to="0x" + "22" * 20, data="0x")
    return fn


def test_send_follows_the_ordered_sequence(w3, fn, signer, calls):
    res = TxService(w3, read_retries=0).send(fn, signer, label="approve")

    assert [c[0] for c in calls] == ["estimate", "gas_price", "nonce", "build", "sign", "broadcast", "receipt"]
    assert calls[2] == ("nonce", "pending")

    built = calls[3][1]
    assert built["gas"] == int(40_000 * 1.25) + 10_000
    assert built["gasPrice"] == 7
    assert built["nonce"] == 42
    assert built["from"] == SENDER

    assert res["tx_hash"] == Web3.to_hex(TX_HASH)
    assert res["status"] == 1
    assert res["gas"]["used"] == 51_234


def test_status_zero_raises_transaction_reverted(w3, fn, signer):
    w3.eth.wait_for_transaction_receipt.side_effect = None
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 0, "gasUsed": 30_000}

    with pytest.raises(TransactionReverted) as ei:
        TxService(w3).send(fn, signer)
    assert ei.value.tx_hash == Web3.to_hex(TX_HASH)


def test_revert_during_estimation_is_classified(w3, fn, signer):
    fn.estimate_gas.side_effect = ContractLogicError("execution reverted: ERC20: insufficient allowance")

    with pytest.raises(InsufficientAllowance):
        TxService(w3).send(fn, signer)
    w3.eth.send_raw_transaction.assert_not_called()


def test_gas_price_read_is_retried(w3, fn, signer):
    type(w3.eth).gas_price = PropertyMock(side_effect=[requests.exceptions.ConnectionError("down"), 9])

    res = TxService(w3, read_retries=1).send(fn, signer)
    assert res["gas"]["price_wei"] == 9


def test_nonce_read_retries_are_bounded(w3, fn, signer):
    w3.eth.get_transaction_count.side_effect = requests.exceptions.ConnectionError("down")

    with pytest.raises(ChainUnavailable):
        TxService(w3, read_retries=2).send(fn, signer)
    assert w3.eth.get_transaction_count.call_count == 3
    w3.eth.send_raw_transaction.assert_not_called()


def test_broadcast_is_never_retried(w3, fn, signer):
    w3.eth.send_raw_transaction.side_effect = requests.exceptions.ConnectionError("down")

    with pytest.raises(ChainUnavailable):
        TxService(w3, read_retries=5).send(fn, signer)
    assert w3.eth.send_raw_transaction.call_count == 1
