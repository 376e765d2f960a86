import pytest
import requests
from web3.exceptions import ContractLogicError, TimeExhausted

from adapters.chain.chain_errors import chain_call, classify_revert
from core.services.exceptions import (
    ChainUnavailable,
    InsufficientAllowance,
    InsufficientBalance,
    PriceUnavailable,
    TransactionReverted,
)


@pytest.mark.parametrize(
    "reason,kind",
    [
        ("execution reverted: ERC20: insufficient allowance", InsufficientAllowance),
        ("execution reverted: TransferHelper: TRANSFER_FROM_FAILED", InsufficientAllowance),
        ("execution reverted: ERC20: transfer amount exceeds balance", InsufficientBalance),
        ("insufficient funds for gas * price + value", InsufficientBalance),
        ("execution reverted: UniswapV2Router: INSUFFICIENT_OUTPUT_AMOUNT", TransactionReverted),
        ("execution reverted: UniswapV2Router: EXPIRED", TransactionReverted),
    ],
)
def test_classify_revert(reason, kind):
    err = classify_revert("swap", ContractLogicError(reason))
    assert type(err) is kind
    assert reason in str(err)


def test_rpc_error_dict_payload():
    err = classify_revert("broadcast", ValueError({"code": -32000, "message": "nonce too low"}))
    assert type(err) is TransactionReverted
    assert "nonce too low" in str(err)


def test_connection_errors_are_chain_unavailable():
    with pytest.raises(ChainUnavailable) as ei:
        with chain_call("read balance"):
            raise requests.exceptions.ConnectionError("refused")
    assert isinstance(ei.value.cause, requests.exceptions.ConnectionError)


def test_receipt_timeout_is_chain_unavailable():
    with pytest.raises(ChainUnavailable):
        with chain_call("wait receipt"):
            raise TimeExhausted("not mined")


def test_service_errors_pass_through():
    with pytest.raises(PriceUnavailable):
        with chain_call("noop"):
            raise PriceUnavailable("eth")
