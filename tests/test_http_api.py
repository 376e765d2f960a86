from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from web3 import Web3

from adapters.entry.http.views.swap_view import get_use_case as get_swap_use_case
from adapters.external.signing.local_account_signer import SignerRegistry
from core.domain.entities.swap_entity import ExecutionResult
from core.services.exceptions import ChainUnavailable, TransactionReverted
from main import create_app

TOKEN_IN = Web3.to_checksum_address("0x" + "01" * 20)
TOKEN_OUT = Web3.to_checksum_address("0x" + "02" * 20)
WALLET = Web3.to_checksum_address("0x" + "0f" * 20)


@pytest.fixture
def executor():
    ex = Mock()
    ex.execute.return_value = ExecutionResult(
        approval_tx_hash="0xapprove",
        swap_tx_hash="0xswap",
        gas_used=131_000,
        expected_amount_out=1000,
        amount_out_min=995,
        deadline=1_700_001_200,
        path=[TOKEN_IN, TOKEN_OUT],
    )
    ex.get_allowance.return_value = 2**256 - 1
    return ex


@pytest.fixture
def signer():
    s = Mock()
    s.address = WALLET
    return s


@pytest.fixture
def client(price_use_case, executor, signer):
    app = create_app(
        price_use_case=price_use_case,
        signer_registry=SignerRegistry({"treasury": signer}, allow_inline_keys=False),
    )
    app.dependency_overrides[get_swap_use_case] = lambda: executor
    return TestClient(app)


def _swap_body(**kw):
    body = {
        "inputTokenAddress": TOKEN_IN,
        "outputTokenAddress": TOKEN_OUT,
        "amount": str(10**18),
        "walletAddress": WALLET,
        "signerId": "treasury",
    }
    body.update(kw)
    return body


# ---------- prices ----------

def test_get_price(client):
    res = client.get("/api/prices/ethereum")
    assert res.status_code == 200
    assert res.json() == {"price": 2.0}


def test_get_price_unknown_token_is_500_with_error(client):
    res = client.get("/api/prices/definitely-not-a-token")
    assert res.status_code == 500
    assert "definitely-not-a-token" in res.json()["error"]


def test_calculate_swap(client):
    res = client.post(
        "/api/calculate-swap",
        json={"inputToken": "ethereum", "outputToken": "usd-coin", "inputAmount": 100},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["inputToken"] == "ethereum"
    assert body["outputToken"] == "usd-coin"
    assert body["inputPrice"] == 2.0
    assert body["outputPrice"] == 4.0
    assert body["outputAmount"] == pytest.approx(49.85)
    assert body["fee"] == pytest.approx(0.15)
    assert body["exchangeRate"] == 0.5


@pytest.mark.parametrize(
    "body",
    [
        {"outputToken": "usd-coin", "inputAmount": 1},
        {"inputToken": "ethereum", "inputAmount": 1},
        {"inputToken": "ethereum", "outputToken": "usd-coin"},
        {"inputToken": "  ", "outputToken": "usd-coin", "inputAmount": 1},
    ],
)
def test_calculate_swap_missing_params(client, body):
    res = client.post("/api/calculate-swap", json=body)
    assert res.status_code == 400
    assert res.json()["error"] == "Missing required parameters"


@pytest.mark.parametrize("amount", [0, -5])
def test_calculate_swap_non_positive_amount_is_400(client, price_source, amount):
    res = client.post(
        "/api/calculate-swap",
        json={"inputToken": "ethereum", "outputToken": "usd-coin", "inputAmount": amount},
    )
    assert res.status_code == 400
    assert res.json()["details"][0]["loc"][-1] == "inputAmount"
    assert price_source.calls == []


def test_price_impact_zero_amount_is_400(client, price_source):
    res = client.post(
        "/api/price-impact",
        json={"inputToken": "ethereum", "outputToken": "bitcoin", "inputAmount": 0},
    )
    assert res.status_code == 400
    assert price_source.calls == []


def test_calculate_swap_unknown_token_is_500(client):
    res = client.post(
        "/api/calculate-swap",
        json={"inputToken": "ethereum", "outputToken": "ghost", "inputAmount": 1},
    )
    assert res.status_code == 500
    assert "error" in res.json()


def test_price_impact(client):
    res = client.post(
        "/api/price-impact",
        json={"inputToken": "ethereum", "outputToken": "bitcoin", "inputAmount": 5000},
    )
    assert res.status_code == 200
    assert res.json() == {"priceImpact": 0.0}


def test_price_impact_failure_is_500(client):
    res = client.post(
        "/api/price-impact",
        json={"inputToken": "ghost", "outputToken": "bitcoin", "inputAmount": 1},
    )
    assert res.status_code == 500
    assert "error" in res.json()


# ---------- swap ----------

def test_swap_success(client, executor, signer):
    res = client.post("/api/swap", json=_swap_body(slippageTolerance=1))

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["approvalTxHash"] == "0xapprove"
    assert body["swapTxHash"] == "0xswap"
    assert body["gasUsed"] == 131_000
    assert body["amountOutMin"] == "995"

    intent = executor.execute.call_args.args[0]
    assert intent.amount == 10**18
    assert intent.slippage_bps == 100
    assert intent.signer is signer


def test_swap_default_slippage(client, executor):
    client.post("/api/swap", json=_swap_body())
    assert executor.execute.call_args.args[0].slippage_bps == 50


@pytest.mark.parametrize(
    "override",
    [
        {"inputTokenAddress": None},
        {"walletAddress": "0x123"},
        {"amount": 0},
        {"signerId": None},
        {"slippageTolerance": 150},
    ],
)
def test_swap_bad_request(client, executor, override):
    body = {k: v for k, v in _swap_body(**override).items() if v is not None}
    res = client.post("/api/swap", json=body)

    assert res.status_code == 400
    assert "error" in res.json()
    executor.execute.assert_not_called()


def test_swap_unknown_signer(client, executor):
    res = client.post("/api/swap", json=_swap_body(signerId="nobody"))
    assert res.status_code == 400
    assert "signerId" in res.json()["error"]
    executor.execute.assert_not_called()


def test_swap_inline_private_key_disabled(client, executor):
    body = _swap_body(privateKey="0x" + "4c" * 32)
    body.pop("signerId")
    res = client.post("/api/swap", json=body)

    assert res.status_code == 400
    assert "4c4c" not in res.text
    executor.execute.assert_not_called()


def test_swap_chain_failure_has_error_and_details(client, executor):
    executor.execute.side_effect = TransactionReverted("swap: execution reverted: EXPIRED", tx_hash="0xdead")

    res = client.post("/api/swap", json=_swap_body())
    assert res.status_code == 500
    body = res.json()
    assert body["error"] == "Swap failed"
    assert "EXPIRED" in body["details"]
    assert body["kind"] == "transaction_reverted"
    assert body["txHash"] == "0xdead"


def test_swap_chain_unavailable(client, executor):
    executor.execute.side_effect = ChainUnavailable("read balance: RPC endpoint unreachable")

    res = client.post("/api/swap", json=_swap_body())
    assert res.status_code == 500
    assert res.json()["kind"] == "chain_unavailable"


# ---------- allowance ----------

def test_allowance(client, executor):
    res = client.get(f"/api/allowance/{TOKEN_IN}/{WALLET}")

    assert res.status_code == 200
    assert res.json() == {
        "tokenAddress": TOKEN_IN,
        "walletAddress": WALLET,
        "allowance": str(2**256 - 1),
    }


def test_allowance_failure(client, executor):
    executor.get_allowance.side_effect = ChainUnavailable("read allowance: RPC endpoint unreachable")

    res = client.get(f"/api/allowance/{TOKEN_IN}/{WALLET}")
    assert res.status_code == 500
    assert "unreachable" in res.json()["error"]


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_validation_errors_do_not_echo_private_key(client, executor):
    body = _swap_body(privateKey="0x" + "4c" * 32, walletAddress="0x123")
    res = client.post("/api/swap", json=body)

    assert res.status_code == 400
    assert "4c4c" not in res.text
