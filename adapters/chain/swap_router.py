from __future__ import annotations

from typing import List, Sequence

from web3 import Web3
from web3.contract import Contract
from web3.contract.contract import ContractFunction

from adapters.chain.abis import ABI_ERC20, ABI_UNISWAP_V2_ROUTER
from adapters.chain.chain_errors import chain_call
from adapters.chain.web3_provider import get_web3
from config import get_settings
from core.services.exceptions import ValidationError
from core.services.utils import checksum_or_none


def _addr(v: str, field: str) -> str:
    out = checksum_or_none(v)
    if out is None:
        raise ValidationError(f"{field}: invalid address (expected 0x...)")
    return out


class SwapRouterAdapter:
    """
    Uniswap V2 style router + ERC-20 access on one network.

    Reads return plain ints; writes return parameterized ContractFunctions to
    be sent through TxService.
    """

    def __init__(self, w3: Web3, router_address: str):
        if not router_address:
            raise RuntimeError("SwapRouterAdapter: router address not configured")
        self.w3 = w3
        self.router_address = _addr(router_address, "router")
        self.router: Contract = w3.eth.contract(address=self.router_address, abi=ABI_UNISWAP_V2_ROUTER)

    @classmethod
    def from_settings(cls) -> "SwapRouterAdapter":
        s = get_settings()
        return cls(get_web3(s.RPC_URL_DEFAULT, s.RPC_TIMEOUT_SEC), s.ROUTER_ADDRESS)

    def erc20(self, token: str) -> Contract:
        return self.w3.eth.contract(address=_addr(token, "token"), abi=ABI_ERC20)

    # ---------------- views ----------------

    def allowance(self, token: str, owner: str, spender: str) -> int:
        c = self.erc20(token)
        owner_cs = _addr(owner, "owner")
        spender_cs = _addr(spender, "spender")
        with chain_call("read allowance"):
            return int(c.functions.allowance(owner_cs, spender_cs).call())

    def balance_of(self, token: str, owner: str) -> int:
        c = self.erc20(token)
        owner_cs = _addr(owner, "owner")
        with chain_call("read balance"):
            return int(c.functions.balanceOf(owner_cs).call())

    def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> List[int]:
        cs_path = [_addr(p, "path") for p in path]
        with chain_call("getAmountsOut"):
            amounts = self.router.functions.getAmountsOut(int(amount_in), cs_path).call()
        return [int(a) for a in amounts]

    # ---------------- tx builders ----------------

    def fn_approve(self, token: str, spender: str, amount: int) -> ContractFunction:
        return self.erc20(token).functions.approve(_addr(spender, "spender"), int(amount))

    def fn_swap_exact_tokens_for_tokens(
        self,
        amount_in: int,
        amount_out_min: int,
        path: Sequence[str],
        to: str,
        deadline: int,
    ) -> ContractFunction:
        return self.router.functions.swapExactTokensForTokens(
            int(amount_in),
            int(amount_out_min),
            [_addr(p, "path") for p in path],
            _addr(to, "to"),
            int(deadline),
        )
