ABI_ERC20 = [
    {"name": "balanceOf", "inputs": [{"type": "address", "name": "owner"}], "outputs": [{"type": "uint256"}], "stateMutability": "view", "type": "function"},
    {"name": "allowance", "inputs": [{"type": "address", "name": "owner"}, {"type": "address", "name": "spender"}], "outputs": [{"type": "uint256"}], "stateMutability": "view", "type": "function"},
    {"name": "approve", "inputs": [{"type": "address", "name": "spender"}, {"type": "uint256", "name": "amount"}], "outputs": [{"type": "bool"}], "stateMutability": "nonpayable", "type": "function"},
]


ABI_UNISWAP_V2_ROUTER = [
    # ---- views
    {"name": "getAmountsOut", "inputs": [
        {"type": "uint256", "name": "amountIn"},
        {"type": "address[]", "name": "path"},
    ], "outputs": [{"type": "uint256[]", "name": "amounts"}], "stateMutability": "view", "type": "function"},

    # ---- tx
    {"name": "swapExactTokensForTokens", "inputs": [
        {"type": "uint256", "name": "amountIn"},
        {"type": "uint256", "name": "amountOutMin"},
        {"type": "address[]", "name": "path"},
        {"type": "address", "name": "to"},
        {"type": "uint256", "name": "deadline"},
    ], "outputs": [{"type": "uint256[]", "name": "amounts"}], "stateMutability": "nonpayable", "type": "function"},
]
