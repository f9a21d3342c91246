"""做市所需的最小 ABI 片段。"""

from __future__ import annotations

from typing import Any


def _constant(name: str, output_type: str) -> dict[str, Any]:
    return {
        "constant": True,
        "inputs": [],
        "name": name,
        "outputs": [{"name": "", "type": output_type}],
        "stateMutability": "view",
        "type": "function",
    }


ERC20_ABI: list[dict[str, Any]] = [
    {
        "constant": True,
        "inputs": [{"name": "owner", "type": "address"}],
        "name": "balanceOf",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    _constant("decimals", "uint8"),
    {
        "constant": True,
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "name": "allowance",
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "constant": False,
        "inputs": [
            {"name": "spender", "type": "address"},
            {"name": "value", "type": "uint256"},
        ],
        "name": "approve",
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]

# 顺序与 ContractSnapshot 字段一致
MARKET_CONTRACT_CONSTANTS = (
    ("LONG_POSITION_TOKEN", "address"),
    ("SHORT_POSITION_TOKEN", "address"),
    ("PRICE_CAP", "uint256"),
    ("PRICE_FLOOR", "uint256"),
    ("PRICE_DECIMAL_PLACES", "uint256"),
    ("ORACLE_URL", "string"),
    ("ORACLE_STATISTIC", "string"),
)

MARKET_CONTRACT_ABI: list[dict[str, Any]] = [_constant(name, kind) for name, kind in MARKET_CONTRACT_CONSTANTS]

MAX_UINT256 = 2**256 - 1
