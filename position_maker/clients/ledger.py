"""链上账本客户端与数量换算。

`LedgerClient` 描述核心所依赖的账本接口（余额、精度、授权、签名与合约常量读取），
`Web3LedgerClient` 基于 web3.py 的异步 provider 实现该接口。
广播重试、gas 策略等均由账本一侧负责，核心不做任何重试。
"""

from __future__ import annotations

import asyncio
from decimal import ROUND_DOWN, Decimal
from typing import Any, Protocol

from eth_account import Account
from eth_account.datastructures import SignedMessage
from eth_account.messages import encode_defunct
from web3 import AsyncWeb3, Web3

from ..config import Settings
from .abi import ERC20_ABI, MARKET_CONTRACT_ABI, MARKET_CONTRACT_CONSTANTS


class LedgerClient(Protocol):
    @property
    def wallet_address(self) -> str: ...

    async def balance_of(self, account: str, token: str) -> int: ...

    async def decimals(self, token: str) -> int: ...

    async def allowance(self, owner: str, token: str, spender: str) -> int: ...

    async def approve(self, token: str, spender: str, amount: int) -> str: ...

    def sign_message(self, data: bytes) -> SignedMessage: ...

    async def read_contract_constants(self, address: str) -> tuple[Any, ...]: ...

    async def close(self) -> None: ...


class Web3LedgerClient:
    """基于 web3.py 的账本客户端。

    私钥只用于本地签名（消息与 approve 交易），不会发送到 RPC 节点。
    ERC20 合约实例按地址缓存。
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._account = Account.from_key(settings.private_key)
        self._w3 = AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(
                settings.rpc_url,
                request_kwargs={"timeout": settings.http_timeout_seconds},
            )
        )
        self._erc20_contracts: dict[str, Any] = {}

    @property
    def wallet_address(self) -> str:
        return self._account.address.lower()

    def _erc20(self, address: str):
        key = address.lower()
        if key not in self._erc20_contracts:
            self._erc20_contracts[key] = self._w3.eth.contract(address=Web3.to_checksum_address(key), abi=ERC20_ABI)
        return self._erc20_contracts[key]

    async def balance_of(self, account: str, token: str) -> int:
        balance = await self._erc20(token).functions.balanceOf(Web3.to_checksum_address(account)).call()
        return int(balance)

    async def decimals(self, token: str) -> int:
        return int(await self._erc20(token).functions.decimals().call())

    async def allowance(self, owner: str, token: str, spender: str) -> int:
        value = await self._erc20(token).functions.allowance(
            Web3.to_checksum_address(owner), Web3.to_checksum_address(spender)
        ).call()
        return int(value)

    async def approve(self, token: str, spender: str, amount: int) -> str:
        """签名并广播一笔 approve 交易，返回交易哈希。"""
        sender = self._account.address
        nonce = await self._w3.eth.get_transaction_count(sender)
        tx = await self._erc20(token).functions.approve(Web3.to_checksum_address(spender), amount).build_transaction(
            {
                "from": sender,
                "nonce": nonce,
                "gas": self.settings.approve_gas_limit,
                "gasPrice": Web3.to_wei(self.settings.approve_gas_price_gwei, "gwei"),
            }
        )
        signed = self._account.sign_transaction(tx)
        tx_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        return Web3.to_hex(tx_hash)

    def sign_message(self, data: bytes) -> SignedMessage:
        # 对原始字节做 EIP-191 personal_sign
        return self._account.sign_message(encode_defunct(primitive=data))

    async def read_contract_constants(self, address: str) -> tuple[Any, ...]:
        """并发读取市场合约的七个常量，顺序见 `MARKET_CONTRACT_CONSTANTS`。"""
        contract = self._w3.eth.contract(address=Web3.to_checksum_address(address), abi=MARKET_CONTRACT_ABI)
        values = await asyncio.gather(
            *(getattr(contract.functions, name)().call() for name, _ in MARKET_CONTRACT_CONSTANTS)
        )
        return tuple(values)

    async def close(self) -> None:
        await self._w3.provider.disconnect()


class AmountConverter:
    """整数链上数量与小数数量之间的换算，精度来自 token 的 ``decimals()``。"""

    def __init__(self, ledger: LedgerClient):
        self.ledger = ledger
        self._decimals: dict[str, int] = {}

    async def decimals(self, token: str) -> int:
        key = token.lower()
        if key not in self._decimals:
            self._decimals[key] = await self.ledger.decimals(key)
        return self._decimals[key]

    async def decimalize(self, token: str, amount: int | Decimal) -> Decimal:
        places = await self.decimals(token)
        return Decimal(amount) / (Decimal(10) ** places)

    async def integerize(self, token: str, amount: Decimal) -> int:
        """按 token 精度放大并向零截断。"""
        places = await self.decimals(token)
        scaled = Decimal(amount) * (Decimal(10) ** places)
        return int(scaled.to_integral_value(rounding=ROUND_DOWN))


__all__ = ["LedgerClient", "Web3LedgerClient", "AmountConverter"]
