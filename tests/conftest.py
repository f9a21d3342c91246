"""测试共享的内存版账本与预言机，以及配置构建夹具。"""

from __future__ import annotations

from typing import Any, Callable, Optional

import pytest

from position_maker.config import DAI_ADDRESS, Settings
from position_maker.errors import OracleFetchError
from position_maker.runtime import Configuration
from position_maker.services.signer import key_signer
from position_maker.types import OracleReading

# Hardhat 默认账户 #0
PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
WALLET = "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"

MARKET = "0x" + "11" * 20
LONG = "0x" + "22" * 20
SHORT = "0x" + "33" * 20
TAKER = "0x" + "44" * 20
OTHER_MARKET = "0x" + "55" * 20
OTHER_LONG = "0x" + "66" * 20
OTHER_SHORT = "0x" + "77" * 20
COLLATERAL = DAI_ADDRESS
ORACLE_URL = "https://api.coincap.io/v2/rates/bitcoin"


def constants(
    cap: int = 90,
    floor: int = 10,
    places: int = 2,
    long_token: str = LONG,
    short_token: str = SHORT,
    oracle_url: str = ORACLE_URL,
) -> tuple[Any, ...]:
    return (long_token, short_token, cap, floor, places, oracle_url, "BTC")


class FakeLedger:
    def __init__(
        self,
        contracts: dict[str, tuple[Any, ...]],
        decimals: Optional[dict[str, int]] = None,
        balances: Optional[dict[tuple[str, str], int]] = None,
        allowances: Optional[dict[str, int]] = None,
    ):
        self.contracts = contracts
        self._decimals = decimals or {}
        self.balances = balances or {}
        self.allowances = allowances or {}
        self.constant_reads: list[str] = []
        self.approvals: list[tuple[str, str, int]] = []
        self.closed = False
        self._signer = key_signer(PRIVATE_KEY)

    @property
    def wallet_address(self) -> str:
        return WALLET

    async def balance_of(self, account: str, token: str) -> int:
        return self.balances.get((account.lower(), token.lower()), 0)

    async def decimals(self, token: str) -> int:
        return self._decimals.get(token.lower(), 18)

    async def allowance(self, owner: str, token: str, spender: str) -> int:
        return self.allowances.get(token.lower(), 0)

    async def approve(self, token: str, spender: str, amount: int) -> str:
        self.approvals.append((token, spender, amount))
        self.allowances[token.lower()] = amount
        return "0x" + "ab" * 32

    def sign_message(self, data: bytes):
        return self._signer(data)

    async def read_contract_constants(self, address: str) -> tuple[Any, ...]:
        self.constant_reads.append(address)
        return self.contracts[address.lower()]

    async def close(self) -> None:
        self.closed = True


class FakeOracle:
    def __init__(self, price: Any = "0.40", error: Optional[Exception] = None):
        self.price = price
        self.error = error
        self.calls: list[str] = []

    async def fetch(self, url: str) -> OracleReading:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return OracleReading(price=self.price, symbol="BTC")

    async def close(self) -> None:
        pass


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "private_key": PRIVATE_KEY,
        "rpc_url": "http://localhost:8545",
        "market_contracts": MARKET,
    }
    values.update(overrides)
    return Settings.load(overrides=values)


@pytest.fixture
def make_config() -> Callable[..., Configuration]:
    """构建使用 FakeLedger / FakeOracle 的 `Configuration`。"""

    def _make(
        contracts: Optional[dict[str, tuple[Any, ...]]] = None,
        price: Any = "0.40",
        oracle_error: Optional[Exception] = None,
        decimals: Optional[dict[str, int]] = None,
        balances: Optional[dict[tuple[str, str], int]] = None,
        allowances: Optional[dict[str, int]] = None,
        **settings_overrides: Any,
    ) -> Configuration:
        ledger = FakeLedger(
            contracts if contracts is not None else {MARKET: constants()},
            decimals=decimals,
            balances=balances,
            allowances=allowances,
        )
        oracle = FakeOracle(price=price, error=oracle_error)
        return Configuration(make_settings(**settings_overrides), ledger, oracle)

    return _make


@pytest.fixture
def oracle_down() -> OracleFetchError:
    return OracleFetchError("connection refused", url=ORACLE_URL)
