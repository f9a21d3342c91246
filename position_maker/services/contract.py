"""市场合约常量的加载与缓存。"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Optional, Sequence

from ..errors import ContractStateError, UnknownTokenError
from ..logging_config import get_logger
from ..runtime import Configuration
from ..types import ContractSnapshot, MarketContext, PriceBand, TokenRole
from ..utils import validate_address

logger = get_logger(__name__)


class MarketContractWrapper:
    """单个市场合约的参数快照加载器。

    首次调用 `load` 时并发读取七个合约常量并冻结为 `ContractSnapshot`，
    之后的调用直接返回缓存，不再访问账本。缓存从不失效：合约常量按约定
    不可变，可通过 `verify_unchanged` 显式校验这一假设。

    并发的首次调用会各自读取一次链上数据，后写入者覆盖缓存；由于读取的是
    不可变常量，结果一致。
    """

    def __init__(self, address: str, config: Configuration):
        self.address = address.lower()
        self.config = config
        self._snapshot: Optional[ContractSnapshot] = None

    @property
    def cached(self) -> Optional[ContractSnapshot]:
        return self._snapshot

    async def load(self) -> ContractSnapshot:
        """返回缓存的快照，首次调用时从链上读取。

        Raises:
            InvalidAddressError: 合约地址格式非法（在任何读取之前）。
            ContractStateError: 读到的常量违反 cap >= floor 等不变量。
        """
        if self._snapshot is not None:
            return self._snapshot

        address = validate_address(self.address)
        logger.info("market_contract_loading", address=address)
        raw = await self.config.ledger.read_contract_constants(address)
        snapshot = build_snapshot(address, raw)
        self._snapshot = snapshot
        logger.info(
            "market_contract_loaded",
            address=address,
            long_token=snapshot.long_token_address,
            short_token=snapshot.short_token_address,
            price_cap=snapshot.price_cap,
            price_floor=snapshot.price_floor,
            price_decimal_places=snapshot.price_decimal_places,
            oracle_url=snapshot.oracle_url,
        )
        return snapshot

    async def verify_unchanged(self) -> ContractSnapshot:
        """重新读取链上常量并与缓存比较，不一致时抛出 `ContractStateError`。"""
        cached = await self.load()
        raw = await self.config.ledger.read_contract_constants(cached.address)
        fresh = build_snapshot(cached.address, raw)
        if fresh != cached:
            logger.error("market_contract_changed", address=cached.address)
            raise ContractStateError(
                f"Market contract {cached.address} constants changed since load",
                context={"cached": cached, "fresh": fresh},
            )
        return cached

    async def band(self) -> PriceBand:
        return (await self.load()).band

    async def ceiling(self) -> Decimal:
        return (await self.band()).ceiling

    async def floor(self) -> Decimal:
        return (await self.band()).floor

    async def band_spread(self) -> Decimal:
        return (await self.band()).spread

    async def token_addresses(self) -> tuple[str, str]:
        """返回 ``(long, short)`` 仓位 token 地址（小写）。"""
        snapshot = await self.load()
        return snapshot.long_token_address, snapshot.short_token_address

    async def oracle_url(self) -> str:
        return (await self.load()).oracle_url

    async def context(self) -> MarketContext:
        snapshot = await self.load()
        return MarketContext(
            snapshot=snapshot,
            collateral_address=self.config.collateral_address,
            collateral_price=self.config.collateral_price(),
        )

    async def token_role(self, token_address: str) -> TokenRole:
        context = await self.context()
        return resolve_role(context, token_address)


def resolve_role(context: MarketContext, token_address: str) -> TokenRole:
    role = context.role_of(token_address)
    if role is None:
        raise UnknownTokenError(
            f"Token {token_address} is not traded by market {context.snapshot.address}",
            context={"token": token_address},
        )
    return role


def build_snapshot(address: str, raw: Sequence[Any]) -> ContractSnapshot:
    """将七个原始合约常量转换为 `ContractSnapshot` 并校验不变量。"""
    if len(raw) != 7:
        raise ContractStateError(f"Expected 7 contract constants, got {len(raw)}")
    long_token, short_token, cap, floor, places, oracle_url, oracle_statistic = raw
    snapshot = ContractSnapshot(
        address=address,
        long_token_address=validate_address(long_token),
        short_token_address=validate_address(short_token),
        price_cap=int(cap),
        price_floor=int(floor),
        price_decimal_places=int(places),
        oracle_url=str(oracle_url),
        oracle_statistic=str(oracle_statistic),
    )
    if snapshot.price_decimal_places < 0:
        raise ContractStateError(f"Negative price decimal places for {address}")
    if snapshot.price_cap < snapshot.price_floor:
        raise ContractStateError(
            f"Price cap {snapshot.price_cap} is below price floor {snapshot.price_floor} for {address}",
            context={"price_cap": snapshot.price_cap, "price_floor": snapshot.price_floor},
        )
    return snapshot


__all__ = ["MarketContractWrapper", "build_snapshot", "resolve_role"]
