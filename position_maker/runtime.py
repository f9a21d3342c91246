"""进程级运行时配置对象。

`Configuration` 在启动时构建一次，显式传入每个需要签名、余额或预言机访问的组件，
生命周期与进程一致。
"""

from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import Optional

from .clients.abi import MAX_UINT256
from .clients.ledger import AmountConverter, LedgerClient, Web3LedgerClient
from .clients.oracle import OracleClient
from .config import Settings
from .logging_config import get_logger
from .utils import validate_address

logger = get_logger(__name__)


class Configuration:
    """钱包身份、抵押品语义与外部协作方（账本、预言机）的集合。"""

    def __init__(self, settings: Settings, ledger: LedgerClient, oracle: OracleClient):
        self.settings = settings
        self.ledger = ledger
        self.oracle = oracle
        self.converter = AmountConverter(ledger)
        self.collateral_address = validate_address(settings.collateral_address)
        self.exchange_address = validate_address(settings.exchange_address)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Configuration":
        """校验配置并构建基于 web3 / httpx 的默认协作方。"""
        settings = (settings or Settings.load()).require()
        return cls(settings, Web3LedgerClient(settings), OracleClient(settings))

    @property
    def wallet_address(self) -> str:
        return self.ledger.wallet_address.lower()

    def is_collateral_token(self, address: str) -> bool:
        return address.lower() == self.collateral_address

    def collateral_price(self) -> Decimal:
        return Decimal(self.settings.collateral_price)

    def liquidity_limit(self, spread: Decimal) -> Decimal:
        return self.settings.liquidity_limit(spread)

    async def enable_token(self, token_address: str) -> bool:
        """确保交易所对该 token 拥有授权；已有非零额度时直接返回。

        Returns:
            True 表示此前已授权，False 表示本次发送了 approve 交易。
        """
        token = validate_address(token_address)
        approved = await self.ledger.allowance(self.wallet_address, token, self.exchange_address)
        if approved > 0:
            logger.info("token_already_enabled", token=token, allowance=approved)
            return True

        tx_hash = await self.ledger.approve(token, self.exchange_address, MAX_UINT256)
        logger.info("token_approve_sent", token=token, spender=self.exchange_address, tx_hash=tx_hash)
        return False

    async def enable_collateral_token(self) -> bool:
        return await self.enable_token(self.collateral_address)

    async def close(self) -> None:
        await asyncio.gather(self.ledger.close(), self.oracle.close())


__all__ = ["Configuration"]
