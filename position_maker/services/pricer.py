"""仓位 token 定价。

LONG 的公允值为 ``spot - floor``，SHORT 为 ``ceiling - spot``；在此基础上
按方向加减 skew，使报价偏向做市方：

- maker（机器人卖出 token）：``quote + skew``
- taker（机器人买回 token）：``quote - skew``

``skew = max(min_spread / 2, spread_width * (ceiling + floor) / 2)``，
因此即使 spread_width 为 0 也保留最小偏移。最终价格须通过
`SanityChecker` 的大于零与不超过 band 两项检查。
"""

from __future__ import annotations

from decimal import Decimal

from ..logging_config import get_logger
from ..runtime import Configuration
from ..types import MarketContext, Side, TokenRole
from .contract import resolve_role
from .sanity import SanityChecker

logger = get_logger(__name__)


class Pricer:
    def __init__(self, config: Configuration, sanity: SanityChecker):
        self.config = config
        self.sanity = sanity
        self.min_spread = Decimal(config.settings.min_spread)
        self.spread_width = Decimal(config.settings.spread_width)

    async def get(self, token_address: str, side: Side | str, context: MarketContext) -> Decimal:
        """返回 token 在指定方向上的价格，抵押品固定为参考价。"""
        role = resolve_role(context, token_address)
        if role is TokenRole.LONG:
            return await self.long_price(side, context)
        if role is TokenRole.SHORT:
            return await self.short_price(side, context)
        return context.collateral_price

    async def long_price(self, side: Side | str, context: MarketContext) -> Decimal:
        floor = context.band.floor
        spot = await self.spot_price(context)
        return self.apply_skew(spot - floor, self.skew(context), side, context)

    async def short_price(self, side: Side | str, context: MarketContext) -> Decimal:
        ceiling = context.band.ceiling
        spot = await self.spot_price(context)
        return self.apply_skew(ceiling - spot, self.skew(context), side, context)

    def skew(self, context: MarketContext) -> Decimal:
        band = context.band
        skew = (band.ceiling + band.floor) / 2 * self.spread_width
        min_skew = self.min_spread / 2
        return max(skew, min_skew)

    def apply_skew(self, quote: Decimal, skew: Decimal, side: Side | str, context: MarketContext) -> Decimal:
        side = Side(side)
        if side is Side.TAKER:
            proposed = quote - skew
        else:
            proposed = quote + skew

        logger.debug("price_proposed", side=side.value, quote=str(quote), skew=str(skew), proposed=str(proposed))
        self.sanity.greater_than_zero(proposed)
        self.sanity.less_than_band(proposed, context)
        return proposed

    async def spot_price(self, context: MarketContext) -> Decimal:
        """从合约的 oracle URL 获取现货价格；失败直接抛出 `OracleFetchError`。"""
        reading = await self.config.oracle.fetch(context.snapshot.oracle_url)
        return self.sanity.is_numeric(reading.price)


__all__ = ["Pricer"]
