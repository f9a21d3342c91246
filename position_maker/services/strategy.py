"""单个市场合约的做市策略。

负责数量换算、价格查询、流动性截断、余额校验与请求匹配，
并在 getOrder 时生成签名订单。
"""

from __future__ import annotations

from decimal import Decimal
from typing import Literal, Optional

from ..errors import InsufficientBalanceError, InvalidAddressError, InvalidAmountError
from ..logging_config import get_logger
from ..runtime import Configuration
from ..types import Amounts, Intent, MarketContext, Quote, RequestParams, Side, SignedOrder, ValidatedAmounts
from ..utils import format_decimal, validate_address
from .contract import MarketContractWrapper
from .pricer import Pricer
from .sanity import SanityChecker
from .signer import build_order, sign_order

logger = get_logger(__name__)


class MarketContractStrategy:
    """绑定单个市场合约的报价与下单逻辑。

    每个策略持有自己的合约快照加载器、`Pricer` 与 `SanityChecker`；
    定价所需的共享状态通过只读的 `MarketContext` 显式传递。
    """

    def __init__(self, address: str, config: Configuration):
        self.address = address.lower()
        self.config = config
        self.contract = MarketContractWrapper(self.address, config)
        self.sanity = SanityChecker()
        self.pricer = Pricer(config, self.sanity)

    async def get_price(self, token_address: str, side: Side | str, context: Optional[MarketContext] = None) -> Decimal:
        context = context or await self.contract.context()
        return await self.pricer.get(token_address, side, context)

    async def get_amounts(
        self,
        maker_amount: Optional[int],
        maker_token: str,
        taker_amount: Optional[int],
        taker_token: str,
    ) -> Amounts:
        """根据已知一侧的整数数量推导另一侧数量。

        ``other = known * known_price / other_price``；若两侧都给出，以非零的 maker 数量为准，
        maker 数量为零时退回 taker 一侧。

        Raises:
            InvalidAmountError: 两侧数量均缺失，或已知一侧为负数。
        """
        context = await self.contract.context()
        maker_price = await self.pricer.get(maker_token, Side.MAKER, context)
        taker_price = await self.pricer.get(taker_token, Side.TAKER, context)
        converter = self.config.converter

        if maker_amount is not None and (maker_amount or taker_amount is None):
            if maker_amount < 0:
                raise InvalidAmountError(f"Negative makerAmount: {maker_amount}")
            maker_amount_d = await converter.decimalize(maker_token, maker_amount)
            taker_amount_d = maker_price * maker_amount_d / taker_price
        elif taker_amount is not None:
            if taker_amount < 0:
                raise InvalidAmountError(f"Negative takerAmount: {taker_amount}")
            taker_amount_d = await converter.decimalize(taker_token, taker_amount)
            maker_amount_d = taker_price * taker_amount_d / maker_price
        else:
            raise InvalidAmountError("Either makerAmount or takerAmount is required")

        return Amounts(
            maker_amount_decimal=maker_amount_d,
            maker_amount_integer=await converter.integerize(maker_token, maker_amount_d),
            maker_price=maker_price,
            taker_amount_decimal=taker_amount_d,
            taker_amount_integer=await converter.integerize(taker_token, taker_amount_d),
            taker_price=taker_price,
        )

    async def get_quote(self, params: RequestParams) -> Quote:
        """按请求数量报价，并截断到流动性上限。

        maker 为抵押品时机器人买入仓位 token，taker 数量不超过 `max_purchase`；
        否则机器人卖出仓位 token，maker 数量不超过 `max_sale`。截断后按同一价格比例
        重新计算另一侧数量。
        """
        amounts = await self.get_amounts(params.maker_amount, params.maker_token, params.taker_amount, params.taker_token)
        maker_price, taker_price = amounts.maker_price, amounts.taker_price
        maker_amount_d, taker_amount_d = amounts.maker_amount_decimal, amounts.taker_amount_decimal

        if self.config.is_collateral_token(params.maker_token):
            limit = await self.max_purchase()
            if taker_amount_d > limit:
                logger.info("quote_clipped", market=self.address, side="taker", requested=str(taker_amount_d), limit=str(limit))
                taker_amount_d = limit
                maker_amount_d = taker_price * taker_amount_d / maker_price
        else:
            limit = await self.max_sale()
            if maker_amount_d > limit:
                logger.info("quote_clipped", market=self.address, side="maker", requested=str(maker_amount_d), limit=str(limit))
                maker_amount_d = limit
                taker_amount_d = maker_price * maker_amount_d / taker_price

        return await self._build_quote(params, maker_amount_d, taker_amount_d, maker_price, taker_price)

    async def get_max_quote(self, params: RequestParams) -> Quote:
        """始终按流动性上限报价，忽略请求中的数量。"""
        context = await self.contract.context()
        maker_price = await self.pricer.get(params.maker_token, Side.MAKER, context)
        taker_price = await self.pricer.get(params.taker_token, Side.TAKER, context)

        if self.config.is_collateral_token(params.maker_token):
            taker_amount_d = await self.max_purchase()
            maker_amount_d = taker_price * taker_amount_d / maker_price
        else:
            maker_amount_d = await self.max_sale()
            taker_amount_d = maker_price * maker_amount_d / taker_price

        return await self._build_quote(params, maker_amount_d, taker_amount_d, maker_price, taker_price)

    async def _build_quote(
        self,
        params: RequestParams,
        maker_amount_d: Decimal,
        taker_amount_d: Decimal,
        maker_price: Decimal,
        taker_price: Decimal,
    ) -> Quote:
        converter = self.config.converter
        return Quote(
            maker_address=self.config.wallet_address,
            maker_token=params.maker_token,
            taker_token=params.taker_token,
            maker_amount=await converter.integerize(params.maker_token, maker_amount_d),
            taker_amount=await converter.integerize(params.taker_token, taker_amount_d),
            maker_amount_decimal=maker_amount_d,
            taker_amount_decimal=taker_amount_d,
            maker_price=maker_price,
            taker_price=taker_price,
        )

    async def max_purchase(self) -> Decimal:
        spread = await self.contract.band_spread()
        limit = self.config.liquidity_limit(spread)
        logger.debug("liquidity_limit", market=self.address, spread=format_decimal(spread), limit=format_decimal(limit))
        return limit

    async def max_sale(self) -> Decimal:
        return await self.max_purchase()

    async def match(self, params: RequestParams) -> bool:
        """请求中任一 token 属于本市场的 long/short token 时返回 True。"""
        long_address, short_address = await self.contract.token_addresses()
        tokens = {params.maker_token.lower(), params.taker_token.lower()}
        return long_address in tokens or short_address in tokens

    async def validate_balances(self, params: RequestParams) -> ValidatedAmounts | Literal[False]:
        """校验双方余额，任一检查失败时返回 False（不会返回部分结果）。"""
        try:
            return await self.check_balances(params)
        except (InvalidAmountError, InsufficientBalanceError) as exc:
            logger.info("order_halted", market=self.address, reason=str(exc))
            return False

    async def check_balances(self, params: RequestParams) -> ValidatedAmounts:
        """与 `validate_balances` 相同，但以具体异常说明拒绝原因。

        Raises:
            InvalidAmountError: 数量缺失、maker 数量折算为零或任一侧数量非正。
            InsufficientBalanceError: maker 或 taker 链上余额不足。
            InvalidAddressError: 缺少或非法的 takerAddress。
        """
        if not params.maker_amount and not params.taker_amount:
            raise InvalidAmountError("Null amount order request")
        if not params.taker_address:
            raise InvalidAddressError("takerAddress is required", address=None)
        taker_address = validate_address(params.taker_address)

        amounts = await self.get_amounts(params.maker_amount, params.maker_token, params.taker_amount, params.taker_token)
        if amounts.maker_amount_decimal.is_zero():
            raise InvalidAmountError("Zero amount order request")
        if amounts.maker_amount_decimal < 0 or amounts.taker_amount_decimal <= 0:
            raise InvalidAmountError("Order amounts must be positive")

        ledger = self.config.ledger
        maker_balance = await ledger.balance_of(self.config.wallet_address, params.maker_token)
        if maker_balance < amounts.maker_amount_integer:
            logger.info(
                "insufficient_maker_balance",
                token=params.maker_token,
                balance=maker_balance,
                required=amounts.maker_amount_integer,
            )
            raise InsufficientBalanceError(
                f"Insufficient maker balance: {maker_balance} < {amounts.maker_amount_integer}",
                account=self.config.wallet_address,
                token=params.maker_token,
            )

        taker_balance = await ledger.balance_of(taker_address, params.taker_token)
        if taker_balance < amounts.taker_amount_integer:
            logger.info(
                "insufficient_taker_balance",
                token=params.taker_token,
                balance=taker_balance,
                required=amounts.taker_amount_integer,
            )
            raise InsufficientBalanceError(
                f"Insufficient taker balance: {taker_balance} < {amounts.taker_amount_integer}",
                account=taker_address,
                token=params.taker_token,
            )

        return ValidatedAmounts(
            maker_amount=amounts.maker_amount_integer,
            taker_amount=amounts.taker_amount_integer,
            maker_amount_decimal=amounts.maker_amount_decimal,
            taker_amount_decimal=amounts.taker_amount_decimal,
            maker_price=amounts.maker_price,
            taker_price=amounts.taker_price,
        )

    async def get_order(self, params: RequestParams) -> SignedOrder:
        """校验余额后构造并签名订单，过期时间为当前时间加 ``order_ttl_seconds``。"""
        validated = await self.check_balances(params)
        order = build_order(
            maker_address=self.config.wallet_address,
            maker_amount=validated.maker_amount,
            maker_token=params.maker_token,
            taker_address=params.taker_address or "",
            taker_amount=validated.taker_amount,
            taker_token=params.taker_token,
            ttl_seconds=self.config.settings.order_ttl_seconds,
        )
        signed = sign_order(order, self.config.ledger.sign_message)
        logger.info("order_signed", market=self.address, order_hash=signed.order_hash, nonce=order.nonce)
        return signed

    async def enable_tokens(self) -> bool:
        long_address, short_address = await self.contract.token_addresses()
        await self.config.enable_token(long_address)
        await self.config.enable_token(short_address)
        return True

    async def intents(self) -> list[Intent]:
        """本市场支持的四个 maker 交易对（抵押品与 long/short 双向）。"""
        collateral = self.config.collateral_address
        long_address, short_address = await self.contract.token_addresses()
        pairs = [
            (collateral, long_address),
            (long_address, collateral),
            (collateral, short_address),
            (short_address, collateral),
        ]
        return [Intent(maker_token=maker, taker_token=taker) for maker, taker in pairs]


__all__ = ["MarketContractStrategy"]
