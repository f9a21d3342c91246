"""请求路由：为入站请求选择所属市场策略并生成 JSON-RPC 风格响应。

消息传输（连接、重连、发送）由外部路由负责，这里只处理
``{id, method, params}`` → ``{id, jsonrpc, result | error}`` 的转换。
"""

from __future__ import annotations

import asyncio
from typing import Any, Iterable, Optional

from ..errors import AmbiguousMarketError, NoMatchingMarketError, PositionMakerError, UnsupportedMethodError
from ..logging_config import get_logger
from ..types import Intent, RequestParams
from .strategy import MarketContractStrategy

logger = get_logger(__name__)

JSONRPC_VERSION = "2.0"


class Dispatcher:
    def __init__(self, strategies: Iterable[MarketContractStrategy]):
        self.strategies = list(strategies)

    async def select(self, params: RequestParams) -> MarketContractStrategy:
        """返回唯一匹配请求 token 的策略。

        Raises:
            NoMatchingMarketError: 没有策略匹配。
            AmbiguousMarketError: 多个策略同时匹配。
        """
        results = await asyncio.gather(*(strategy.match(params) for strategy in self.strategies))
        matched = [strategy for strategy, ok in zip(self.strategies, results) if ok]
        if not matched:
            raise NoMatchingMarketError(
                f"No market trades {params.maker_token}/{params.taker_token}",
                context={"maker_token": params.maker_token, "taker_token": params.taker_token},
            )
        if len(matched) > 1:
            raise AmbiguousMarketError(
                f"{len(matched)} markets match {params.maker_token}/{params.taker_token}",
                context={"markets": [strategy.address for strategy in matched]},
            )
        return matched[0]

    async def intents(self) -> list[Intent]:
        batches = await asyncio.gather(*(strategy.intents() for strategy in self.strategies))
        return [intent for batch in batches for intent in batch]

    async def dispatch(self, method: str, params: RequestParams) -> dict[str, Any]:
        strategy = await self.select(params)
        if method == "getOrder":
            return (await strategy.get_order(params)).to_payload()
        if method == "getQuote":
            return (await strategy.get_quote(params)).to_payload()
        if method == "getMaxQuote":
            return (await strategy.get_max_quote(params)).to_payload()
        raise UnsupportedMethodError(f"Unsupported method: {method}")

    async def handle(self, request: dict[str, Any]) -> dict[str, Any]:
        """处理单个入站请求，任何异常都只影响本请求。

        业务异常（`PositionMakerError`）转换为 ``error`` 字段；其余异常记录堆栈后
        以 ``internal error`` 返回。
        """
        request_id: Optional[Any] = request.get("id")
        method = str(request.get("method") or "")
        logger.info("request_received", id=request_id, method=method)
        try:
            params = RequestParams.from_payload(request.get("params") or {})
            result = await self.dispatch(method, params)
        except PositionMakerError as exc:
            logger.warning("request_rejected", id=request_id, method=method, error_type=type(exc).__name__, error=str(exc))
            return {"id": request_id, "jsonrpc": JSONRPC_VERSION, "error": str(exc)}
        except Exception:  # noqa: BLE001
            logger.exception("request_failed", id=request_id, method=method)
            return {"id": request_id, "jsonrpc": JSONRPC_VERSION, "error": "internal error"}

        logger.info("request_answered", id=request_id, method=method)
        return {"id": request_id, "jsonrpc": JSONRPC_VERSION, "result": result}


__all__ = ["Dispatcher", "JSONRPC_VERSION"]
