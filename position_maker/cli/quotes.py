"""报价与下单 CLI 子命令，直接复用 Dispatcher 的路由与错误处理。"""

from __future__ import annotations

import asyncio
import json
from typing import Optional

import click

from ..errors import PositionMakerError
from ..types import RequestParams
from . import main
from .common import build_runtime, console, print_quote


@main.command("quote")
@click.option("--maker-token", required=True, help="做市方给出的 token 地址")
@click.option("--taker-token", required=True, help="对手方给出的 token 地址")
@click.option("--maker-amount", type=int, default=None, help="maker 侧整数数量")
@click.option("--taker-amount", type=int, default=None, help="taker 侧整数数量")
@click.option("--max", "max_quote", is_flag=True, default=False, help="按流动性上限报价")
def quote(maker_token: str, taker_token: str, maker_amount: Optional[int], taker_amount: Optional[int], max_quote: bool) -> None:
    """计算报价（不签名、不校验余额）。"""

    async def _quote() -> None:
        config, dispatcher = build_runtime()
        params = RequestParams(
            maker_token=maker_token.lower(),
            taker_token=taker_token.lower(),
            maker_amount=maker_amount,
            taker_amount=taker_amount,
        )
        try:
            strategy = await dispatcher.select(params)
            result = await (strategy.get_max_quote(params) if max_quote else strategy.get_quote(params))
            print_quote(result)
        except PositionMakerError as exc:
            raise click.ClickException(str(exc)) from exc
        finally:
            await config.close()

    asyncio.run(_quote())


@main.command("order")
@click.option("--maker-token", required=True)
@click.option("--taker-token", required=True)
@click.option("--taker-address", required=True, help="对手方钱包地址")
@click.option("--maker-amount", type=int, default=None)
@click.option("--taker-amount", type=int, default=None)
def order(maker_token: str, taker_token: str, taker_address: str, maker_amount: Optional[int], taker_amount: Optional[int]) -> None:
    """走完整的 getOrder 流程并输出 JSON-RPC 响应。"""

    async def _order() -> None:
        config, dispatcher = build_runtime()
        request = {
            "id": "cli",
            "method": "getOrder",
            "params": {
                "makerToken": maker_token,
                "takerToken": taker_token,
                "takerAddress": taker_address,
                "makerAmount": maker_amount,
                "takerAmount": taker_amount,
            },
        }
        try:
            response = await dispatcher.handle(request)
        finally:
            await config.close()
        console.print_json(json.dumps(response))

    asyncio.run(_order())


__all__ = ["quote", "order"]
