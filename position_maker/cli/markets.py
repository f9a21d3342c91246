"""市场合约相关 CLI 子命令。

包含：

- 所有市场的 maker intents；
- 单个市场合约快照查看（可选校验常量未变化）；
- 抵押品与仓位 token 的授权。
"""

from __future__ import annotations

import asyncio

import click

from ..errors import PositionMakerError
from . import main
from .common import build_runtime, console, print_intents, print_snapshot


@main.command("intents")
def intents() -> None:
    """列出所有配置市场的 maker 交易对。"""

    async def _show() -> None:
        config, dispatcher = build_runtime()
        try:
            print_intents(await dispatcher.intents())
        finally:
            await config.close()

    asyncio.run(_show())


@main.command("snapshot")
@click.option("--market", "market_address", required=True, help="市场合约地址")
@click.option("--verify", is_flag=True, default=False, help="重新读取链上常量并与缓存比较")
def snapshot(market_address: str, verify: bool) -> None:
    """展示市场合约的参数快照。"""

    async def _show() -> None:
        config, dispatcher = build_runtime()
        try:
            matches = [s for s in dispatcher.strategies if s.address == market_address.lower()]
            if not matches:
                raise click.BadParameter(f"Market {market_address} is not configured", param_hint="--market")
            wrapper = matches[0].contract
            snap = await (wrapper.verify_unchanged() if verify else wrapper.load())
            print_snapshot(snap)
            if verify:
                console.print("[green]On-chain constants match the cached snapshot[/green]")
        except PositionMakerError as exc:
            raise click.ClickException(str(exc)) from exc
        finally:
            await config.close()

    asyncio.run(_show())


@main.command("enable-tokens")
def enable_tokens() -> None:
    """为交易所授权抵押品及各市场的 long/short token（已授权则跳过）。"""

    async def _enable() -> None:
        config, dispatcher = build_runtime()
        try:
            await config.enable_collateral_token()
            for strategy in dispatcher.strategies:
                await strategy.enable_tokens()
                console.print(f"[green]Enabled tokens for market {strategy.address}[/green]")
        except PositionMakerError as exc:
            raise click.ClickException(str(exc)) from exc
        finally:
            await config.close()

    asyncio.run(_enable())


__all__ = ["intents", "snapshot", "enable_tokens"]
