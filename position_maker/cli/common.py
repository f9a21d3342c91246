"""CLI 通用工具与共享对象。

本模块提供：

- 统一的 Rich `console` 实例；
- 运行时配置与策略的构建辅助函数；
- 各子命令复用的表格渲染函数。
"""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from ..config import Settings
from ..errors import ConfigurationError
from ..logging_config import configure_logging
from ..runtime import Configuration
from ..services.dispatcher import Dispatcher
from ..services.strategy import MarketContractStrategy
from ..types import ContractSnapshot, Intent, Quote
from ..utils import format_decimal

console = Console()


def build_runtime() -> tuple[Configuration, Dispatcher]:
    """加载配置、初始化日志，并为每个配置的市场合约构建策略。

    Returns:
        ``(Configuration, Dispatcher)`` 二元组。

    Raises:
        click.ClickException: 缺少必需配置时抛出，附带缺失字段说明。
    """
    settings = Settings.load()
    configure_logging(settings.log_level, settings.log_json)
    try:
        config = Configuration.from_settings(settings)
    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc
    strategies = [MarketContractStrategy(address, config) for address in settings.market_contract_list()]
    return config, Dispatcher(strategies)


def print_intents(intents: list[Intent]) -> None:
    table = Table(title="Intents", header_style="bold cyan")
    table.add_column("Role")
    table.add_column("Maker Token", overflow="fold")
    table.add_column("Taker Token", overflow="fold")
    table.add_column("Methods")
    for intent in intents:
        table.add_row(intent.role, intent.maker_token, intent.taker_token, ", ".join(intent.supported_methods))
    console.print(table)


def print_snapshot(snapshot: ContractSnapshot) -> None:
    """以表格形式展示市场合约快照及其派生的价格区间。"""
    band = snapshot.band
    table = Table(title=f"Market {snapshot.address}", header_style="bold cyan", show_header=False)
    table.add_column("Field", style="yellow")
    table.add_column("Value", overflow="fold")
    table.add_row("Long token", snapshot.long_token_address)
    table.add_row("Short token", snapshot.short_token_address)
    table.add_row("Price cap", str(snapshot.price_cap))
    table.add_row("Price floor", str(snapshot.price_floor))
    table.add_row("Decimal places", str(snapshot.price_decimal_places))
    table.add_row("Ceiling", format_decimal(band.ceiling))
    table.add_row("Floor", format_decimal(band.floor))
    table.add_row("Band spread", format_decimal(band.spread))
    table.add_row("Oracle URL", snapshot.oracle_url)
    table.add_row("Oracle statistic", snapshot.oracle_statistic)
    console.print(table)


def print_quote(quote: Quote) -> None:
    table = Table(title="Quote", header_style="bold cyan")
    table.add_column("Side", style="magenta")
    table.add_column("Token", overflow="fold")
    table.add_column("Amount", justify="right")
    table.add_column("Amount (units)", justify="right")
    table.add_column("Price", justify="right")
    table.add_row(
        "maker",
        quote.maker_token,
        format_decimal(quote.maker_amount_decimal),
        str(quote.maker_amount),
        format_decimal(quote.maker_price),
    )
    table.add_row(
        "taker",
        quote.taker_token,
        format_decimal(quote.taker_amount_decimal),
        str(quote.taker_amount),
        format_decimal(quote.taker_price),
    )
    console.print(table)


__all__ = ["console", "build_runtime", "print_intents", "print_snapshot", "print_quote"]
