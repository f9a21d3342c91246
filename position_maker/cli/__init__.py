"""position-maker CLI 顶层入口。

本模块仅负责定义 Click 命令组并导入各子命令模块，
实际业务逻辑在 `position_maker.services` 中。
"""

from __future__ import annotations

import click


@click.group()
def main() -> None:
    """Long/short position token market maker."""


# 导入子模块以注册子命令（装饰器在导入时执行）
from . import markets as _markets  # noqa: F401,E402
from . import quotes as _quotes  # noqa: F401,E402


__all__ = ["main"]
