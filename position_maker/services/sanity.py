from __future__ import annotations

from decimal import Decimal
from typing import Any

from ..errors import ExceedsBandError, NotAboveZeroError
from ..types import MarketContext
from ..utils import format_decimal, wrap_decimal


class SanityChecker:
    """定价结果使用前的合理性检查。

    每个检查要么正常返回，要么抛出对应的 `SanityError` 子类，没有其他副作用。
    """

    def greater_than_zero(self, value: Any) -> Decimal:
        num = wrap_decimal(value)
        if num > 0:
            return num
        raise NotAboveZeroError(f"The value, {format_decimal(num)}, is not greater than 0", value=num)

    def is_numeric(self, value: Any) -> Decimal:
        # 非数字、NaN 与无穷大均抛出 NotNumericError
        return wrap_decimal(value)

    def less_than_band(self, value: Any, context: MarketContext) -> Decimal:
        """报价不得超过合约 band（ceiling - floor），即仓位 token 的理论最大价值。"""
        num = wrap_decimal(value)
        band_spread = context.band.spread
        if num > band_spread:
            raise ExceedsBandError(
                f"The quote ({format_decimal(num)}) would exceed the maximum token value ({format_decimal(band_spread)})",
                value=num,
                context={"band_spread": band_spread},
            )
        return num


__all__ = ["SanityChecker"]
