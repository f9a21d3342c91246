"""做市核心的异常分类。

所有业务异常均继承自 `PositionMakerError`，在 Dispatcher 边界被转换为
``{"error": ...}`` 响应；其余未预期异常只影响当前请求并被记录。
"""

from __future__ import annotations

from typing import Any, Optional


class PositionMakerError(Exception):
    """Base class for errors recovered at the request boundary."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(PositionMakerError):
    """启动参数缺失或非法，属于致命错误。"""


class InvalidAddressError(PositionMakerError):
    """链上地址格式不合法。"""

    def __init__(self, message: str, address: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.address = address


class SanityError(PositionMakerError):
    """价格合理性检查失败的基类。"""

    def __init__(self, message: str, value: Any = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.value = value


class NotAboveZeroError(SanityError):
    pass


class NotNumericError(SanityError):
    pass


class ExceedsBandError(SanityError):
    pass


class InvalidAmountError(PositionMakerError):
    """请求数量缺失或折算后为零。"""


class InsufficientBalanceError(PositionMakerError):
    """Maker 或 taker 余额不足以完成订单。"""

    def __init__(self, message: str, account: Optional[str] = None, token: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.account = account
        self.token = token


class OracleFetchError(PositionMakerError):
    """预言机不可达或返回内容无法解析。"""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.url = url


class UnknownTokenError(PositionMakerError):
    """Token 既不是 long/short 也不是抵押品。"""


class ContractStateError(PositionMakerError):
    """合约常量违反不变量（如 cap < floor 或缓存后被修改）。"""


class MarketMatchError(PositionMakerError):
    pass


class NoMatchingMarketError(MarketMatchError):
    pass


class AmbiguousMarketError(MarketMatchError):
    pass


class UnsupportedMethodError(PositionMakerError):
    pass


__all__ = [
    "PositionMakerError",
    "ConfigurationError",
    "InvalidAddressError",
    "SanityError",
    "NotAboveZeroError",
    "NotNumericError",
    "ExceedsBandError",
    "InvalidAmountError",
    "InsufficientBalanceError",
    "OracleFetchError",
    "UnknownTokenError",
    "ContractStateError",
    "MarketMatchError",
    "NoMatchingMarketError",
    "AmbiguousMarketError",
    "UnsupportedMethodError",
]
