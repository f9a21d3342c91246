from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import InvalidAddressError, NotNumericError

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def validate_address(value: Any) -> str:
    """校验链上地址格式并返回小写形式。

    Raises:
        InvalidAddressError: 非 ``0x`` 开头的 20 字节十六进制串。
    """
    if not isinstance(value, str) or not _ADDRESS_RE.match(value.strip()):
        raise InvalidAddressError(f"Invalid address: {value!r}", address=str(value))
    return value.strip().lower()


def wrap_decimal(value: Any) -> Decimal:
    """将任意数值表示转换为有限的 Decimal。"""
    if isinstance(value, Decimal):
        num = value
    elif isinstance(value, bool) or value is None:
        raise NotNumericError(f"The value, {value!r}, is not numeric", value=value)
    else:
        try:
            num = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise NotNumericError(f"The value, {value!r}, is not numeric", value=value) from exc
    if not num.is_finite():
        raise NotNumericError(f"The value, {value!r}, is not numeric", value=value)
    return num


def format_decimal(value: Decimal) -> str:
    """输出不带科学计数法的十进制字符串。"""
    text = format(value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
