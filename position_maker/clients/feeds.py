"""各预言机数据源的 JSON 结构归一化。

每个 normalizer 接收原始 payload，返回统一的 `OracleReading`；结构不符时抛出
`OracleFetchError`，不会返回部分结果。
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable
from urllib.parse import urlparse

from ..errors import NotNumericError, OracleFetchError
from ..types import OracleReading
from ..utils import wrap_decimal

Normalizer = Callable[[Any], OracleReading]


def normalize_coincap_data(payload: Any) -> OracleReading:
    """CoinCap：``{"data": {"priceUsd"|"rateUsd", "symbol"}, "timestamp"}``，优先取 rateUsd。"""
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), dict):
        raise OracleFetchError("Malformed coincap payload: missing 'data'")
    data = payload["data"]
    price = data.get("rateUsd") or data.get("priceUsd")
    if price is None:
        raise OracleFetchError("Malformed coincap payload: missing price")
    return OracleReading(price=price, symbol=data.get("symbol"), timestamp=payload.get("timestamp"))


def normalize_compound_data(payload: Any) -> OracleReading:
    """Compound cToken 接口：取首个 cToken 的 supply_rate，换算为百分比并保留两位小数。"""
    try:
        value = payload["cToken"][0]["supply_rate"]["value"]
    except (KeyError, IndexError, TypeError) as exc:
        raise OracleFetchError("Malformed compound payload: missing cToken supply_rate") from exc
    try:
        rate = wrap_decimal(value) * 100
    except NotNumericError as exc:
        raise OracleFetchError(f"Malformed compound payload: non-numeric supply_rate {value!r}") from exc
    return OracleReading(price=rate.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


NORMALIZERS: dict[str, Normalizer] = {
    "coincap": normalize_coincap_data,
    "compound": normalize_compound_data,
}


def resolve_normalizer(url: str, provider: str = "auto") -> Normalizer:
    """根据配置或 URL 主机名选择 normalizer。"""
    name = (provider or "auto").lower()
    if name != "auto":
        if name not in NORMALIZERS:
            raise OracleFetchError(f"Unknown oracle provider: {provider}", url=url)
        return NORMALIZERS[name]

    host = (urlparse(url).hostname or "").lower()
    for key, normalizer in NORMALIZERS.items():
        if key in host:
            return normalizer
    raise OracleFetchError(f"No feed normalizer for oracle host {host or url!r}", url=url)


__all__ = ["NORMALIZERS", "normalize_coincap_data", "normalize_compound_data", "resolve_normalizer"]
