from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from .errors import InvalidAmountError

SUPPORTED_METHODS = ("getOrder", "getQuote", "getMaxQuote")


class TokenRole(str, Enum):
    COLLATERAL = "collateral"
    LONG = "long"
    SHORT = "short"


class Side(str, Enum):
    """报价方向：maker 表示机器人卖出该 token，taker 表示机器人买回。"""

    MAKER = "maker"
    TAKER = "taker"


@dataclass(frozen=True)
class ContractSnapshot:
    """市场合约的不可变参数快照。

    首次访问时从链上读取，之后在进程生命周期内缓存，不会失效。
    链上参数一旦变化，快照不会感知（合约常量按约定不可变）。

    Attributes:
        address: 市场合约地址（小写）。
        long_token_address: LONG 仓位 token 地址（小写）。
        short_token_address: SHORT 仓位 token 地址（小写）。
        price_cap: 整数形式的价格上限。
        price_floor: 整数形式的价格下限。
        price_decimal_places: 价格的小数位数。
        oracle_url: 现货价格预言机地址。
        oracle_statistic: 预言机统计口径（原样保存）。
    """

    address: str
    long_token_address: str
    short_token_address: str
    price_cap: int
    price_floor: int
    price_decimal_places: int
    oracle_url: str
    oracle_statistic: str

    @property
    def band(self) -> "PriceBand":
        return PriceBand.from_snapshot(self)


@dataclass(frozen=True)
class PriceBand:
    ceiling: Decimal
    floor: Decimal

    @classmethod
    def from_snapshot(cls, snapshot: ContractSnapshot) -> "PriceBand":
        scale = Decimal(10) ** snapshot.price_decimal_places
        return cls(
            ceiling=Decimal(snapshot.price_cap) / scale,
            floor=Decimal(snapshot.price_floor) / scale,
        )

    @property
    def spread(self) -> Decimal:
        return self.ceiling - self.floor


@dataclass(frozen=True)
class MarketContext:
    """单次定价调用共享的只读上下文（快照 + 抵押品配置）。"""

    snapshot: ContractSnapshot
    collateral_address: str
    collateral_price: Decimal

    @property
    def band(self) -> PriceBand:
        return self.snapshot.band

    def role_of(self, token_address: str) -> Optional[TokenRole]:
        """按地址解析 token 角色，未知 token 返回 None。"""
        address = token_address.lower()
        if address == self.snapshot.long_token_address:
            return TokenRole.LONG
        if address == self.snapshot.short_token_address:
            return TokenRole.SHORT
        if address == self.collateral_address:
            return TokenRole.COLLATERAL
        return None


@dataclass
class OracleReading:
    price: Any
    symbol: Optional[str] = None
    timestamp: Optional[int] = None


@dataclass
class RequestParams:
    """Dispatcher 传入的请求参数（已统一为小写地址）。"""

    maker_token: str
    taker_token: str
    maker_amount: Optional[int] = None
    taker_amount: Optional[int] = None
    taker_address: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RequestParams":
        def _amount(key: str) -> Optional[int]:
            value = payload.get(key)
            if value in (None, ""):
                return None
            try:
                amount = Decimal(str(value))
                if amount != amount.to_integral_value():
                    raise InvalidAmountError(f"{key} must be an integer base-unit amount: {value!r}")
                if amount < 0:
                    raise InvalidAmountError(f"{key} must not be negative: {value!r}")
                return int(amount)
            except (InvalidOperation, ValueError, OverflowError) as exc:
                raise InvalidAmountError(f"Invalid {key}: {value!r}") from exc

        taker_address = payload.get("takerAddress")
        return cls(
            maker_token=str(payload.get("makerToken") or "").lower(),
            taker_token=str(payload.get("takerToken") or "").lower(),
            maker_amount=_amount("makerAmount"),
            taker_amount=_amount("takerAmount"),
            taker_address=str(taker_address).lower() if taker_address else None,
        )


@dataclass
class Amounts:
    """`get_amounts` 的结果：双方的小数数量、整数数量与价格。"""

    maker_amount_decimal: Decimal
    maker_amount_integer: int
    maker_price: Decimal
    taker_amount_decimal: Decimal
    taker_amount_integer: int
    taker_price: Decimal


@dataclass
class ValidatedAmounts:
    maker_amount: int
    taker_amount: int
    maker_amount_decimal: Decimal
    taker_amount_decimal: Decimal
    maker_price: Decimal
    taker_price: Decimal


@dataclass
class Quote:
    """报价结果：整数数量用于链上，小数数量与价格便于展示与校验。"""

    maker_address: str
    maker_token: str
    taker_token: str
    maker_amount: int
    taker_amount: int
    maker_amount_decimal: Decimal
    taker_amount_decimal: Decimal
    maker_price: Decimal
    taker_price: Decimal

    def to_payload(self) -> dict[str, Any]:
        # 数量以整数字符串输出，避免浮点误差
        return {
            "makerAddress": self.maker_address,
            "makerToken": self.maker_token,
            "takerToken": self.taker_token,
            "makerAmount": str(self.maker_amount),
            "takerAmount": str(self.taker_amount),
        }


@dataclass
class Order:
    maker_address: str
    maker_amount: int
    maker_token: str
    taker_address: str
    taker_amount: int
    taker_token: str
    expiration: int
    nonce: int

    def to_payload(self) -> dict[str, Any]:
        return {
            "makerAddress": self.maker_address,
            "makerAmount": str(self.maker_amount),
            "makerToken": self.maker_token,
            "takerAddress": self.taker_address,
            "takerAmount": str(self.taker_amount),
            "takerToken": self.taker_token,
            "expiration": self.expiration,
            "nonce": str(self.nonce),
        }


@dataclass
class SignedOrder:
    order: Order
    v: int
    r: str
    s: str
    order_hash: str

    def to_payload(self) -> dict[str, Any]:
        payload = self.order.to_payload()
        payload.update({"v": self.v, "r": self.r, "s": self.s})
        return payload


@dataclass
class Intent:
    maker_token: str
    taker_token: str
    role: str = "maker"
    supported_methods: list[str] = field(default_factory=lambda: list(SUPPORTED_METHODS))

    def to_payload(self) -> dict[str, Any]:
        data = asdict(self)
        return {
            "role": data["role"],
            "supportedMethods": data["supported_methods"],
            "makerToken": data["maker_token"],
            "takerToken": data["taker_token"],
        }
