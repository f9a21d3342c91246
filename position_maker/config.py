from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError, InvalidAddressError, NotNumericError
from .utils import validate_address, wrap_decimal

AIRSWAP_EXCHANGE_ADDRESS = "0x8fd3121013a07c57f0d69646e86e7a4880b467b7"
DAI_ADDRESS = "0x89d24a6b4ccb1b6faa2625fe562bdd9a23260359"


class Settings(BaseSettings):
    """运行时配置模型，从环境变量或 .env 加载。

    集中管理钱包私钥、RPC 端点、交易所与抵押品地址、需要做市的
    市场合约列表，以及报价偏移、流动性上限和日志级别等参数。
    """

    private_key: Optional[str] = None
    rpc_url: Optional[str] = None
    # 逗号分隔的市场合约地址
    market_contracts: str = ""

    exchange_address: str = AIRSWAP_EXCHANGE_ADDRESS
    collateral_address: str = DAI_ADDRESS
    collateral_price: Decimal = Decimal("1")

    # 报价偏移：skew = max(min_spread / 2, spread_width * (ceiling + floor) / 2)
    min_spread: Decimal = Decimal("0.75")
    spread_width: Decimal = Decimal("0")

    # 流动性上限阶梯："阈值:上限" 以逗号分隔，band spread 严格小于阈值时命中
    liquidity_steps: str = "150:2.5"
    liquidity_base_limit: Decimal = Decimal("0.1")

    order_ttl_seconds: int = 300
    oracle_provider: str = "auto"  # auto | coincap | compound
    http_timeout_seconds: float = 10.0

    approve_gas_limit: int = 160000
    approve_gas_price_gwei: int = 40

    log_level: str = "INFO"
    log_json: bool = False

    model_config = SettingsConfigDict(env_file=".env", env_prefix="", extra="ignore")

    @classmethod
    def load(cls, env_file: Optional[str | Path] = None, overrides: Optional[dict[str, Any]] = None) -> "Settings":
        """Load settings, allowing an optional .env override and programmatic overrides."""
        kwargs: dict[str, Any] = {}
        if env_file:
            kwargs["_env_file"] = env_file
        if overrides:
            kwargs.update(overrides)
        return cls(**kwargs)

    def require(self) -> "Settings":
        """校验启动必需参数，缺失或非法时抛出 `ConfigurationError`。"""
        missing = [name for name in ("private_key", "rpc_url") if not getattr(self, name)]
        if not self.market_contracts.strip():
            missing.append("market_contracts")
        if missing:
            raise ConfigurationError(
                f"Missing required config: {', '.join(name.upper() for name in missing)}",
                context={"missing": missing},
            )
        try:
            self.market_contract_list()
            validate_address(self.exchange_address)
            validate_address(self.collateral_address)
        except InvalidAddressError as exc:
            raise ConfigurationError(str(exc), context={"address": exc.address}) from exc
        self.liquidity_table()
        return self

    def market_contract_list(self) -> list[str]:
        return [validate_address(addr) for addr in self.market_contracts.split(",") if addr.strip()]

    def liquidity_table(self) -> list[tuple[Decimal, Decimal]]:
        """解析流动性阶梯，按阈值升序返回 ``(threshold, limit)`` 列表。"""
        steps: list[tuple[Decimal, Decimal]] = []
        for chunk in self.liquidity_steps.split(","):
            if not chunk.strip():
                continue
            threshold, sep, limit = chunk.partition(":")
            if not sep:
                raise ConfigurationError(f"Invalid liquidity step: {chunk!r}")
            try:
                steps.append((wrap_decimal(threshold), wrap_decimal(limit)))
            except NotNumericError as exc:
                raise ConfigurationError(f"Invalid liquidity step: {chunk!r}") from exc
        return sorted(steps, key=lambda step: step[0])

    def liquidity_limit(self, spread: Decimal) -> Decimal:
        """按 band spread 查表得到单笔流动性上限，等于阈值时取更保守的下一档。"""
        for threshold, limit in self.liquidity_table():
            if spread < threshold:
                return limit
        return self.liquidity_base_limit
