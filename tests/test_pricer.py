"""仓位 token 定价测试。"""

from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest

from conftest import COLLATERAL, LONG, MARKET, SHORT, TAKER, constants
from position_maker.errors import ExceedsBandError, NotAboveZeroError, NotNumericError, OracleFetchError, UnknownTokenError
from position_maker.services.contract import MarketContractWrapper
from position_maker.services.pricer import Pricer
from position_maker.services.sanity import SanityChecker
from position_maker.types import Side


def _price(config, token: str, side) -> Decimal:
    async def _run():
        context = await MarketContractWrapper(MARKET, config).context()
        return await Pricer(config, SanityChecker()).get(token, side, context)

    return asyncio.run(_run())


def test_long_maker_price_scenario(make_config) -> None:
    # spot 0.40, floor 0.10, ceiling 0.90, spread_width 0
    assert _price(make_config(), LONG, Side.MAKER) == Decimal("0.675")


def test_long_taker_price_below_zero_is_rejected(make_config) -> None:
    # 0.30 - 0.375 < 0
    with pytest.raises(NotAboveZeroError):
        _price(make_config(), LONG, "taker")


def test_short_prices_mirror_long(make_config) -> None:
    config = make_config(contracts={MARKET: constants(cap=100, floor=0, places=0)}, price="40")
    assert _price(config, SHORT, Side.MAKER) == Decimal("60.375")
    assert _price(config, SHORT, Side.TAKER) == Decimal("59.625")
    assert _price(config, LONG, Side.TAKER) == Decimal("39.625")


def test_collateral_returns_reference_price(make_config) -> None:
    config = make_config()
    assert _price(config, COLLATERAL, Side.TAKER) == Decimal("1")
    assert config.oracle.calls == []


def test_unknown_token_is_rejected(make_config) -> None:
    with pytest.raises(UnknownTokenError):
        _price(make_config(), TAKER, Side.MAKER)


def test_price_above_band_is_rejected(make_config) -> None:
    # spot 0.9 -> long maker 0.8 + 0.375 > band 0.80
    with pytest.raises(ExceedsBandError):
        _price(make_config(price="0.90"), LONG, Side.MAKER)


@pytest.mark.parametrize("spread_width", ["0", "0.1", "0.5"])
def test_skew_never_below_half_min_spread(make_config, spread_width) -> None:
    config = make_config(spread_width=spread_width)

    async def _run():
        context = await MarketContractWrapper(MARKET, config).context()
        return Pricer(config, SanityChecker()).skew(context)

    assert asyncio.run(_run()) >= Decimal("0.375")


def test_skew_grows_with_spread_width(make_config) -> None:
    config = make_config(contracts={MARKET: constants(cap=1000, floor=0, places=0)}, spread_width="0.01")

    async def _run():
        context = await MarketContractWrapper(MARKET, config).context()
        return Pricer(config, SanityChecker()).skew(context)

    # (1000 + 0) / 2 * 0.01
    assert asyncio.run(_run()) == Decimal("5")


def test_oracle_failure_propagates(make_config, oracle_down) -> None:
    with pytest.raises(OracleFetchError):
        _price(make_config(oracle_error=oracle_down), LONG, Side.MAKER)


def test_non_numeric_spot_is_rejected(make_config) -> None:
    with pytest.raises(NotNumericError):
        _price(make_config(price="n/a"), LONG, Side.MAKER)
