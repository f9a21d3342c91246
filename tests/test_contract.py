"""市场合约快照加载与缓存测试。"""

from __future__ import annotations

import asyncio
from decimal import Decimal

import pytest

from conftest import COLLATERAL, LONG, MARKET, SHORT, TAKER, constants
from position_maker.errors import ContractStateError, InvalidAddressError, UnknownTokenError
from position_maker.services.contract import MarketContractWrapper, build_snapshot
from position_maker.types import TokenRole


def test_load_reads_once_and_caches(make_config) -> None:
    config = make_config()
    wrapper = MarketContractWrapper(MARKET, config)

    async def _run():
        first = await wrapper.load()
        second = await wrapper.load()
        return first, second

    first, second = asyncio.run(_run())
    assert first is second
    assert config.ledger.constant_reads == [MARKET]
    assert first.long_token_address == LONG
    assert first.price_cap == 90


def test_band_values_are_derived_from_snapshot(make_config) -> None:
    wrapper = MarketContractWrapper(MARKET, make_config())

    async def _run():
        return await wrapper.ceiling(), await wrapper.floor(), await wrapper.band_spread()

    ceiling, floor, spread = asyncio.run(_run())
    assert ceiling == Decimal("0.90")
    assert floor == Decimal("0.10")
    assert spread == Decimal("0.80")
    assert ceiling >= floor


def test_invalid_address_fails_before_any_read(make_config) -> None:
    config = make_config()
    wrapper = MarketContractWrapper("not-an-address", config)
    with pytest.raises(InvalidAddressError):
        asyncio.run(wrapper.load())
    assert config.ledger.constant_reads == []


def test_cap_below_floor_is_rejected() -> None:
    with pytest.raises(ContractStateError):
        build_snapshot(MARKET, constants(cap=5, floor=10))


def test_mixed_case_token_addresses_are_lowercased() -> None:
    snapshot = build_snapshot(MARKET, constants(long_token="0x" + "aB" * 20))
    assert snapshot.long_token_address == "0x" + "ab" * 20


def test_token_role_resolution(make_config) -> None:
    wrapper = MarketContractWrapper(MARKET, make_config())

    async def _run():
        return [await wrapper.token_role(addr) for addr in (LONG, SHORT, COLLATERAL)]

    assert asyncio.run(_run()) == [TokenRole.LONG, TokenRole.SHORT, TokenRole.COLLATERAL]
    with pytest.raises(UnknownTokenError):
        asyncio.run(wrapper.token_role(TAKER))


def test_verify_unchanged_detects_modified_constants(make_config) -> None:
    config = make_config()
    wrapper = MarketContractWrapper(MARKET, config)
    asyncio.run(wrapper.load())
    assert asyncio.run(wrapper.verify_unchanged()).price_cap == 90

    config.ledger.contracts[MARKET] = constants(cap=95)
    with pytest.raises(ContractStateError):
        asyncio.run(wrapper.verify_unchanged())
    # 缓存本身不会被刷新
    assert wrapper.cached is not None and wrapper.cached.price_cap == 90
