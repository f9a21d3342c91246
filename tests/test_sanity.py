from __future__ import annotations

from decimal import Decimal

import pytest

from conftest import COLLATERAL, MARKET, constants
from position_maker.errors import ExceedsBandError, NotAboveZeroError, NotNumericError
from position_maker.services.contract import build_snapshot
from position_maker.services.sanity import SanityChecker
from position_maker.types import MarketContext


def _context() -> MarketContext:
    return MarketContext(snapshot=build_snapshot(MARKET, constants()), collateral_address=COLLATERAL, collateral_price=Decimal(1))


@pytest.mark.parametrize("value", ["0", "-0.01", Decimal("-5")])
def test_greater_than_zero_rejects_non_positive(value) -> None:
    with pytest.raises(NotAboveZeroError):
        SanityChecker().greater_than_zero(value)


def test_greater_than_zero_accepts_positive() -> None:
    assert SanityChecker().greater_than_zero("0.001") == Decimal("0.001")


@pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", None, ""])
def test_is_numeric_rejects_non_finite(value) -> None:
    with pytest.raises(NotNumericError):
        SanityChecker().is_numeric(value)


def test_is_numeric_wraps_numbers() -> None:
    assert SanityChecker().is_numeric(41000) == Decimal("41000")
    assert SanityChecker().is_numeric("0.40") == Decimal("0.40")


def test_less_than_band_bounds_quotes_by_spread() -> None:
    checker = SanityChecker()
    context = _context()
    assert checker.less_than_band("0.80", context) == Decimal("0.80")
    with pytest.raises(ExceedsBandError):
        checker.less_than_band("0.8001", context)
