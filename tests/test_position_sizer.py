"""Unit tests for :mod:`auto_rebalancer.risk.position_sizer`."""

from decimal import Decimal

import pytest

from auto_rebalancer.risk import PositionSizer, RiskContext, floor_quantity
from auto_rebalancer.strategies import Signal, SignalAction, StrategyConfig


def _signal(price: float) -> Signal:
    return Signal(symbol='BTCUSDT', action=SignalAction.BUY, confidence=80.0, price=price, strategy_tag='test')


def test_default_risk_context_risks_two_percent_of_1000() -> None:
    quantity = PositionSizer().size(_signal(50_000.0), RiskContext())

    # 1000 * 0.02 / 50000
    assert quantity == pytest.approx(0.0004)


def test_quantity_is_floored_to_five_decimals() -> None:
    quantity = PositionSizer().size(_signal(3.0), RiskContext(account_value=1_000.0, max_risk_per_trade=0.02))

    assert quantity == 6.66666


@pytest.mark.parametrize('price', [0.1, 0.3, 7.0, 123.456, 29_999.99, 61_234.5])
def test_quantity_never_has_more_than_five_decimals(price: float) -> None:
    quantity = PositionSizer().size(_signal(price), RiskContext(account_value=12_345.67, max_risk_per_trade=0.013))

    assert quantity >= 0
    assert -Decimal(repr(quantity)).as_tuple().exponent <= 5


def test_non_positive_price_sizes_to_zero() -> None:
    assert PositionSizer().size(_signal(0.0), RiskContext()) == 0.0
    assert PositionSizer().size(_signal(-10.0), RiskContext()) == 0.0


def test_tiny_risk_floors_to_zero() -> None:
    quantity = PositionSizer().size(_signal(1_000_000.0), RiskContext(account_value=1.0, max_risk_per_trade=0.001))

    assert quantity == 0.0


def test_risk_context_from_strategy_config() -> None:
    context = RiskContext.from_config(StrategyConfig(account_value=5_000.0, max_risk_per_trade=0.05))

    assert context.risk_amount == pytest.approx(250.0)


def test_floor_quantity_handles_binary_noise() -> None:
    assert floor_quantity(0.1 * 3) == 0.3
    assert floor_quantity(-1.0) == 0.0


def test_huge_quantities_are_floored_without_overflowing_precision() -> None:
    quantity = PositionSizer().size(_signal(1e-20), RiskContext())

    assert quantity == pytest.approx(2e21)
    assert floor_quantity(1.5e40) == 1.5e40
    assert floor_quantity(float('inf')) == 0.0
