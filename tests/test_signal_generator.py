"""Tests for :mod:`auto_rebalancer.strategies.sma_rsi_strategy`."""

import pytest

from auto_rebalancer.strategies import (
    INSUFFICIENT_DATA_TAG,
    Signal,
    SignalAction,
    SmaRsiSignalGenerator,
)


@pytest.fixture
def generator() -> SmaRsiSignalGenerator:
    return SmaRsiSignalGenerator()


@pytest.mark.parametrize('count', range(0, 11))
def test_short_history_always_holds_with_zero_confidence(generator, count: int) -> None:
    signal = generator.analyze('BTCUSDT', [100.0] * count)

    assert signal.action is SignalAction.HOLD
    assert signal.confidence == 0


def test_insufficient_data_is_tagged(generator) -> None:
    signal = generator.analyze('BTCUSDT', [101.0, 100.0, 99.0])

    assert signal.strategy_tag == INSUFFICIENT_DATA_TAG
    assert signal.price == 0


def test_oversold_uptrend_buys(generator, buy_history) -> None:
    signal = generator.analyze('BTCUSDT', buy_history)

    assert signal.action is SignalAction.BUY
    # 30 + (30 - 25) * 2
    assert signal.confidence == pytest.approx(40.0)
    assert signal.price == buy_history[0]
    assert signal.strategy_tag == 'sma_rsi_crossover'


def test_overbought_downtrend_sells_with_capped_confidence(generator, sell_history) -> None:
    signal = generator.analyze('ETHUSDT', sell_history)

    assert signal.action is SignalAction.SELL
    assert signal.confidence == pytest.approx(90.0)
    assert signal.price == 80.0


def test_sideways_market_holds_with_low_confidence(generator) -> None:
    signal = generator.analyze('BTCUSDT', [100.0] * 50)

    assert signal.action is SignalAction.HOLD
    assert signal.confidence == 20.0
    assert signal.strategy_tag == 'sma_rsi_crossover'


def test_trending_market_without_rsi_extreme_holds(generator) -> None:
    prices = [150.0] + [100.0] * 49

    signal = generator.analyze('BTCUSDT', prices)

    assert signal.action is SignalAction.HOLD
    assert signal.confidence == 0


def test_signal_clamps_confidence() -> None:
    assert Signal('BTCUSDT', SignalAction.BUY, 150.0, 1.0, 'x').confidence == 100.0
    assert Signal('BTCUSDT', SignalAction.BUY, -5.0, 1.0, 'x').confidence == 0.0


def test_signal_actionable_gate() -> None:
    buy = Signal('BTCUSDT', SignalAction.BUY, 70.0, 1.0, 'x')
    hold = Signal('BTCUSDT', SignalAction.HOLD, 95.0, 1.0, 'x')

    assert buy.is_actionable(70.0)
    assert not buy.is_actionable(70.1)
    assert not hold.is_actionable(0.0)
