"""Moving average crossover filtered by RSI extremes."""

from __future__ import annotations

from typing import Sequence

from ..utils.indicators import relative_strength_index, simple_moving_average
from .base_strategy import BaseSignalGenerator, Signal, SignalAction

# Ten points collapse both SMA windows onto the same average and leave RSI(14)
# neutral, so analysis starts at eleven.
MIN_HISTORY_POINTS = 11


class SmaRsiSignalGenerator(BaseSignalGenerator):
    tag = 'sma_rsi_crossover'

    def __init__(
        self,
        fast_period: int = 20,
        slow_period: int = 50,
        rsi_period: int = 14,
        oversold: float = 30.0,
        overbought: float = 70.0,
        sideways_band: float = 0.02,
    ) -> None:
        self.fast_period = fast_period
        self.slow_period = slow_period
        self.rsi_period = rsi_period
        self.oversold = oversold
        self.overbought = overbought
        self.sideways_band = sideways_band

    def analyze(self, symbol: str, prices: Sequence[float]) -> Signal:
        prices = [float(price) for price in prices]
        if len(prices) < MIN_HISTORY_POINTS:
            return self.insufficient_data(symbol, len(prices))

        current_price = prices[0]
        fast = simple_moving_average(prices, self.fast_period)
        slow = simple_moving_average(prices, self.slow_period)
        rsi = relative_strength_index(prices, self.rsi_period)

        if fast > slow and rsi < self.oversold:
            confidence = min(90.0, 30.0 + (self.oversold - rsi) * 2)
            return Signal(symbol, SignalAction.BUY, confidence, current_price, self.tag)
        if fast < slow and rsi > self.overbought:
            confidence = min(90.0, 30.0 + (rsi - self.overbought) * 2)
            return Signal(symbol, SignalAction.SELL, confidence, current_price, self.tag)
        if current_price > 0 and abs(fast - current_price) / current_price < self.sideways_band:
            return self.hold(symbol, price=current_price, confidence=20.0)
        return self.hold(symbol, price=current_price)


__all__ = ['MIN_HISTORY_POINTS', 'SmaRsiSignalGenerator']
