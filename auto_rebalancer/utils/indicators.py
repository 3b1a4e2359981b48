"""Indicator helpers.

Price sequences are ordered most-recent-first: index 0 is the latest price.
"""

from __future__ import annotations

from typing import Sequence

NEUTRAL_RSI = 50.0


def simple_moving_average(prices: Sequence[float], period: int) -> float:
    """Average of the latest ``min(period, len(prices))`` prices."""
    window = min(period, len(prices))
    if window <= 0:
        return float(prices[0]) if prices else 0.0
    return sum(prices[:window]) / window


def relative_strength_index(prices: Sequence[float], period: int = 14) -> float:
    if period <= 0 or len(prices) < period + 1:
        return NEUTRAL_RSI

    gains = 0.0
    losses = 0.0
    for index in range(1, period + 1):
        change = prices[index - 1] - prices[index]
        if change > 0:
            gains += change
        else:
            losses -= change

    avg_gain = gains / period
    avg_loss = losses / period
    if avg_loss == 0:
        return 100.0
    return 100.0 - 100.0 / (1.0 + avg_gain / avg_loss)


__all__ = ['NEUTRAL_RSI', 'relative_strength_index', 'simple_moving_average']
