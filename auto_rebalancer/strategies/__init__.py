"""Signal generation and strategy configuration."""

from .base_strategy import (
    INSUFFICIENT_DATA_TAG,
    BaseSignalGenerator,
    Signal,
    SignalAction,
    clamp_confidence,
)
from .sma_rsi_strategy import MIN_HISTORY_POINTS, SmaRsiSignalGenerator
from .strategy_config import DEFAULT_BOT_INTERVAL_MS, DEFAULT_SYMBOLS, BotState, StrategyConfig

__all__ = [
    'BaseSignalGenerator',
    'BotState',
    'DEFAULT_BOT_INTERVAL_MS',
    'DEFAULT_SYMBOLS',
    'INSUFFICIENT_DATA_TAG',
    'MIN_HISTORY_POINTS',
    'Signal',
    'SignalAction',
    'SmaRsiSignalGenerator',
    'StrategyConfig',
    'clamp_confidence',
]
