"""Defines the signal generator contract."""

from __future__ import annotations

import abc
import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, Sequence

logger = logging.getLogger(__name__)

INSUFFICIENT_DATA_TAG = 'insufficient_data'


class SignalAction(str, enum.Enum):
    BUY = 'buy'
    SELL = 'sell'
    HOLD = 'hold'


def clamp_confidence(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


@dataclass(frozen=True)
class Signal:
    symbol: str
    action: SignalAction
    confidence: float
    price: float
    strategy_tag: str

    def __post_init__(self) -> None:
        object.__setattr__(self, 'action', SignalAction(self.action))
        object.__setattr__(self, 'confidence', clamp_confidence(self.confidence))

    def is_actionable(self, min_confidence: float) -> bool:
        return self.action is not SignalAction.HOLD and self.confidence >= min_confidence

    def as_dict(self) -> Dict[str, Any]:
        return {
            'symbol': self.symbol,
            'action': self.action.value,
            'confidence': self.confidence,
            'price': self.price,
            'strategy_tag': self.strategy_tag,
        }


class BaseSignalGenerator(abc.ABC):
    """Turns a price history for one instrument into a trading signal."""

    tag: str = 'base'

    @abc.abstractmethod
    def analyze(self, symbol: str, prices: Sequence[float]) -> Signal:
        """Return a signal for ``symbol``; ``prices`` are most-recent-first."""

    def hold(self, symbol: str, *, price: float = 0.0, confidence: float = 0.0, tag: str | None = None) -> Signal:
        return Signal(
            symbol=symbol,
            action=SignalAction.HOLD,
            confidence=confidence,
            price=price,
            strategy_tag=tag or self.tag,
        )

    def insufficient_data(self, symbol: str, available: int) -> Signal:
        logger.debug('Not enough history for %s (%d points)', symbol, available)
        return self.hold(symbol, tag=INSUFFICIENT_DATA_TAG)


__all__ = [
    'BaseSignalGenerator',
    'INSUFFICIENT_DATA_TAG',
    'Signal',
    'SignalAction',
    'clamp_confidence',
]
