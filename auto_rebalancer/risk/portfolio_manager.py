"""Portfolio weight helpers and target allocation models."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from ..database import PortfolioPositionRecord, StrategyRecord


@dataclass
class PortfolioSnapshot:
    positions: List[PortfolioPositionRecord] = field(default_factory=list)

    @property
    def total_value(self) -> float:
        return sum(position.total_value for position in self.positions)

    def weights(self) -> Dict[str, float]:
        total = self.total_value
        if total <= 0:
            return {position.symbol: 0.0 for position in self.positions}
        return {position.symbol: position.total_value / total for position in self.positions}


class TargetWeightModel(abc.ABC):
    """Decides the desired portfolio weight of every symbol."""

    @abc.abstractmethod
    def target_weights(self, strategies: Sequence[StrategyRecord]) -> Dict[str, float]:
        """Weights for the symbols the strategies care about; absent symbols target 0."""


class EqualWeightTargets(TargetWeightModel):
    """Equal split across the union of the strategies' chosen symbols.

    Strategies that never chose symbols contribute nothing here.
    """

    def target_weights(self, strategies: Sequence[StrategyRecord]) -> Dict[str, float]:
        universe: Dict[str, None] = {}
        for strategy in strategies:
            for symbol in strategy.config.symbols:
                universe[symbol] = None
        if not universe:
            return {}
        weight = 1.0 / len(universe)
        return {symbol: weight for symbol in universe}


class FixedWeightTargets(TargetWeightModel):
    """Explicit allocation, normalised so the weights sum to one."""

    def __init__(self, weights: Dict[str, float]) -> None:
        if any(value < 0 for value in weights.values()):
            raise ValueError('target weights must not be negative')
        total = sum(weights.values())
        if total <= 0:
            raise ValueError('target weights must sum to a positive value')
        self._weights = {symbol: value / total for symbol, value in weights.items()}

    def target_weights(self, strategies: Sequence[StrategyRecord]) -> Dict[str, float]:
        return dict(self._weights)


__all__ = ['EqualWeightTargets', 'FixedWeightTargets', 'PortfolioSnapshot', 'TargetWeightModel']
