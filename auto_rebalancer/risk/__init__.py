"""Sizing and allocation tools."""

from .portfolio_manager import EqualWeightTargets, FixedWeightTargets, PortfolioSnapshot, TargetWeightModel
from .position_sizer import PositionSizer, RiskContext, floor_quantity

__all__ = [
    'EqualWeightTargets',
    'FixedWeightTargets',
    'PortfolioSnapshot',
    'PositionSizer',
    'RiskContext',
    'TargetWeightModel',
    'floor_quantity',
]
