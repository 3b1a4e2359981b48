"""Converts signals into order quantities."""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal, localcontext

from ..strategies import Signal, StrategyConfig

QUANTITY_STEP = Decimal('0.00001')


@dataclass(frozen=True)
class RiskContext:
    account_value: float = 1_000.0
    max_risk_per_trade: float = 0.02

    def __post_init__(self) -> None:
        if self.account_value < 0:
            raise ValueError('account_value must not be negative')
        if self.max_risk_per_trade < 0:
            raise ValueError('max_risk_per_trade must not be negative')

    @property
    def risk_amount(self) -> float:
        return self.account_value * self.max_risk_per_trade

    @classmethod
    def from_config(cls, config: StrategyConfig) -> 'RiskContext':
        return cls(account_value=config.account_value, max_risk_per_trade=config.max_risk_per_trade)


def floor_quantity(value: float) -> float:
    """Floor to 5 decimal places without binary rounding surprises."""
    if value <= 0 or not math.isfinite(value):
        return 0.0
    exact = Decimal(repr(value))
    with localcontext() as context:
        # room for every integer digit plus the five decimals
        context.prec = max(context.prec, exact.adjusted() + 7)
        return float(exact.quantize(QUANTITY_STEP, rounding=ROUND_FLOOR))


class PositionSizer:
    """Risks a fixed fraction of the reference capital per trade."""

    def size(self, signal: Signal, risk: RiskContext) -> float:
        if signal.price <= 0:
            return 0.0
        return floor_quantity(risk.risk_amount / signal.price)


__all__ = ['PositionSizer', 'QUANTITY_STEP', 'RiskContext', 'floor_quantity']
