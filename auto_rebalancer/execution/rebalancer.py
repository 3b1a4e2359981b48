"""Moves portfolio weights toward the targets of the active strategies."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..database import DatabaseManager
from ..monitoring import AuditLog
from ..risk import EqualWeightTargets, PortfolioSnapshot, RiskContext, TargetWeightModel
from ..strategies import Signal, SignalAction
from .order_manager import OrderResult
from .trade_executor import ExecutionContext, TradeExecutor

logger = logging.getLogger(__name__)

REBALANCE_TAG = 'portfolio_rebalance'


@dataclass
class RebalanceAction:
    symbol: str
    action: SignalAction
    amount: float
    current_weight: float
    target_weight: float

    def as_dict(self) -> Dict[str, Any]:
        return {
            'symbol': self.symbol,
            'action': self.action.value,
            'amount': self.amount,
            'current_weight': self.current_weight,
            'target_weight': self.target_weight,
        }


@dataclass
class RebalanceResult:
    actions: List[RebalanceAction] = field(default_factory=list)
    total_value: float = 0.0
    results: List[OrderResult] = field(default_factory=list)
    message: Optional[str] = None


class Rebalancer:
    def __init__(
        self,
        database: DatabaseManager,
        executor: TradeExecutor,
        audit: AuditLog,
        *,
        target_model: Optional[TargetWeightModel] = None,
        weight_tolerance: float = 0.05,
        min_trade_value: float = 50.0,
        confidence: float = 80.0,
        max_risk_per_trade: float = 0.01,
    ) -> None:
        self._database = database
        self._executor = executor
        self._audit = audit
        self._targets = target_model or EqualWeightTargets()
        self._weight_tolerance = weight_tolerance
        self._min_trade_value = min_trade_value
        self._confidence = confidence
        self._max_risk_per_trade = max_risk_per_trade

    def plan(self, snapshot: PortfolioSnapshot, targets: Dict[str, float]) -> List[RebalanceAction]:
        """Actions for every position that drifted past both thresholds."""

        total_value = snapshot.total_value
        actions: List[RebalanceAction] = []
        if total_value <= 0:
            return actions
        weights = snapshot.weights()
        for position in snapshot.positions:
            current_weight = weights[position.symbol]
            target_weight = targets.get(position.symbol, 0.0)
            if abs(current_weight - target_weight) <= self._weight_tolerance:
                continue
            difference = total_value * target_weight - position.total_value
            if abs(difference) <= self._min_trade_value:
                continue
            actions.append(
                RebalanceAction(
                    symbol=position.symbol,
                    action=SignalAction.BUY if difference > 0 else SignalAction.SELL,
                    amount=abs(difference),
                    current_weight=current_weight,
                    target_weight=target_weight,
                )
            )
        return actions

    async def rebalance(self, owner_id: str) -> RebalanceResult:
        audit = self._audit.bind(owner_id)
        positions = await asyncio.to_thread(self._database.portfolio_positions, owner_id)
        if not positions:
            return RebalanceResult(message='No portfolio to rebalance')
        strategies = await asyncio.to_thread(self._database.list_strategies, owner_id, active_only=True)
        if not strategies:
            return RebalanceResult(message='No active strategies for rebalancing')

        snapshot = PortfolioSnapshot(positions)
        total_value = snapshot.total_value
        if total_value <= 0:
            return RebalanceResult(total_value=total_value, message='Portfolio has no value to rebalance')

        actions = self.plan(snapshot, self._targets.target_weights(strategies))
        result = RebalanceResult(actions=actions, total_value=total_value)
        for action in actions:
            signal = Signal(
                symbol=action.symbol,
                action=action.action,
                confidence=self._confidence,
                price=0.0,
                strategy_tag=REBALANCE_TAG,
            )
            context = ExecutionContext(
                owner_id=owner_id,
                risk=RiskContext(
                    account_value=total_value,
                    max_risk_per_trade=min(self._max_risk_per_trade, action.amount / total_value),
                ),
            )
            try:
                result.results.append(await self._executor.execute(signal, context))
            except Exception as error:
                logger.warning('Rebalancing failed for %s: %s', action.symbol, error)
                await audit.error(
                    f'Rebalancing failed for {action.symbol}: {error}',
                    {**action.as_dict(), 'error': str(error)},
                )
        if actions:
            await audit.info(
                f'Portfolio rebalanced with {len(actions)} action(s)',
                {'total_value': total_value, 'actions': [action.as_dict() for action in actions]},
            )
        return result


__all__ = ['REBALANCE_TAG', 'RebalanceAction', 'RebalanceResult', 'Rebalancer']
