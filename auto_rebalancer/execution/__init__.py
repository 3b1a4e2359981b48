"""Order execution layer."""

from .order_manager import OrderManager, OrderRequest, OrderResult
from .rebalancer import REBALANCE_TAG, RebalanceAction, RebalanceResult, Rebalancer
from .strategy_runner import StrategyRunner
from .trade_executor import ExecutionContext, TradeExecutor

__all__ = [
    'ExecutionContext',
    'OrderManager',
    'OrderRequest',
    'OrderResult',
    'REBALANCE_TAG',
    'RebalanceAction',
    'RebalanceResult',
    'Rebalancer',
    'StrategyRunner',
    'TradeExecutor',
]
