"""Runs one strategy across its instruments."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

from ..data import PriceHistoryService
from ..database import DatabaseManager
from ..errors import ExchangeError, StrategyInactiveError, StrategyNotFoundError
from ..monitoring import AuditLog
from ..risk import RiskContext
from ..strategies import BaseSignalGenerator, Signal
from .order_manager import OrderResult
from .trade_executor import ExecutionContext, TradeExecutor

logger = logging.getLogger(__name__)


class StrategyRunner:
    """Analyses every configured symbol and trades the confident signals.

    Symbols are processed one after another; a failure on one symbol is
    audited and the loop moves on to the next.
    """

    def __init__(
        self,
        database: DatabaseManager,
        history: PriceHistoryService,
        signal_generator: BaseSignalGenerator,
        executor: TradeExecutor,
        audit: AuditLog,
        *,
        history_limit: int = 50,
    ) -> None:
        self._database = database
        self._history = history
        self._generator = signal_generator
        self._executor = executor
        self._audit = audit
        self._history_limit = history_limit

    async def analyze(self, symbol: str) -> Signal:
        prices = await self._history.recent_prices(symbol, self._history_limit)
        return self._generator.analyze(symbol, prices)

    async def run(self, strategy_id: str, *, owner_id: str) -> List[OrderResult]:
        audit = self._audit.bind(owner_id)
        strategy = await asyncio.to_thread(self._database.get_strategy, strategy_id, owner_id)
        if strategy is None:
            await audit.error(f'Strategy {strategy_id} not found', {'strategy_id': strategy_id})
            raise StrategyNotFoundError(strategy_id)
        if not strategy.is_active:
            await audit.error(f'Strategy {strategy.name} is inactive', {'strategy_id': strategy_id})
            raise StrategyInactiveError(strategy_id)

        config = strategy.config
        context = ExecutionContext(
            owner_id=owner_id,
            strategy_id=strategy.id,
            risk=RiskContext.from_config(config),
        )
        results: List[OrderResult] = []
        for symbol in config.effective_symbols:
            try:
                signal = await self.analyze(symbol)
                await audit.info(
                    f'Trading signal generated for {symbol}',
                    {'signal': signal.as_dict(), 'strategy_id': strategy.id},
                )
                if signal.is_actionable(config.min_confidence):
                    results.append(await self._executor.execute(signal, context))
            except Exception as error:
                logger.warning('Error processing %s for strategy %s: %s', symbol, strategy.id, error)
                detail: Dict[str, Any] = {'strategy_id': strategy.id, 'symbol': symbol, 'error': str(error)}
                if isinstance(error, ExchangeError):
                    detail['raw'] = error.raw
                await audit.error(f'Error processing {symbol}: {error}', detail)
        return results


__all__ = ['StrategyRunner']
