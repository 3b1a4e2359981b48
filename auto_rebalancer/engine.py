"""Request-scoped facade wiring the engine components for one caller."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Sequence

from .bot import BotCommandResult, BotLifecycleManager, BotStatusReport
from .config import BinanceConfig, Settings
from .data import PriceHistoryService
from .database import DatabaseManager, PricePointRecord
from .errors import UnauthorizedError, UpstreamFailure
from .exchanges import BinanceExchange, BinanceService, Exchange, PaperExchange
from .execution import (
    OrderManager,
    OrderResult,
    RebalanceResult,
    Rebalancer,
    StrategyRunner,
    TradeExecutor,
)
from .monitoring import AuditLog
from .risk import TargetWeightModel
from .strategies import BaseSignalGenerator, Signal, SmaRsiSignalGenerator

logger = logging.getLogger(__name__)


class TradingEngine:
    """All engine operations for a single owner.

    Instances hold no state between invocations beyond their collaborators;
    everything is re-read from storage on each call.
    """

    def __init__(
        self,
        owner_id: str,
        database: DatabaseManager,
        exchange: Exchange,
        settings: Optional[Settings] = None,
        *,
        signal_generator: Optional[BaseSignalGenerator] = None,
        target_model: Optional[TargetWeightModel] = None,
    ) -> None:
        if not owner_id:
            raise UnauthorizedError('Unauthorized')
        self.owner_id = owner_id
        self.settings = settings or Settings()
        self._database = database
        self._exchange = exchange
        self._audit = AuditLog(database, owner_id)
        self._history = PriceHistoryService(database)
        self._orders = OrderManager(exchange, database)
        self._executor = TradeExecutor(self._orders, self._audit)
        self._runner = StrategyRunner(
            database,
            self._history,
            signal_generator or SmaRsiSignalGenerator(),
            self._executor,
            self._audit,
            history_limit=self.settings.price_history_limit,
        )
        self._rebalancer = Rebalancer(database, self._executor, self._audit, target_model=target_model)
        self._bots = BotLifecycleManager(
            database,
            self._audit,
            default_interval_ms=self.settings.bot_interval_ms,
        )

    @classmethod
    async def create(cls, owner_id: str, database: DatabaseManager, settings: Settings) -> 'TradingEngine':
        """Build an engine using the owner's stored exchange credentials."""

        if not owner_id:
            raise UnauthorizedError('Unauthorized')
        credentials = await asyncio.to_thread(database.get_api_credentials, owner_id, 'binance')
        exchange: Exchange
        if credentials is not None:
            config = BinanceConfig.from_credentials(credentials.api_key, credentials.api_secret, settings)
            logger.info('Using Binance %s key %s for %s', config.network, config.masked_key, owner_id)
            exchange = BinanceExchange(BinanceService(config))
        elif settings.paper_trading:
            logger.warning('Binance credentials not configured for %s; using the paper exchange.', owner_id)
            exchange = PaperExchange(database)
        else:
            raise UpstreamFailure('Binance API keys not configured')
        return cls(owner_id, database, exchange, settings)

    @property
    def exchange(self) -> Exchange:
        return self._exchange

    async def analyze_market(self, symbol: str) -> Signal:
        return await self._runner.analyze(symbol)

    async def run_strategy(self, strategy_id: str) -> List[OrderResult]:
        return await self._runner.run(strategy_id, owner_id=self.owner_id)

    async def rebalance(self) -> RebalanceResult:
        return await self._rebalancer.rebalance(self.owner_id)

    async def start_bot(self, strategy_id: str, interval_ms: Optional[int] = None) -> BotCommandResult:
        return await self._bots.start(strategy_id, owner_id=self.owner_id, interval_ms=interval_ms)

    async def stop_bot(self, strategy_id: str) -> BotCommandResult:
        return await self._bots.stop(strategy_id, owner_id=self.owner_id)

    async def bot_status(self) -> BotStatusReport:
        return await self._bots.status(self.owner_id)

    async def sync_orders(self) -> int:
        return await self._orders.refresh_statuses(self.owner_id)

    async def record_prices(self, symbols: Sequence[str]) -> List[PricePointRecord]:
        return await self._history.record_ticker(self._exchange, symbols)

    async def close(self) -> None:
        await self._orders.close()


__all__ = ['TradingEngine']
