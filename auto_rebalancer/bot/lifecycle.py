"""Start, stop and report the bot mode of strategies.

Starting a bot only records that the strategy should be invoked every
``interval_ms``; an external scheduler does the invoking.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from ..database import DatabaseManager, StrategyRecord
from ..errors import StrategyNotFoundError
from ..monitoring import AuditLog
from ..strategies import DEFAULT_BOT_INTERVAL_MS
from ..utils.helpers import utc_now


@dataclass
class BotStatus:
    strategy_id: str
    name: str
    is_active: bool
    bot_active: bool
    bot_started_at: Optional[datetime]
    bot_stopped_at: Optional[datetime]
    interval_ms: int

    @classmethod
    def from_strategy(cls, strategy: StrategyRecord) -> 'BotStatus':
        return cls(
            strategy_id=strategy.id,
            name=strategy.name,
            is_active=strategy.is_active,
            bot_active=strategy.bot.active,
            bot_started_at=strategy.bot.started_at,
            bot_stopped_at=strategy.bot.stopped_at,
            interval_ms=strategy.bot.interval_ms,
        )


@dataclass
class BotStatusReport:
    bots: List[BotStatus] = field(default_factory=list)

    @property
    def active_bots(self) -> int:
        return sum(1 for bot in self.bots if bot.bot_active)

    @property
    def total_strategies(self) -> int:
        return len(self.bots)

    def as_dict(self) -> dict:
        return {
            'bots': self.bots,
            'active_bots': self.active_bots,
            'total_strategies': self.total_strategies,
        }


@dataclass
class BotCommandResult:
    success: bool
    message: str
    status: BotStatus


class BotLifecycleManager:
    def __init__(
        self,
        database: DatabaseManager,
        audit: AuditLog,
        *,
        default_interval_ms: int = DEFAULT_BOT_INTERVAL_MS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._database = database
        self._audit = audit
        self._default_interval_ms = default_interval_ms
        self._clock = clock

    async def _load(self, strategy_id: str, owner_id: str, audit: AuditLog) -> StrategyRecord:
        strategy = await asyncio.to_thread(self._database.get_strategy, strategy_id, owner_id)
        if strategy is None:
            await audit.error(f'Strategy {strategy_id} not found', {'strategy_id': strategy_id})
            raise StrategyNotFoundError(strategy_id)
        return strategy

    async def start(
        self,
        strategy_id: str,
        *,
        owner_id: str,
        interval_ms: Optional[int] = None,
    ) -> BotCommandResult:
        audit = self._audit.bind(owner_id)
        strategy = await self._load(strategy_id, owner_id, audit)
        interval = interval_ms if interval_ms is not None else self._default_interval_ms
        bot = strategy.bot.start(interval, self._clock(), strategy_was_active=strategy.is_active)
        updated = await asyncio.to_thread(
            self._database.save_bot_state, strategy.id, owner_id, bot, is_active=True
        )
        if updated is None:
            raise StrategyNotFoundError(strategy_id)
        await audit.info(
            f'Bot started for strategy: {strategy.name}',
            {'strategy_id': strategy.id, 'interval': interval, 'action': 'bot_start'},
        )
        return BotCommandResult(
            success=True,
            message=f'Bot started for {strategy.name}',
            status=BotStatus.from_strategy(updated),
        )

    async def stop(self, strategy_id: str, *, owner_id: str) -> BotCommandResult:
        audit = self._audit.bind(owner_id)
        strategy = await self._load(strategy_id, owner_id, audit)
        # hand back a strategy the start switched on in the state it was found
        is_active = False if strategy.bot.active and strategy.bot.enabled_strategy else None
        bot = strategy.bot.stop(self._clock())
        updated = await asyncio.to_thread(
            self._database.save_bot_state, strategy.id, owner_id, bot, is_active=is_active
        )
        if updated is None:
            raise StrategyNotFoundError(strategy_id)
        await audit.info(
            f'Bot stopped for strategy: {strategy.name}',
            {'strategy_id': strategy.id, 'action': 'bot_stop'},
        )
        return BotCommandResult(
            success=True,
            message=f'Bot stopped for {strategy.name}',
            status=BotStatus.from_strategy(updated),
        )

    async def status(self, owner_id: str) -> BotStatusReport:
        strategies = await asyncio.to_thread(self._database.list_strategies, owner_id)
        return BotStatusReport([BotStatus.from_strategy(strategy) for strategy in strategies])


__all__ = ['BotCommandResult', 'BotLifecycleManager', 'BotStatus', 'BotStatusReport']
