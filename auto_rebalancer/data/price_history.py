"""Price history access backed by the persistence layer."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterable, List, Sequence

from ..database import DatabaseManager, PricePointRecord
from ..exchanges import Exchange, ExchangeError
from ..utils.helpers import utc_now

logger = logging.getLogger(__name__)


class PriceHistoryService:
    """Reads recent prices for analysis and appends ticker snapshots."""

    def __init__(self, database: DatabaseManager, *, clock: Callable = utc_now) -> None:
        self._database = database
        self._clock = clock

    async def recent_prices(self, symbol: str, limit: int = 50) -> List[float]:
        """Latest ``limit`` prices for ``symbol``, most recent first."""

        records = await asyncio.to_thread(self._database.recent_prices, symbol, limit)
        return [record.price for record in records]

    async def store(self, points: Iterable[PricePointRecord]) -> None:
        await asyncio.to_thread(self._database.store_price_points, list(points))

    async def record_ticker(self, exchange: Exchange, symbols: Sequence[str]) -> List[PricePointRecord]:
        """Append the current exchange price of each symbol.

        Symbols the exchange cannot price are skipped with a warning so one
        delisted pair does not block the others.
        """

        recorded: List[PricePointRecord] = []
        for symbol in symbols:
            try:
                price = await exchange.get_price(symbol)
            except ExchangeError as error:
                logger.warning('Skipping price snapshot for %s: %s', symbol, error)
                continue
            recorded.append(PricePointRecord(symbol=symbol, price=price, timestamp=self._clock()))
        await self.store(recorded)
        return recorded


__all__ = ['PriceHistoryService']
