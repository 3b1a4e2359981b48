"""Simulated exchange used for paper trading and tests."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Any, Dict, List, Optional

from ..database import DatabaseManager, OrderStatus
from ..errors import ExchangeError
from ..utils.helpers import utc_now
from .base import Exchange, OrderRequest, PlacedOrder


class PaperExchange(Exchange):
    """Fills every order immediately at the last recorded price."""

    name = 'paper'

    def __init__(
        self,
        database: DatabaseManager,
        balances: Optional[Dict[str, float]] = None,
    ) -> None:
        self._database = database
        self._balances: Dict[str, float] = dict(balances or {'USDT': 10_000.0})
        self._id_counter = 0
        self._lock = asyncio.Lock()

    async def get_price(self, symbol: str) -> float:
        points = await asyncio.to_thread(self._database.recent_prices, symbol, 1)
        if not points:
            raise ExchangeError(f'No price available for {symbol}', raw={'symbol': symbol, 'msg': 'Invalid symbol.'})
        return points[0].price

    async def get_24h_stats(self, symbol: Optional[str] = None) -> Dict[str, Any] | List[Dict[str, Any]]:
        if symbol is None:
            raise ExchangeError('Paper exchange needs an explicit symbol for 24h stats')
        since = utc_now() - timedelta(hours=24)
        points = await asyncio.to_thread(self._database.prices_since, symbol, since)
        if not points:
            raise ExchangeError(f'No price available for {symbol}', raw={'symbol': symbol, 'msg': 'Invalid symbol.'})
        prices = [point.price for point in points]
        open_price, last_price = prices[0], prices[-1]
        change = last_price - open_price
        return {
            'symbol': symbol,
            'openPrice': open_price,
            'lastPrice': last_price,
            'highPrice': max(prices),
            'lowPrice': min(prices),
            'priceChange': change,
            'priceChangePercent': (change / open_price * 100) if open_price else 0.0,
            'volume': sum(point.volume or 0.0 for point in points),
            'count': len(points),
        }

    async def get_account_balances(self) -> Dict[str, Dict[str, float]]:
        return {asset: {'free': amount, 'locked': 0.0} for asset, amount in self._balances.items() if amount}

    async def place_order(self, request: OrderRequest) -> PlacedOrder:
        if request.quantity <= 0:
            raise ExchangeError('Invalid quantity', raw={'code': -1013, 'msg': 'Invalid quantity.'})
        async with self._lock:
            self._id_counter += 1
            order_id = f'paper-{self._id_counter}'
        price = request.price or await self.get_price(request.symbol)
        return PlacedOrder(
            external_order_id=order_id,
            raw={
                'simulated': True,
                'orderId': order_id,
                'symbol': request.symbol,
                'side': request.side.upper(),
                'type': request.order_type.upper(),
                'executedQty': request.quantity,
                'price': price,
                'status': 'FILLED',
            },
        )

    async def get_order_status(self, symbol: str, external_order_id: str) -> OrderStatus:
        return OrderStatus.FILLED


__all__ = ['PaperExchange']
