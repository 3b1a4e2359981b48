"""Shared fixtures: a temporary database, a scripted exchange and a fixed clock."""

from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from auto_rebalancer.database import DatabaseManager, OrderStatus, PricePointRecord  # noqa: E402
from auto_rebalancer.errors import ExchangeError  # noqa: E402
from auto_rebalancer.exchanges import Exchange, OrderRequest, PlacedOrder  # noqa: E402

OWNER_ID = 'user-1'
FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeExchange(Exchange):
    name = 'binance'

    def __init__(self, prices: Optional[Dict[str, float]] = None) -> None:
        self.prices: Dict[str, float] = dict(prices or {})
        self.failing_symbols: Dict[str, Dict] = {}
        self.statuses: Dict[str, OrderStatus] = {}
        self.submitted: List[OrderRequest] = []
        self.closed = False

    async def get_price(self, symbol: str) -> float:
        if symbol not in self.prices:
            raise ExchangeError(f'No price for {symbol}', raw={'code': -1121, 'msg': 'Invalid symbol.'})
        return self.prices[symbol]

    async def get_24h_stats(self, symbol=None):
        return {'symbol': symbol, 'lastPrice': self.prices.get(symbol, 0.0)}

    async def get_account_balances(self):
        return {'USDT': {'free': 1_000.0, 'locked': 0.0}}

    async def place_order(self, request: OrderRequest) -> PlacedOrder:
        if request.symbol in self.failing_symbols:
            raw = self.failing_symbols[request.symbol]
            raise ExchangeError(raw['msg'], raw=raw)
        self.submitted.append(request)
        order_id = str(1000 + len(self.submitted))
        return PlacedOrder(external_order_id=order_id, raw={'orderId': int(order_id), 'status': 'NEW'})

    async def get_order_status(self, symbol: str, external_order_id: str) -> OrderStatus:
        return self.statuses.get(external_order_id, OrderStatus.PENDING)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def owner_id() -> str:
    return OWNER_ID


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def database(tmp_path):
    db = DatabaseManager(f'sqlite:///{tmp_path / "engine.db"}')
    yield db
    db.close()


@pytest.fixture
def exchange() -> FakeExchange:
    return FakeExchange({'BTCUSDT': 50_000.0, 'ETHUSDT': 2_500.0})


@pytest.fixture
def seed_prices(database):
    """Store a most-recent-first price list, one minute apart."""

    def _seed(symbol: str, prices: List[float]) -> None:
        points = [
            PricePointRecord(symbol=symbol, price=price, timestamp=FIXED_NOW - timedelta(minutes=index))
            for index, price in enumerate(prices)
        ]
        database.store_price_points(points)

    return _seed


def oversold_uptrend() -> List[float]:
    """50 prices with SMA20 above SMA50 and RSI(14) of 25."""
    changes = [-3.0] * 12 + [6.0, 6.0]
    prices = [200.0]
    for change in changes:
        prices.append(prices[-1] - change)
    prices.extend([prices[-1]] * 5)
    prices.extend([100.0] * 30)
    return prices


def overbought_downtrend() -> List[float]:
    """50 prices with SMA20 below SMA50 and RSI(14) of 100."""
    prices = [80.0 - 2.0 * index for index in range(15)]
    prices.extend([prices[-1]] * 5)
    prices.extend([200.0] * 30)
    return prices


@pytest.fixture
def buy_history() -> List[float]:
    return oversold_uptrend()


@pytest.fixture
def sell_history() -> List[float]:
    return overbought_downtrend()
