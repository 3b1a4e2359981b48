"""Tests for :mod:`auto_rebalancer.execution.trade_executor`."""

from __future__ import annotations

import asyncio

import pytest

from auto_rebalancer.database import LogLevel, OrderStatus
from auto_rebalancer.execution import ExecutionContext, OrderManager, TradeExecutor
from auto_rebalancer.monitoring import AuditLog
from auto_rebalancer.risk import RiskContext
from auto_rebalancer.strategies import Signal, SignalAction


def _executor(database, exchange) -> TradeExecutor:
    return TradeExecutor(OrderManager(exchange, database), AuditLog(database))


def _signal(symbol: str = 'BTCUSDT', action: SignalAction = SignalAction.BUY, price: float = 50_000.0) -> Signal:
    return Signal(symbol=symbol, action=action, confidence=85.0, price=price, strategy_tag='sma_rsi_crossover')


def test_successful_trade_records_pending_order_and_one_log(database, exchange, owner_id) -> None:
    executor = _executor(database, exchange)
    context = ExecutionContext(owner_id=owner_id, strategy_id='strat-1', risk=RiskContext())

    result = asyncio.run(executor.execute(_signal(), context))

    assert result.ok
    assert result.status == 'pending'
    assert result.external_order_id == '1001'
    assert result.raw == {'orderId': 1001, 'status': 'NEW'}
    request = exchange.submitted[0]
    assert (request.symbol, request.side, request.order_type) == ('BTCUSDT', 'buy', 'market')
    assert request.quantity == pytest.approx(0.0004)

    orders = database.list_orders(owner_id)
    assert len(orders) == 1
    assert orders[0].status is OrderStatus.PENDING
    assert orders[0].strategy_id == 'strat-1'
    assert orders[0].exchange == 'binance'

    logs = database.list_logs(owner_id)
    assert len(logs) == 1
    assert logs[0].level is LogLevel.SUCCESS
    assert logs[0].metadata['strategy_id'] == 'strat-1'
    assert logs[0].metadata['signal']['action'] == 'buy'
    assert logs[0].metadata['result']['external_order_id'] == '1001'


def test_exchange_rejection_is_returned_and_logged_without_retry(database, exchange, owner_id) -> None:
    exchange.failing_symbols['ETHUSDT'] = {'code': -2010, 'msg': 'Account has insufficient balance.'}
    executor = _executor(database, exchange)

    result = asyncio.run(
        executor.execute(_signal('ETHUSDT', SignalAction.SELL, 2_500.0), ExecutionContext(owner_id=owner_id))
    )

    assert not result.ok
    assert result.error == {'code': -2010, 'msg': 'Account has insufficient balance.'}
    assert exchange.submitted == []
    assert database.list_orders(owner_id) == []
    logs = database.list_logs(owner_id)
    assert len(logs) == 1
    assert logs[0].level is LogLevel.ERROR
    assert logs[0].metadata['result']['error']['code'] == -2010


def test_missing_price_is_resolved_from_exchange(database, exchange, owner_id) -> None:
    executor = _executor(database, exchange)
    context = ExecutionContext(owner_id=owner_id, risk=RiskContext(account_value=10_000.0, max_risk_per_trade=0.01))

    result = asyncio.run(executor.execute(_signal('ETHUSDT', price=0.0), context))

    assert result.ok
    # 10000 * 0.01 / 2500
    assert exchange.submitted[0].quantity == pytest.approx(0.04)
    assert database.list_logs(owner_id)[0].metadata['signal']['price'] == 2_500.0


def test_unpriceable_symbol_fails_without_order(database, exchange, owner_id) -> None:
    executor = _executor(database, exchange)

    result = asyncio.run(executor.execute(_signal('DOGEUSDT', price=0.0), ExecutionContext(owner_id=owner_id)))

    assert not result.ok
    assert result.error['code'] == -1121
    assert exchange.submitted == []
    assert [entry.level for entry in database.list_logs(owner_id)] == [LogLevel.ERROR]


def test_zero_quantity_is_not_submitted(database, exchange, owner_id) -> None:
    executor = _executor(database, exchange)
    context = ExecutionContext(owner_id=owner_id, risk=RiskContext(account_value=1.0, max_risk_per_trade=0.0001))

    result = asyncio.run(executor.execute(_signal(), context))

    assert result.status == 'rejected'
    assert exchange.submitted == []
    assert [entry.level for entry in database.list_logs(owner_id)] == [LogLevel.WARNING]


def test_unexpected_errors_are_logged_and_raised(database, exchange, owner_id) -> None:
    class ExplodingExchange(type(exchange)):
        async def place_order(self, request):
            raise RuntimeError('connection reset')

    executor = _executor(database, ExplodingExchange({'BTCUSDT': 50_000.0}))

    with pytest.raises(RuntimeError, match='connection reset'):
        asyncio.run(executor.execute(_signal(), ExecutionContext(owner_id=owner_id)))

    logs = database.list_logs(owner_id)
    assert len(logs) == 1
    assert logs[0].level is LogLevel.ERROR
    assert logs[0].metadata['error'] == 'connection reset'


def test_hold_signals_are_rejected(database, exchange, owner_id) -> None:
    executor = _executor(database, exchange)

    with pytest.raises(ValueError):
        asyncio.run(executor.execute(_signal(action=SignalAction.HOLD), ExecutionContext(owner_id=owner_id)))

    assert database.list_logs(owner_id) == []
