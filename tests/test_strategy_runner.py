"""Tests for :mod:`auto_rebalancer.execution.strategy_runner`."""

from __future__ import annotations

import asyncio

import pytest

from auto_rebalancer.data import PriceHistoryService
from auto_rebalancer.database import LogLevel, OrderStatus
from auto_rebalancer.errors import StrategyInactiveError, StrategyNotFoundError
from auto_rebalancer.execution import OrderManager, StrategyRunner, TradeExecutor
from auto_rebalancer.monitoring import AuditLog
from auto_rebalancer.strategies import SmaRsiSignalGenerator, StrategyConfig


def _runner(database, exchange, generator=None) -> StrategyRunner:
    audit = AuditLog(database)
    return StrategyRunner(
        database,
        PriceHistoryService(database),
        generator or SmaRsiSignalGenerator(),
        TradeExecutor(OrderManager(exchange, database), audit),
        audit,
    )


def test_low_confidence_signal_is_logged_but_not_traded(database, exchange, owner_id, seed_prices, buy_history) -> None:
    seed_prices('BTCUSDT', buy_history)
    strategy = database.create_strategy(
        owner_id, 'Dip buyer', 'sma_rsi', StrategyConfig(symbols=('BTCUSDT',), min_confidence=70.0)
    )

    results = asyncio.run(_runner(database, exchange).run(strategy.id, owner_id=owner_id))

    assert results == []
    assert exchange.submitted == []
    logs = database.list_logs(owner_id)
    assert len(logs) == 1
    assert logs[0].level is LogLevel.INFO
    assert logs[0].message == 'Trading signal generated for BTCUSDT'
    assert logs[0].metadata['signal']['confidence'] == pytest.approx(40.0)


def test_confident_signal_is_sized_from_strategy_risk(database, exchange, owner_id, seed_prices, sell_history) -> None:
    seed_prices('ETHUSDT', sell_history)
    strategy = database.create_strategy(
        owner_id, 'Top seller', 'sma_rsi', StrategyConfig(symbols=('ETHUSDT',), min_confidence=70.0)
    )

    results = asyncio.run(_runner(database, exchange).run(strategy.id, owner_id=owner_id))

    assert len(results) == 1
    assert results[0].ok
    # 1000 * 0.02 / 80
    assert exchange.submitted[0].quantity == pytest.approx(0.25)
    assert exchange.submitted[0].side == 'sell'
    orders = database.list_orders(owner_id)
    assert [(order.symbol, order.status, order.strategy_id) for order in orders] == [
        ('ETHUSDT', OrderStatus.PENDING, strategy.id)
    ]
    assert [entry.level for entry in database.list_logs(owner_id)] == [LogLevel.SUCCESS, LogLevel.INFO]


def test_strategy_without_symbols_uses_defaults(database, exchange, owner_id) -> None:
    strategy = database.create_strategy(owner_id, 'Defaults', 'sma_rsi')

    results = asyncio.run(_runner(database, exchange).run(strategy.id, owner_id=owner_id))

    assert results == []
    messages = [entry.message for entry in reversed(database.list_logs(owner_id))]
    assert messages == ['Trading signal generated for BTCUSDT', 'Trading signal generated for ETHUSDT']


def test_one_failing_symbol_does_not_stop_the_others(database, exchange, owner_id, seed_prices, sell_history) -> None:
    class FlakyGenerator(SmaRsiSignalGenerator):
        def analyze(self, symbol, prices):
            if symbol == 'BTCUSDT':
                raise RuntimeError('indicator blew up')
            return super().analyze(symbol, prices)

    seed_prices('ETHUSDT', sell_history)
    strategy = database.create_strategy(
        owner_id, 'Two pairs', 'sma_rsi', StrategyConfig(symbols=('BTCUSDT', 'ETHUSDT'))
    )

    results = asyncio.run(_runner(database, exchange, FlakyGenerator()).run(strategy.id, owner_id=owner_id))

    assert [result.symbol for result in results] == ['ETHUSDT']
    logs = list(reversed(database.list_logs(owner_id)))
    assert logs[0].level is LogLevel.ERROR
    assert logs[0].message == 'Error processing BTCUSDT: indicator blew up'
    assert logs[0].metadata == {'strategy_id': strategy.id, 'symbol': 'BTCUSDT', 'error': 'indicator blew up'}
    assert [entry.level for entry in logs[1:]] == [LogLevel.INFO, LogLevel.SUCCESS]


def test_exchange_rejection_is_part_of_the_results(database, exchange, owner_id, seed_prices, sell_history) -> None:
    exchange.failing_symbols['ETHUSDT'] = {'code': -1013, 'msg': 'Filter failure: LOT_SIZE'}
    seed_prices('ETHUSDT', sell_history)
    strategy = database.create_strategy(owner_id, 'Rejected', 'sma_rsi', StrategyConfig(symbols=('ETHUSDT',)))

    results = asyncio.run(_runner(database, exchange).run(strategy.id, owner_id=owner_id))

    assert len(results) == 1
    assert results[0].error == {'code': -1013, 'msg': 'Filter failure: LOT_SIZE'}
    assert database.list_orders(owner_id) == []


def test_unknown_strategy_is_not_found(database, exchange, owner_id) -> None:
    with pytest.raises(StrategyNotFoundError):
        asyncio.run(_runner(database, exchange).run('missing', owner_id=owner_id))

    logs = database.list_logs(owner_id)
    assert [(entry.level, entry.message) for entry in logs] == [(LogLevel.ERROR, 'Strategy missing not found')]


def test_other_owners_strategy_is_not_found(database, exchange, owner_id) -> None:
    strategy = database.create_strategy('someone-else', 'Private', 'sma_rsi')

    with pytest.raises(StrategyNotFoundError):
        asyncio.run(_runner(database, exchange).run(strategy.id, owner_id=owner_id))


def test_inactive_strategy_is_never_run(database, exchange, owner_id, seed_prices, sell_history) -> None:
    seed_prices('ETHUSDT', sell_history)
    strategy = database.create_strategy(
        owner_id, 'Paused', 'sma_rsi', StrategyConfig(symbols=('ETHUSDT',)), is_active=False
    )

    with pytest.raises(StrategyInactiveError):
        asyncio.run(_runner(database, exchange).run(strategy.id, owner_id=owner_id))

    assert exchange.submitted == []
    assert [entry.level for entry in database.list_logs(owner_id)] == [LogLevel.ERROR]


def test_analyze_reads_most_recent_history(database, exchange, seed_prices, buy_history) -> None:
    seed_prices('BTCUSDT', buy_history)

    signal = asyncio.run(_runner(database, exchange).analyze('BTCUSDT'))

    assert signal.action.value == 'buy'
    assert signal.price == buy_history[0]
