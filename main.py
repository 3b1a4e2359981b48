"""Command line entry point for the auto-rebalancing trading engine."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any, Sequence

from auto_rebalancer.api import serve_engine_api
from auto_rebalancer.config import Settings, load_settings
from auto_rebalancer.database import DatabaseManager
from auto_rebalancer.engine import TradingEngine
from auto_rebalancer.monitoring import configure_logging
from auto_rebalancer.utils import to_payload


logger = logging.getLogger(__name__)


def _print(result: Any) -> None:
    print(json.dumps(to_payload(result), indent=2))


async def run_owner_command(settings: Settings, database: DatabaseManager, args: argparse.Namespace) -> Any:
    engine = await TradingEngine.create(args.owner, database, settings)
    try:
        if args.command == 'run-strategy':
            return await engine.run_strategy(args.strategy)
        if args.command == 'rebalance':
            return await engine.rebalance()
        if args.command == 'start-bot':
            return await engine.start_bot(args.strategy, args.interval_ms)
        if args.command == 'stop-bot':
            return await engine.stop_bot(args.strategy)
        if args.command == 'bot-status':
            return await engine.bot_status()
        if args.command == 'record-prices':
            return await engine.record_prices(args.symbols)
        if args.command == 'sync-orders':
            return {'updated': await engine.sync_orders()}
        raise ValueError(f'Unknown command {args.command}')  # pragma: no cover
    finally:
        await engine.close()


async def run_bots(settings: Settings, database: DatabaseManager) -> dict:
    """Run every running bot once; meant to be called by cron on its own cadence."""
    strategies = await asyncio.to_thread(database.list_running_bots)
    summary = {'strategies': len(strategies), 'orders': 0, 'failed': 0}
    for strategy in strategies:
        try:
            engine = await TradingEngine.create(strategy.owner_id, database, settings)
        except Exception as error:
            logger.error('Cannot build engine for %s: %s', strategy.owner_id, error)
            summary['failed'] += 1
            continue
        try:
            results = await engine.run_strategy(strategy.id)
            summary['orders'] += len(results)
        except Exception as error:
            logger.error('Bot run failed for strategy %s: %s', strategy.id, error)
            summary['failed'] += 1
        finally:
            await engine.close()
    return summary


def serve(settings: Settings, database: DatabaseManager, host: str, port: int) -> None:
    async def factory(owner_id: str) -> TradingEngine:
        return await TradingEngine.create(owner_id, database, settings)

    server, thread = serve_engine_api(factory, host=host, port=port)
    logger.info('Trading engine API available at http://%s:%s/api/trading-engine', host, port)
    try:
        thread.join()
    except KeyboardInterrupt:
        logger.info('Shutting down trading engine API')
    finally:
        server.shutdown()
        thread.join(timeout=1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Auto-rebalancing trading engine CLI')
    sub = parser.add_subparsers(dest='command', required=True)

    run_strategy = sub.add_parser('run-strategy', help='Run one strategy now')
    run_strategy.add_argument('--owner', required=True)
    run_strategy.add_argument('--strategy', required=True)

    rebalance = sub.add_parser('rebalance', help='Rebalance an owner portfolio')
    rebalance.add_argument('--owner', required=True)

    start_bot = sub.add_parser('start-bot', help='Mark a strategy bot as running')
    start_bot.add_argument('--owner', required=True)
    start_bot.add_argument('--strategy', required=True)
    start_bot.add_argument('--interval-ms', type=int, default=None)

    stop_bot = sub.add_parser('stop-bot', help='Mark a strategy bot as stopped')
    stop_bot.add_argument('--owner', required=True)
    stop_bot.add_argument('--strategy', required=True)

    bot_status = sub.add_parser('bot-status', help='Show bot status for an owner')
    bot_status.add_argument('--owner', required=True)

    record_prices = sub.add_parser('record-prices', help='Append current ticker prices to the history')
    record_prices.add_argument('--owner', required=True)
    record_prices.add_argument('--symbols', nargs='+', default=['BTCUSDT', 'ETHUSDT'])

    sync_orders = sub.add_parser('sync-orders', help='Refresh pending order statuses from the exchange')
    sync_orders.add_argument('--owner', required=True)

    sub.add_parser('run-bots', help='Run every running bot once (cron tick)')

    serve_parser = sub.add_parser('serve', help='Serve the JSON API')
    serve_parser.add_argument('--host', default=None)
    serve_parser.add_argument('--port', type=int, default=None)

    return parser


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = load_settings()
    configure_logging(settings.log_level)
    database = DatabaseManager(settings.database_url)
    try:
        if args.command == 'serve':
            serve(settings, database, args.host or settings.api_host, args.port or settings.api_port)
        elif args.command == 'run-bots':
            _print(asyncio.run(run_bots(settings, database)))
        else:
            _print(asyncio.run(run_owner_command(settings, database, args)))
    finally:
        database.close()


if __name__ == '__main__':
    main()
