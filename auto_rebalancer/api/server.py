"""Minimal HTTP endpoint exposing the engine operations."""

from __future__ import annotations

import asyncio
import json
import logging
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Awaitable, Callable, Dict, Tuple

from ..engine import TradingEngine
from ..errors import (
    StrategyInactiveError,
    StrategyNotFoundError,
    UnauthorizedError,
    UpstreamFailure,
)
from ..utils.helpers import to_payload

logger = logging.getLogger(__name__)

ENGINE_PATHS = {'/api/trading-engine', '/api/trading-engine/'}
OWNER_HEADER = 'X-Owner-Id'

EngineFactory = Callable[[str], Awaitable[TradingEngine]]

_ACTION_ALIASES = {
    'executeStrategy': 'runStrategy',
    'rebalancePortfolio': 'rebalance',
    'getBotStatus': 'botStatus',
}

_ERROR_STATUS = (
    (UnauthorizedError, HTTPStatus.UNAUTHORIZED),
    (StrategyNotFoundError, HTTPStatus.NOT_FOUND),
    (StrategyInactiveError, HTTPStatus.CONFLICT),
    (UpstreamFailure, HTTPStatus.BAD_GATEWAY),
    (ValueError, HTTPStatus.BAD_REQUEST),
    (KeyError, HTTPStatus.BAD_REQUEST),
)


def _require(params: Dict[str, Any], key: str) -> Any:
    value = params.get(key)
    if value in (None, ''):
        raise ValueError(f'Missing parameter: {key}')
    return value


async def dispatch_action(engine: TradingEngine, action: str, params: Dict[str, Any]) -> Any:
    """Run one engine operation and return a JSON-friendly result."""

    action = _ACTION_ALIASES.get(action, action)
    if action == 'analyzeMarket':
        result: Any = await engine.analyze_market(_require(params, 'symbol'))
    elif action == 'runStrategy':
        result = await engine.run_strategy(_require(params, 'strategyId'))
    elif action == 'rebalance':
        result = await engine.rebalance()
    elif action == 'startBot':
        interval = params.get('interval', params.get('intervalMs'))
        result = await engine.start_bot(
            _require(params, 'strategyId'),
            int(interval) if interval is not None else None,
        )
    elif action == 'stopBot':
        result = await engine.stop_bot(_require(params, 'strategyId'))
    elif action == 'botStatus':
        result = await engine.bot_status()
    elif action == 'syncOrders':
        result = {'updated': await engine.sync_orders()}
    else:
        raise ValueError(f'Unknown action: {action}')
    return to_payload(result)


async def handle_request(factory: EngineFactory, owner_id: str, body: Dict[str, Any]) -> Any:
    if not owner_id:
        raise UnauthorizedError('Unauthorized')
    params = dict(body)
    action = params.pop('action', None)
    if not action:
        raise ValueError('Missing parameter: action')
    engine = await factory(owner_id)
    try:
        return await dispatch_action(engine, action, params)
    finally:
        await engine.close()


def error_status(error: Exception) -> HTTPStatus:
    for error_type, status in _ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return HTTPStatus.INTERNAL_SERVER_ERROR


def _make_handler(factory: EngineFactory) -> type[BaseHTTPRequestHandler]:
    class EngineHandler(BaseHTTPRequestHandler):
        def _send_json(self, status: HTTPStatus, payload: Any) -> None:
            body = json.dumps(payload).encode('utf-8')
            self.send_response(status)
            self.send_header('Content-Type', 'application/json')
            self.send_header('Content-Length', str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def do_POST(self) -> None:  # noqa: N802 (BaseHTTPRequestHandler contract)
            if self.path not in ENGINE_PATHS:
                self.send_error(HTTPStatus.NOT_FOUND)
                return
            owner_id = (self.headers.get(OWNER_HEADER) or '').strip()
            length = int(self.headers.get('Content-Length') or 0)
            try:
                body = json.loads(self.rfile.read(length) or b'{}')
                if not isinstance(body, dict):
                    raise ValueError('Request body must be a JSON object')
                payload = asyncio.run(handle_request(factory, owner_id, body))
            except Exception as error:
                status = error_status(error)
                if status is HTTPStatus.INTERNAL_SERVER_ERROR:
                    logger.exception('Error in trading-engine request')
                self._send_json(status, {'error': str(error)})
                return
            self._send_json(HTTPStatus.OK, payload)

        def log_message(self, format: str, *args) -> None:  # noqa: A003 (shadow builtins)
            logger.debug(format, *args)

    return EngineHandler


def serve_engine_api(
    factory: EngineFactory,
    host: str = '127.0.0.1',
    port: int = 8000,
) -> Tuple[ThreadingHTTPServer, threading.Thread]:
    """Start the engine API in a background thread."""
    handler = _make_handler(factory)
    server = ThreadingHTTPServer((host, port), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server, thread


__all__ = ['dispatch_action', 'error_status', 'handle_request', 'serve_engine_api']
