"""Shared Binance client management and the Binance exchange adapter."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from binance import AsyncClient
from binance.exceptions import BinanceAPIException, BinanceRequestException

from ..config import BinanceConfig
from ..database.models import OrderStatus
from ..errors import ExchangeError
from .base import Exchange, OrderRequest, PlacedOrder

logger = logging.getLogger(__name__)

_STATUS_MAP = {
    'NEW': OrderStatus.PENDING,
    'PARTIALLY_FILLED': OrderStatus.PENDING,
    'PENDING_NEW': OrderStatus.PENDING,
    'FILLED': OrderStatus.FILLED,
    'CANCELED': OrderStatus.CANCELLED,
    'PENDING_CANCEL': OrderStatus.CANCELLED,
    'REJECTED': OrderStatus.CANCELLED,
    'EXPIRED': OrderStatus.CANCELLED,
    'EXPIRED_IN_MATCH': OrderStatus.CANCELLED,
}


def _format_quantity(value: float) -> str:
    text = f'{value:.5f}'.rstrip('0').rstrip('.')
    return text or '0'


class BinanceService:
    """Lazily instantiates the Binance AsyncClient."""

    def __init__(self, config: BinanceConfig) -> None:
        self._config = config
        self._client: Optional[AsyncClient] = None
        self._lock = asyncio.Lock()

    @property
    def config(self) -> BinanceConfig:
        return self._config

    async def client(self) -> AsyncClient:
        async with self._lock:
            if self._client is None:
                self._client = await AsyncClient.create(
                    api_key=self._config.api_key,
                    api_secret=self._config.api_secret,
                    testnet=self._config.is_testnet,
                    requests_params={'timeout': self._config.request_timeout},
                )
            return self._client

    async def close(self) -> None:
        async with self._lock:
            if self._client is not None:
                await self._client.close_connection()
                self._client = None


class BinanceExchange(Exchange):
    """:class:`Exchange` backed by the Binance spot REST API."""

    name = 'binance'

    def __init__(self, service: BinanceService) -> None:
        self._service = service

    @property
    def config(self) -> BinanceConfig:
        return self._service.config

    async def _call(self, method: str, **params: Any) -> Any:
        client = await self._service.client()
        try:
            return await getattr(client, method)(**params)
        except BinanceAPIException as exc:
            raise ExchangeError(
                f'Binance rejected {method}: {exc.message}',
                raw={'code': exc.code, 'msg': exc.message, 'status_code': exc.status_code},
            ) from exc
        except BinanceRequestException as exc:
            raise ExchangeError(f'Binance request failed: {exc.message}', raw={'msg': exc.message}) from exc

    async def get_price(self, symbol: str) -> float:
        ticker = await self._call('get_symbol_ticker', symbol=symbol.upper())
        return float(ticker['price'])

    async def get_24h_stats(self, symbol: Optional[str] = None) -> Dict[str, Any] | List[Dict[str, Any]]:
        if symbol:
            return await self._call('get_ticker', symbol=symbol.upper())
        return await self._call('get_ticker')

    async def get_account_balances(self) -> Dict[str, Dict[str, float]]:
        account = await self._call('get_account', recvWindow=self.config.recv_window)
        balances: Dict[str, Dict[str, float]] = {}
        for entry in account.get('balances', []):
            free = float(entry.get('free', 0.0))
            locked = float(entry.get('locked', 0.0))
            if free or locked:
                balances[entry['asset']] = {'free': free, 'locked': locked}
        return balances

    async def place_order(self, request: OrderRequest) -> PlacedOrder:
        params: Dict[str, Any] = {
            'symbol': request.symbol.upper(),
            'side': request.side.upper(),
            'type': request.order_type.upper(),
            'quantity': _format_quantity(request.quantity),
            'recvWindow': self.config.recv_window,
        }
        if request.price is not None and params['type'] == 'LIMIT':
            params['price'] = str(request.price)
            params['timeInForce'] = 'GTC'
        response = await self._call('create_order', **params)
        logger.debug('Binance accepted order %s', response.get('orderId'))
        return PlacedOrder(external_order_id=str(response.get('orderId', '')), raw=response)

    async def get_order_status(self, symbol: str, external_order_id: str) -> OrderStatus:
        response = await self._call(
            'get_order',
            symbol=symbol.upper(),
            orderId=int(external_order_id),
            recvWindow=self.config.recv_window,
        )
        return _STATUS_MAP.get(str(response.get('status', '')).upper(), OrderStatus.PENDING)

    async def close(self) -> None:
        await self._service.close()


__all__ = ['BinanceExchange', 'BinanceService']
