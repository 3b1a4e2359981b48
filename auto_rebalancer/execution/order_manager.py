"""Order submission and persistence on top of an :class:`Exchange`."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from ..database import DatabaseManager, OrderRecord, OrderStatus
from ..exchanges import Exchange, ExchangeError, OrderRequest
from ..utils.helpers import utc_now

logger = logging.getLogger(__name__)


@dataclass
class OrderResult:
    symbol: str
    side: str
    quantity: float
    status: str
    order_id: Optional[str] = None
    external_order_id: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)
    error: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def rejected(cls, request: OrderRequest, error: Dict[str, Any]) -> 'OrderResult':
        return cls(
            symbol=request.symbol,
            side=request.side,
            quantity=request.quantity,
            status='rejected',
            error=error,
        )


class OrderManager:
    """Submits orders and records each accepted one as ``pending``.

    Status transitions after creation come only from :meth:`refresh_statuses`,
    which asks the exchange what happened to the order.
    """

    def __init__(
        self,
        exchange: Exchange,
        database: DatabaseManager,
        *,
        clock: Callable = utc_now,
    ) -> None:
        self._exchange = exchange
        self._database = database
        self._clock = clock

    @property
    def exchange(self) -> Exchange:
        return self._exchange

    async def submit(
        self,
        request: OrderRequest,
        *,
        owner_id: str,
        strategy_id: Optional[str] = None,
    ) -> OrderResult:
        placed = await self._exchange.place_order(request)
        record = OrderRecord(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            strategy_id=strategy_id,
            exchange=self._exchange.name,
            symbol=request.symbol,
            side=request.side.lower(),
            order_type=request.order_type.lower(),
            quantity=request.quantity,
            price=request.price,
            status=OrderStatus.PENDING,
            external_order_id=placed.external_order_id or None,
            created_at=self._clock(),
        )
        await asyncio.to_thread(self._database.record_order, record)
        return OrderResult(
            symbol=request.symbol,
            side=record.side,
            quantity=request.quantity,
            status=record.status.value,
            order_id=record.id,
            external_order_id=record.external_order_id,
            raw=placed.raw,
        )

    async def refresh_statuses(self, owner_id: str) -> int:
        """Apply exchange-reported transitions to pending orders; returns the number changed.

        Only orders placed on this manager's exchange are queried; orders from
        any other venue are left untouched.
        """

        pending = await asyncio.to_thread(self._database.list_orders, owner_id, status=OrderStatus.PENDING)
        changed = 0
        for order in pending:
            if order.exchange != self._exchange.name or not order.external_order_id:
                continue
            try:
                status = await self._exchange.get_order_status(order.symbol, order.external_order_id)
            except ExchangeError as error:
                logger.warning('Could not refresh order %s: %s', order.id, error)
                continue
            if status is OrderStatus.PENDING:
                continue
            await asyncio.to_thread(self._database.update_order_status, order.id, status, self._clock())
            changed += 1
        return changed

    async def close(self) -> None:
        await self._exchange.close()


__all__ = ['OrderManager', 'OrderRequest', 'OrderResult']
