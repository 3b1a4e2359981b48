"""Abstract exchange contract used by the engine."""

from __future__ import annotations

import abc
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..database.models import OrderStatus


@dataclass
class OrderRequest:
    symbol: str
    side: str
    quantity: float
    price: float | None = None
    order_type: str = 'market'


@dataclass
class PlacedOrder:
    external_order_id: str
    raw: Dict[str, Any] = field(default_factory=dict)


class Exchange(abc.ABC):
    """Price, balance and order access for one owner's account."""

    name: str = 'exchange'

    @abc.abstractmethod
    async def get_price(self, symbol: str) -> float:
        """Latest traded price for ``symbol``."""

    @abc.abstractmethod
    async def get_24h_stats(self, symbol: Optional[str] = None) -> Dict[str, Any] | List[Dict[str, Any]]:
        """Rolling 24 hour ticker statistics; all symbols when ``symbol`` is None."""

    @abc.abstractmethod
    async def get_account_balances(self) -> Dict[str, Dict[str, float]]:
        """Non-zero balances keyed by asset with ``free`` and ``locked`` amounts."""

    @abc.abstractmethod
    async def place_order(self, request: OrderRequest) -> PlacedOrder:
        """Submit an order; raises :class:`ExchangeError` when rejected."""

    @abc.abstractmethod
    async def get_order_status(self, symbol: str, external_order_id: str) -> OrderStatus:
        ...

    async def close(self) -> None:
        return None


__all__ = ['Exchange', 'OrderRequest', 'PlacedOrder']
