"""Exchange integrations exposed to the rest of the system."""

from ..errors import ExchangeError
from .base import Exchange, OrderRequest, PlacedOrder
from .binance_service import BinanceExchange, BinanceService
from .paper_exchange import PaperExchange

__all__ = [
    'BinanceExchange',
    'BinanceService',
    'Exchange',
    'ExchangeError',
    'OrderRequest',
    'PaperExchange',
    'PlacedOrder',
]
