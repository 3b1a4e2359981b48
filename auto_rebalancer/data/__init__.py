"""Market data layer."""

from .price_history import PriceHistoryService

__all__ = ['PriceHistoryService']
