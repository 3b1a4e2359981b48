"""Persistence layer exports."""

from .db_manager import DatabaseManager
from .models import (
    ApiCredentials,
    Base,
    LogEntryRecord,
    LogLevel,
    OrderRecord,
    OrderStatus,
    PortfolioPositionRecord,
    PricePointRecord,
    StrategyRecord,
)

__all__ = [
    'ApiCredentials',
    'Base',
    'DatabaseManager',
    'LogEntryRecord',
    'LogLevel',
    'OrderRecord',
    'OrderStatus',
    'PortfolioPositionRecord',
    'PricePointRecord',
    'StrategyRecord',
]
