"""SQLAlchemy ORM models and typed records for persistence."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, DateTime, Float, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..strategies.strategy_config import DEFAULT_BOT_INTERVAL_MS, BotState, StrategyConfig


class OrderStatus(str, enum.Enum):
    PENDING = 'pending'
    FILLED = 'filled'
    CANCELLED = 'cancelled'


class LogLevel(str, enum.Enum):
    INFO = 'info'
    WARNING = 'warning'
    ERROR = 'error'
    SUCCESS = 'success'


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class Strategy(Base):
    """A user's trading strategy together with its bot lifecycle columns."""

    __tablename__ = 'trading_strategies'

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(64), index=True)
    name: Mapped[str] = mapped_column(String(128))
    strategy_type: Mapped[str] = mapped_column(String(64))
    risk_level: Mapped[str] = mapped_column(String(24), default='medium')
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    parameters: Mapped[dict] = mapped_column(JSON, default=dict)
    bot_active: Mapped[bool] = mapped_column(Boolean, default=False)
    bot_interval_ms: Mapped[int] = mapped_column(Integer, default=DEFAULT_BOT_INTERVAL_MS)
    bot_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    bot_stopped_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    bot_enabled_strategy: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class PricePoint(Base):
    """Represents a recorded price for a symbol."""

    __tablename__ = 'price_history'
    __table_args__ = (
        Index('ix_price_history_symbol_timestamp', 'symbol', 'timestamp'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    symbol: Mapped[str] = mapped_column(String(32))
    price: Mapped[float] = mapped_column(Float)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    volume: Mapped[float | None] = mapped_column(Float, nullable=True)
    market_cap: Mapped[float | None] = mapped_column(Float, nullable=True)


class Order(Base):
    """Represents an order submitted to the exchange."""

    __tablename__ = 'trading_orders'

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    owner_id: Mapped[str] = mapped_column(String(64), index=True)
    strategy_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    exchange: Mapped[str] = mapped_column(String(32))
    symbol: Mapped[str] = mapped_column(String(32), index=True)
    side: Mapped[str] = mapped_column(String(12))
    order_type: Mapped[str] = mapped_column(String(12))
    quantity: Mapped[float] = mapped_column(Float)
    price: Mapped[float | None] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(String(24))
    external_order_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    filled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class PortfolioPosition(Base):
    """Current holding of one symbol for one owner."""

    __tablename__ = 'portfolio'
    __table_args__ = (
        UniqueConstraint('owner_id', 'symbol', name='uq_portfolio_owner_symbol'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(64), index=True)
    symbol: Mapped[str] = mapped_column(String(32))
    quantity: Mapped[float] = mapped_column(Float, default=0.0)
    avg_price: Mapped[float] = mapped_column(Float, default=0.0)
    current_price: Mapped[float] = mapped_column(Float, default=0.0)
    total_value: Mapped[float] = mapped_column(Float, default=0.0)
    pnl_percentage: Mapped[float] = mapped_column(Float, default=0.0)
    last_updated: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class LogEntry(Base):
    """Append-only audit trail row."""

    __tablename__ = 'system_logs'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    level: Mapped[str] = mapped_column(String(12))
    message: Mapped[str] = mapped_column(Text)
    metadata_: Mapped[dict] = mapped_column('metadata', JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)


class ApiKey(Base):
    """Per-owner exchange credentials."""

    __tablename__ = 'api_keys'
    __table_args__ = (
        UniqueConstraint('owner_id', 'exchange', name='uq_api_keys_owner_exchange'),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(64), index=True)
    exchange: Mapped[str] = mapped_column(String(32))
    api_key: Mapped[str] = mapped_column(String(256))
    api_secret: Mapped[str] = mapped_column(String(256))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


@dataclass(slots=True)
class StrategyRecord:
    """Typed view of a strategy row."""

    id: str
    owner_id: str
    name: str
    strategy_type: str
    risk_level: str = 'medium'
    is_active: bool = True
    config: StrategyConfig = field(default_factory=StrategyConfig)
    bot: BotState = field(default_factory=BotState)
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(slots=True)
class PricePointRecord:
    """Typed container used when inserting or retrieving price points."""

    symbol: str
    price: float
    timestamp: datetime
    volume: Optional[float] = None
    market_cap: Optional[float] = None


@dataclass(slots=True)
class OrderRecord:
    """Typed container for order persistence."""

    id: str
    owner_id: str
    exchange: str
    symbol: str
    side: str
    order_type: str
    quantity: float
    status: OrderStatus
    created_at: datetime
    strategy_id: Optional[str] = None
    price: Optional[float] = None
    external_order_id: Optional[str] = None
    filled_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None


@dataclass(slots=True)
class PortfolioPositionRecord:
    """Typed container for one portfolio row."""

    symbol: str
    quantity: float
    avg_price: float
    current_price: float
    total_value: float
    pnl_percentage: float = 0.0
    last_updated: Optional[datetime] = None
    owner_id: Optional[str] = None


@dataclass(slots=True)
class LogEntryRecord:
    """Typed container for audit entries."""

    level: LogLevel
    message: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    owner_id: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(slots=True)
class ApiCredentials:
    owner_id: str
    exchange: str
    api_key: str
    api_secret: str
    is_active: bool = True


__all__ = [
    'ApiCredentials',
    'ApiKey',
    'Base',
    'LogEntry',
    'LogEntryRecord',
    'LogLevel',
    'Order',
    'OrderRecord',
    'OrderStatus',
    'PortfolioPosition',
    'PortfolioPositionRecord',
    'PricePoint',
    'PricePointRecord',
    'Strategy',
    'StrategyRecord',
]
