"""SQLAlchemy-backed persistence manager."""

from __future__ import annotations

import uuid
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from sqlalchemy import Select, create_engine, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from ..strategies.strategy_config import BotState, StrategyConfig
from ..utils.helpers import as_utc, utc_now
from .models import (
    ApiCredentials,
    ApiKey,
    Base,
    LogEntry,
    LogEntryRecord,
    LogLevel,
    Order,
    OrderRecord,
    OrderStatus,
    PortfolioPosition,
    PortfolioPositionRecord,
    PricePoint,
    PricePointRecord,
    Strategy,
    StrategyRecord,
)


def _optional_utc(value: Optional[datetime]) -> Optional[datetime]:
    return as_utc(value) if value is not None else None


def _strategy_record(row: Strategy) -> StrategyRecord:
    return StrategyRecord(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        strategy_type=row.strategy_type,
        risk_level=row.risk_level,
        is_active=bool(row.is_active),
        config=StrategyConfig.from_parameters(row.parameters),
        bot=BotState(
            active=bool(row.bot_active),
            interval_ms=row.bot_interval_ms,
            started_at=_optional_utc(row.bot_started_at),
            stopped_at=_optional_utc(row.bot_stopped_at),
            enabled_strategy=bool(row.bot_enabled_strategy),
        ),
        description=row.description,
        created_at=_optional_utc(row.created_at),
        updated_at=_optional_utc(row.updated_at),
    )


def _order_record(row: Order) -> OrderRecord:
    return OrderRecord(
        id=row.id,
        owner_id=row.owner_id,
        exchange=row.exchange,
        symbol=row.symbol,
        side=row.side,
        order_type=row.order_type,
        quantity=row.quantity,
        status=OrderStatus(row.status),
        created_at=as_utc(row.created_at),
        strategy_id=row.strategy_id,
        price=row.price,
        external_order_id=row.external_order_id,
        filled_at=_optional_utc(row.filled_at),
        cancelled_at=_optional_utc(row.cancelled_at),
    )


class DatabaseManager:
    """High level helper around a SQLAlchemy engine and session factory."""

    def __init__(self, database_url: str, *, echo: bool = False) -> None:
        self._database_url = database_url
        connect_args: dict[str, object] = {}
        if database_url.startswith('sqlite:///'):
            db_path = Path(database_url.replace('sqlite:///', '', 1))
            db_path.parent.mkdir(parents=True, exist_ok=True)
            connect_args['check_same_thread'] = False
        self._engine: Engine = create_engine(
            database_url,
            echo=echo,
            future=True,
            connect_args=connect_args,
        )
        self._session_factory = sessionmaker(
            self._engine,
            expire_on_commit=False,
            future=True,
        )
        self.create_schema()

    def create_schema(self) -> None:
        """Create database tables if they do not already exist."""

        Base.metadata.create_all(self._engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Context manager returning a database session with automatic commit."""

        session: Session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # strategies

    def create_strategy(
        self,
        owner_id: str,
        name: str,
        strategy_type: str,
        config: StrategyConfig | None = None,
        *,
        risk_level: str = 'medium',
        is_active: bool = True,
        description: str | None = None,
    ) -> StrategyRecord:
        now = utc_now()
        row = Strategy(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            name=name,
            strategy_type=strategy_type,
            risk_level=risk_level,
            description=description,
            is_active=is_active,
            parameters=(config or StrategyConfig()).to_parameters(),
            bot_active=False,
            bot_interval_ms=BotState().interval_ms,
            bot_enabled_strategy=False,
            created_at=now,
            updated_at=now,
        )
        with self.session() as session:
            session.add(row)
            session.flush()
            return _strategy_record(row)

    def get_strategy(self, strategy_id: str, owner_id: str) -> Optional[StrategyRecord]:
        """Return the strategy only when it belongs to ``owner_id``."""

        with self.session() as session:
            row = session.get(Strategy, strategy_id)
            if row is None or row.owner_id != owner_id:
                return None
            return _strategy_record(row)

    def list_strategies(self, owner_id: str, *, active_only: bool = False) -> List[StrategyRecord]:
        stmt: Select[tuple[Strategy]] = (
            select(Strategy)
            .where(Strategy.owner_id == owner_id)
            .order_by(Strategy.created_at, Strategy.id)
        )
        if active_only:
            stmt = stmt.where(Strategy.is_active.is_(True))
        with self.session() as session:
            return [_strategy_record(row) for row in session.execute(stmt).scalars().all()]

    def list_running_bots(self) -> List[StrategyRecord]:
        """Strategies of every owner whose bot is running and which are enabled."""

        stmt = (
            select(Strategy)
            .where(Strategy.bot_active.is_(True), Strategy.is_active.is_(True))
            .order_by(Strategy.owner_id, Strategy.created_at)
        )
        with self.session() as session:
            return [_strategy_record(row) for row in session.execute(stmt).scalars().all()]

    def update_strategy(
        self,
        strategy_id: str,
        owner_id: str,
        *,
        name: str | None = None,
        config: StrategyConfig | None = None,
        is_active: bool | None = None,
        risk_level: str | None = None,
        description: str | None = None,
    ) -> Optional[StrategyRecord]:
        with self.session() as session:
            row = session.get(Strategy, strategy_id)
            if row is None or row.owner_id != owner_id:
                return None
            if name is not None:
                row.name = name
            if config is not None:
                row.parameters = config.to_parameters()
            if is_active is not None:
                row.is_active = is_active
            if risk_level is not None:
                row.risk_level = risk_level
            if description is not None:
                row.description = description
            row.updated_at = utc_now()
            return _strategy_record(row)

    def save_bot_state(
        self,
        strategy_id: str,
        owner_id: str,
        bot: BotState,
        *,
        is_active: bool | None = None,
    ) -> Optional[StrategyRecord]:
        with self.session() as session:
            row = session.get(Strategy, strategy_id)
            if row is None or row.owner_id != owner_id:
                return None
            row.bot_active = bot.active
            row.bot_interval_ms = bot.interval_ms
            row.bot_started_at = bot.started_at
            row.bot_stopped_at = bot.stopped_at
            row.bot_enabled_strategy = bot.enabled_strategy
            if is_active is not None:
                row.is_active = is_active
            row.updated_at = utc_now()
            return _strategy_record(row)

    def delete_strategy(self, strategy_id: str, owner_id: str) -> bool:
        with self.session() as session:
            row = session.get(Strategy, strategy_id)
            if row is None or row.owner_id != owner_id:
                return False
            session.delete(row)
            return True

    # price history

    def store_price_points(self, points: Iterable[PricePointRecord]) -> None:
        """Append price points; existing history is never rewritten."""

        point_list = list(points)
        if not point_list:
            return
        with self.session() as session:
            session.add_all(
                PricePoint(
                    symbol=point.symbol,
                    price=point.price,
                    timestamp=as_utc(point.timestamp),
                    volume=point.volume,
                    market_cap=point.market_cap,
                )
                for point in point_list
            )

    def recent_prices(self, symbol: str, limit: int) -> List[PricePointRecord]:
        """Return up to ``limit`` price points for ``symbol``, newest first."""

        if limit <= 0:
            return []
        stmt: Select[tuple[PricePoint]] = (
            select(PricePoint)
            .where(PricePoint.symbol == symbol)
            .order_by(PricePoint.timestamp.desc(), PricePoint.id.desc())
            .limit(limit)
        )
        with self.session() as session:
            rows = session.execute(stmt).scalars().all()
        return [
            PricePointRecord(
                symbol=row.symbol,
                price=row.price,
                timestamp=as_utc(row.timestamp),
                volume=row.volume,
                market_cap=row.market_cap,
            )
            for row in rows
        ]

    def prices_since(self, symbol: str, since: datetime) -> List[PricePointRecord]:
        """Price points recorded at or after ``since``, oldest first."""

        stmt = (
            select(PricePoint)
            .where(PricePoint.symbol == symbol, PricePoint.timestamp >= as_utc(since))
            .order_by(PricePoint.timestamp, PricePoint.id)
        )
        with self.session() as session:
            rows = session.execute(stmt).scalars().all()
        return [
            PricePointRecord(
                symbol=row.symbol,
                price=row.price,
                timestamp=as_utc(row.timestamp),
                volume=row.volume,
                market_cap=row.market_cap,
            )
            for row in rows
        ]

    # portfolio

    def upsert_position(self, owner_id: str, position: PortfolioPositionRecord) -> None:
        stmt = select(PortfolioPosition).where(
            PortfolioPosition.owner_id == owner_id,
            PortfolioPosition.symbol == position.symbol,
        )
        with self.session() as session:
            row = session.execute(stmt).scalar_one_or_none()
            if row is None:
                row = PortfolioPosition(owner_id=owner_id, symbol=position.symbol)
                session.add(row)
            row.quantity = position.quantity
            row.avg_price = position.avg_price
            row.current_price = position.current_price
            row.total_value = position.total_value
            row.pnl_percentage = position.pnl_percentage
            row.last_updated = as_utc(position.last_updated or utc_now())

    def portfolio_positions(self, owner_id: str) -> List[PortfolioPositionRecord]:
        stmt = (
            select(PortfolioPosition)
            .where(PortfolioPosition.owner_id == owner_id)
            .order_by(PortfolioPosition.symbol)
        )
        with self.session() as session:
            rows = session.execute(stmt).scalars().all()
        return [
            PortfolioPositionRecord(
                symbol=row.symbol,
                quantity=row.quantity,
                avg_price=row.avg_price,
                current_price=row.current_price,
                total_value=row.total_value,
                pnl_percentage=row.pnl_percentage,
                last_updated=_optional_utc(row.last_updated),
                owner_id=row.owner_id,
            )
            for row in rows
        ]

    # orders

    def record_order(self, order: OrderRecord) -> None:
        """Persist details about a submitted order."""

        with self.session() as session:
            session.add(
                Order(
                    id=order.id,
                    owner_id=order.owner_id,
                    strategy_id=order.strategy_id,
                    exchange=order.exchange,
                    symbol=order.symbol,
                    side=order.side,
                    order_type=order.order_type,
                    quantity=order.quantity,
                    price=order.price,
                    status=OrderStatus(order.status).value,
                    external_order_id=order.external_order_id,
                    created_at=as_utc(order.created_at),
                    filled_at=_optional_utc(order.filled_at),
                    cancelled_at=_optional_utc(order.cancelled_at),
                )
            )

    def list_orders(self, owner_id: str, *, status: OrderStatus | None = None) -> List[OrderRecord]:
        stmt = select(Order).where(Order.owner_id == owner_id).order_by(Order.created_at, Order.id)
        if status is not None:
            stmt = stmt.where(Order.status == OrderStatus(status).value)
        with self.session() as session:
            return [_order_record(row) for row in session.execute(stmt).scalars().all()]

    def update_order_status(
        self,
        order_id: str,
        status: OrderStatus,
        at: datetime | None = None,
    ) -> Optional[OrderRecord]:
        """Apply a status transition reported by the exchange."""

        status = OrderStatus(status)
        with self.session() as session:
            row = session.get(Order, order_id)
            if row is None:
                return None
            timestamp = as_utc(at or utc_now())
            row.status = status.value
            if status is OrderStatus.FILLED:
                row.filled_at = timestamp
            elif status is OrderStatus.CANCELLED:
                row.cancelled_at = timestamp
            return _order_record(row)

    # audit log

    def append_log(self, entry: LogEntryRecord) -> None:
        with self.session() as session:
            session.add(
                LogEntry(
                    owner_id=entry.owner_id,
                    level=LogLevel(entry.level).value,
                    message=entry.message,
                    metadata_=dict(entry.metadata),
                    created_at=as_utc(entry.created_at or utc_now()),
                )
            )

    def list_logs(self, owner_id: str | None = None, limit: int = 100) -> List[LogEntryRecord]:
        """Most recent audit entries first."""

        stmt = select(LogEntry).order_by(LogEntry.id.desc()).limit(limit)
        if owner_id is not None:
            stmt = stmt.where(LogEntry.owner_id == owner_id)
        with self.session() as session:
            rows = session.execute(stmt).scalars().all()
        return [
            LogEntryRecord(
                level=LogLevel(row.level),
                message=row.message,
                metadata=dict(row.metadata_ or {}),
                owner_id=row.owner_id,
                created_at=_optional_utc(row.created_at),
            )
            for row in rows
        ]

    # credentials

    def store_api_credentials(
        self,
        owner_id: str,
        exchange: str,
        api_key: str,
        api_secret: str,
        *,
        is_active: bool = True,
    ) -> None:
        stmt = select(ApiKey).where(ApiKey.owner_id == owner_id, ApiKey.exchange == exchange)
        with self.session() as session:
            row = session.execute(stmt).scalar_one_or_none()
            if row is None:
                row = ApiKey(owner_id=owner_id, exchange=exchange)
                session.add(row)
            row.api_key = api_key
            row.api_secret = api_secret
            row.is_active = is_active

    def get_api_credentials(self, owner_id: str, exchange: str = 'binance') -> Optional[ApiCredentials]:
        stmt = select(ApiKey).where(
            ApiKey.owner_id == owner_id,
            ApiKey.exchange == exchange,
            ApiKey.is_active.is_(True),
        )
        with self.session() as session:
            row = session.execute(stmt).scalar_one_or_none()
            if row is None:
                return None
            return ApiCredentials(
                owner_id=row.owner_id,
                exchange=row.exchange,
                api_key=row.api_key,
                api_secret=row.api_secret,
                is_active=row.is_active,
            )

    def close(self) -> None:
        """Dispose of the underlying engine and connection pool."""

        self._engine.dispose()


__all__ = ['DatabaseManager']
