"""Append-only audit trail mirrored to the standard logger."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Mapping, Optional

from ..database import DatabaseManager, LogEntryRecord, LogLevel
from ..utils.helpers import to_payload, utc_now

logger = logging.getLogger(__name__)

_PY_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.SUCCESS: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class AuditLog:
    """Writes one LogEntry per engine decision or failure."""

    def __init__(
        self,
        database: DatabaseManager,
        owner_id: Optional[str] = None,
        *,
        clock: Callable[[], Any] = utc_now,
    ) -> None:
        self._database = database
        self._owner_id = owner_id
        self._clock = clock

    @property
    def owner_id(self) -> Optional[str]:
        return self._owner_id

    def bind(self, owner_id: Optional[str]) -> 'AuditLog':
        return AuditLog(self._database, owner_id, clock=self._clock)

    async def record(
        self,
        level: LogLevel,
        message: str,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> LogEntryRecord:
        level = LogLevel(level)
        entry = LogEntryRecord(
            level=level,
            message=message,
            metadata=to_payload(dict(metadata or {})),
            owner_id=self._owner_id,
            created_at=self._clock(),
        )
        logger.log(_PY_LEVELS[level], '[%s] %s', self._owner_id or '-', message)
        await asyncio.to_thread(self._database.append_log, entry)
        return entry

    async def info(self, message: str, metadata: Optional[Mapping[str, Any]] = None) -> LogEntryRecord:
        return await self.record(LogLevel.INFO, message, metadata)

    async def success(self, message: str, metadata: Optional[Mapping[str, Any]] = None) -> LogEntryRecord:
        return await self.record(LogLevel.SUCCESS, message, metadata)

    async def warning(self, message: str, metadata: Optional[Mapping[str, Any]] = None) -> LogEntryRecord:
        return await self.record(LogLevel.WARNING, message, metadata)

    async def error(self, message: str, metadata: Optional[Mapping[str, Any]] = None) -> LogEntryRecord:
        return await self.record(LogLevel.ERROR, message, metadata)


__all__ = ['AuditLog']
