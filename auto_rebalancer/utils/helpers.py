"""Assorted helper functions."""

from __future__ import annotations

import dataclasses
import enum
from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Ensure datetimes are timezone-aware in UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_payload(value: Any) -> Any:
    """Convert records, enums and datetimes into JSON-friendly structures.

    Objects exposing ``as_dict()`` are serialised through it.
    """
    as_dict = getattr(value, 'as_dict', None)
    if callable(as_dict) and not isinstance(value, type):
        return to_payload(as_dict())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            item.name: to_payload(getattr(value, item.name))
            for item in dataclasses.fields(value)
        }
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    if isinstance(value, dict):
        return {str(key): to_payload(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_payload(item) for item in value]
    return value


__all__ = ['as_utc', 'to_payload', 'utc_now']
