"""Utility helpers."""

from .helpers import as_utc, to_payload, utc_now
from .indicators import relative_strength_index, simple_moving_average

__all__ = ['as_utc', 'relative_strength_index', 'simple_moving_average', 'to_payload', 'utc_now']
