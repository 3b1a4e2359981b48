"""Process-wide logging setup for the CLI and the API server."""

from __future__ import annotations

import logging

# third-party loggers that are chatty at INFO
_QUIET_LOGGERS = ('sqlalchemy.engine', 'urllib3', 'aiohttp.access', 'websockets')

_FORMAT = '%(asctime)s %(levelname)-7s [%(name)s] %(message)s'
_FORMAT_NO_TIME = '%(levelname)-7s [%(name)s] %(message)s'


def configure_logging(level: str = 'INFO', *, include_timestamp: bool = True) -> int:
    """Install a root handler once and return the numeric level applied."""
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    logging.basicConfig(level=numeric, format=_FORMAT if include_timestamp else _FORMAT_NO_TIME)
    logging.getLogger().setLevel(numeric)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric, logging.WARNING))
    return numeric


__all__ = ['configure_logging']
