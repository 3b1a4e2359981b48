"""Trading decision and execution engine for the auto-rebalancing assistant."""

from importlib import metadata

try:
    __version__ = metadata.version('auto-rebalancer')
except metadata.PackageNotFoundError:  # pragma: no cover
    __version__ = '0.1.0-dev'

__all__ = ['__version__']
