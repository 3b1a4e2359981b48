"""Exception hierarchy shared by the engine components."""

from __future__ import annotations

from typing import Any, Dict, Optional


class TradingEngineError(Exception):
    """Base class for errors surfaced to callers of the engine."""


class StrategyNotFoundError(TradingEngineError):
    """Raised when a strategy does not exist or belongs to another owner."""

    def __init__(self, strategy_id: str) -> None:
        super().__init__(f'Strategy {strategy_id} not found')
        self.strategy_id = strategy_id


class StrategyInactiveError(TradingEngineError):
    """Raised when an operation needs an active strategy."""

    def __init__(self, strategy_id: str) -> None:
        super().__init__(f'Strategy {strategy_id} is inactive')
        self.strategy_id = strategy_id


class UnauthorizedError(TradingEngineError):
    """Raised when no caller identity is available."""


class UpstreamFailure(TradingEngineError):
    """An exchange or storage call failed."""


class ExchangeError(UpstreamFailure):
    """Exchange rejected a request; ``raw`` keeps the exchange payload."""

    def __init__(self, message: str, raw: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.raw: Dict[str, Any] = raw if raw is not None else {'msg': message}


__all__ = [
    'ExchangeError',
    'StrategyInactiveError',
    'StrategyNotFoundError',
    'TradingEngineError',
    'UnauthorizedError',
    'UpstreamFailure',
]
