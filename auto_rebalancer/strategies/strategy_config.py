"""Typed strategy configuration and bot lifecycle state."""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

DEFAULT_SYMBOLS: Tuple[str, ...] = ('BTCUSDT', 'ETHUSDT')
DEFAULT_BOT_INTERVAL_MS = 300_000

logger = logging.getLogger(__name__)

# camelCase spellings accepted from older dashboard payloads
_ALIASES = {
    'minConfidence': 'min_confidence',
    'maxRiskPerTrade': 'max_risk_per_trade',
    'accountValue': 'account_value',
}
_KNOWN_KEYS = {'symbols', 'min_confidence', 'max_risk_per_trade', 'account_value'}
_NUMERIC_KEYS = ('min_confidence', 'max_risk_per_trade', 'account_value')


@dataclass(frozen=True)
class StrategyConfig:
    """Business parameters of a strategy.

    ``symbols`` left empty means the strategy never chose any instruments; the
    runner then trades :data:`DEFAULT_SYMBOLS` while the rebalancer ignores it.
    Keys the engine does not understand are preserved in ``extra``.
    """

    symbols: Tuple[str, ...] = ()
    min_confidence: float = 70.0
    max_risk_per_trade: float = 0.02
    account_value: float = 1_000.0
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for key in _NUMERIC_KEYS:
            problem = _range_error(key, getattr(self, key))
            if problem:
                raise ValueError(problem)

    @property
    def effective_symbols(self) -> Tuple[str, ...]:
        return self.symbols or DEFAULT_SYMBOLS

    @classmethod
    def from_parameters(cls, parameters: Optional[Mapping[str, Any]]) -> 'StrategyConfig':
        """Build a config from a stored parameter map.

        Stored rows may come from older dashboards, so empty, zero, malformed
        or out-of-range numbers fall back to the defaults with a warning
        instead of raising.
        """
        if parameters is not None and not isinstance(parameters, Mapping):
            logger.warning('Ignoring non-mapping strategy parameters %r', parameters)
            parameters = None
        values: Dict[str, Any] = {}
        for key, value in (parameters or {}).items():
            values[_ALIASES.get(key, key)] = value
        extra = {key: value for key, value in values.items() if key not in _KNOWN_KEYS}
        kwargs: Dict[str, Any] = {'extra': extra}
        if values.get('symbols'):
            kwargs['symbols'] = _normalize_symbols(values['symbols'])
        for key in _NUMERIC_KEYS:
            number = _stored_number(key, values.get(key))
            if number is not None:
                kwargs[key] = number
        return cls(**kwargs)

    def to_parameters(self) -> Dict[str, Any]:
        parameters = dict(self.extra)
        parameters.update(
            min_confidence=self.min_confidence,
            max_risk_per_trade=self.max_risk_per_trade,
            account_value=self.account_value,
        )
        if self.symbols:
            parameters['symbols'] = list(self.symbols)
        return parameters


def _range_error(key: str, value: float) -> Optional[str]:
    if math.isnan(value):
        return f'{key} must be a number'
    if key == 'min_confidence' and not 0 <= value <= 100:
        return 'min_confidence must be between 0 and 100'
    if key == 'max_risk_per_trade' and not 0 < value <= 1:
        return 'max_risk_per_trade must be in (0, 1]'
    if key == 'account_value' and not 0 < value < math.inf:
        return 'account_value must be positive'
    return None


def _stored_number(key: str, raw: Any) -> Optional[float]:
    # zero and empty strings mean "not set", as older dashboards store them
    if raw is None or raw == '' or raw == 0 or isinstance(raw, bool):
        return None
    try:
        number = float(raw)
    except (TypeError, ValueError):
        logger.warning('Ignoring malformed %s %r; using the default', key, raw)
        return None
    problem = _range_error(key, number)
    if problem:
        logger.warning('Ignoring stored %s %r (%s); using the default', key, raw, problem)
        return None
    return number


def _normalize_symbols(symbols: Iterable[str] | str) -> Tuple[str, ...]:
    if isinstance(symbols, str):
        symbols = [symbols]
    ordered: Dict[str, None] = {}
    for symbol in symbols:
        cleaned = str(symbol).strip().upper()
        if cleaned:
            ordered[cleaned] = None
    return tuple(ordered)


@dataclass(frozen=True)
class BotState:
    """Two-state machine: stopped (initial) or running."""

    active: bool = False
    interval_ms: int = DEFAULT_BOT_INTERVAL_MS
    started_at: Optional[datetime] = None
    stopped_at: Optional[datetime] = None
    enabled_strategy: bool = False

    def start(self, interval_ms: int, now: datetime, *, strategy_was_active: bool) -> 'BotState':
        if interval_ms <= 0:
            raise ValueError('interval_ms must be positive')
        # a refresh keeps track of who switched the strategy on originally
        enabled = self.enabled_strategy if self.active else not strategy_was_active
        return dataclasses.replace(
            self,
            active=True,
            interval_ms=interval_ms,
            started_at=now,
            enabled_strategy=enabled,
        )

    def stop(self, now: datetime) -> 'BotState':
        return dataclasses.replace(self, active=False, stopped_at=now, enabled_strategy=False)


__all__ = ['BotState', 'DEFAULT_BOT_INTERVAL_MS', 'DEFAULT_SYMBOLS', 'StrategyConfig']
