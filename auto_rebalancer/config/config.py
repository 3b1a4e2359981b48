"""Engine settings resolved from the environment and an optional .env file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping

_TRUTHY = {'1', 'true', 'yes', 'on'}
_FALSY = {'0', 'false', 'no', 'off'}


def read_env_file(path: Path) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` lines; comments, blanks and malformed lines are ignored."""
    if not path.is_file():
        return {}

    values: Dict[str, str] = {}
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        key, _, value = line.partition('=')
        values[key.strip()] = value.strip().strip('"').strip("'")
    return values


def _flag(source: Mapping[str, str], key: str, default: bool) -> bool:
    raw = source.get(key)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f'{key} must be a boolean, got {raw!r}')


def _integer(source: Mapping[str, str], key: str, default: int) -> int:
    raw = source.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f'{key} must be an integer, got {raw!r}') from None


@dataclass
class Settings:
    """Engine-wide settings.

    ``Settings.from_env`` layers the process environment over a ``.env`` file
    over the defaults below.
    """

    environment: str = 'development'
    database_url: str = 'sqlite:///data/auto_rebalancer.db'
    data_directory: Path = field(default_factory=lambda: Path('data'))
    log_level: str = 'INFO'
    use_testnet: bool = True
    paper_trading: bool = True
    bot_interval_ms: int = 300_000
    price_history_limit: int = 50
    api_host: str = '127.0.0.1'
    api_port: int = 8000

    def __post_init__(self) -> None:
        self.data_directory = Path(self.data_directory)
        if self.bot_interval_ms <= 0:
            raise ValueError('bot_interval_ms must be positive')
        if self.price_history_limit <= 0:
            raise ValueError('price_history_limit must be positive')

    @classmethod
    def from_env(cls, env_file: str | Path = '.env') -> 'Settings':
        source = {**read_env_file(Path(env_file)), **os.environ}
        settings = cls(
            environment=source.get('APP_ENV', cls.environment),
            database_url=source.get('DATABASE_URL', cls.database_url),
            data_directory=Path(source.get('DATA_DIRECTORY', 'data')),
            log_level=source.get('LOG_LEVEL', cls.log_level).upper(),
            use_testnet=_flag(source, 'USE_TESTNET', cls.use_testnet),
            paper_trading=_flag(source, 'PAPER_TRADING', cls.paper_trading),
            bot_interval_ms=_integer(source, 'BOT_INTERVAL_MS', cls.bot_interval_ms),
            price_history_limit=_integer(source, 'PRICE_HISTORY_LIMIT', cls.price_history_limit),
            api_host=source.get('API_HOST', cls.api_host),
            api_port=_integer(source, 'API_PORT', cls.api_port),
        )
        settings.data_directory.mkdir(parents=True, exist_ok=True)
        return settings


load_settings = Settings.from_env

__all__ = ['Settings', 'load_settings', 'read_env_file']
