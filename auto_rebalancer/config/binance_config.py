"""Per-owner Binance connection settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal, Mapping

from .config import Settings

Network = Literal['mainnet', 'testnet']

_REST_URLS = {
    'mainnet': 'https://api.binance.com',
    'testnet': 'https://testnet.binance.vision',
}


@dataclass
class BinanceConfig:
    """One owner's key pair plus the network it trades on."""

    api_key: str
    api_secret: str
    network: Network = 'testnet'
    recv_window: int = 5_000
    request_timeout: int = 10
    base_url: str | None = None

    def __post_init__(self) -> None:
        if self.network not in _REST_URLS:
            raise ValueError(f'Unsupported network: {self.network}')
        if self.recv_window <= 0 or self.recv_window > 60_000:
            raise ValueError('recv_window must be between 1 and 60000 ms')
        self.base_url = self.base_url or _REST_URLS[self.network]

    @property
    def is_testnet(self) -> bool:
        return self.network == 'testnet'

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_secret)

    @property
    def masked_key(self) -> str:
        return f'{self.api_key[:4]}...' if self.api_key else '<none>'

    @classmethod
    def from_credentials(
        cls,
        api_key: str,
        api_secret: str,
        settings: Settings,
        environ: Mapping[str, str] | None = None,
    ) -> 'BinanceConfig':
        """Stored credentials on the network chosen by ``settings.use_testnet``.

        ``BINANCE_RECV_WINDOW`` and ``BINANCE_API_TIMEOUT`` tune the client.
        """
        env = os.environ if environ is None else environ
        return cls(
            api_key=api_key,
            api_secret=api_secret,
            network='testnet' if settings.use_testnet else 'mainnet',
            recv_window=int(env.get('BINANCE_RECV_WINDOW', cls.recv_window)),
            request_timeout=int(env.get('BINANCE_API_TIMEOUT', cls.request_timeout)),
        )


__all__ = ['BinanceConfig', 'Network']
