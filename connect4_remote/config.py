"""
config.py - Runtime configuration for remote Connect Four

Settings are read from CONNECT4_* environment variables with sensible
defaults; the command-line interface overrides individual fields.
"""

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional

DEFAULT_DATA_DIR = os.path.join(os.getcwd(), 'data')
DEFAULT_API_URL = "http://127.0.0.1:5000"
DEFAULT_TICK_SECONDS = 0.05  # Speed of the drop animation
DEFAULT_REPLAY_INTERVAL_TICKS = 10


def _env_int(env: Mapping[str, str], name: str, default: Optional[int]) -> Optional[int]:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Configuration shared by the server, the client and the CLI."""
    data_dir: str = DEFAULT_DATA_DIR
    api_url: str = DEFAULT_API_URL
    host: str = "127.0.0.1"
    port: int = 5000
    seed: Optional[int] = None
    tick_seconds: float = DEFAULT_TICK_SECONDS
    replay_interval_ticks: int = DEFAULT_REPLAY_INTERVAL_TICKS
    request_timeout: float = 10.0
    log_level: str = "info"
    log_file: Optional[str] = None

    @property
    def server_dir(self) -> str:
        return os.path.join(self.data_dir, 'server')

    @property
    def client_dir(self) -> str:
        return os.path.join(self.data_dir, 'client')

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> 'Settings':
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read from (defaults to os.environ)

        Returns:
            A Settings instance
        """
        env = os.environ if env is None else env
        return cls(
            data_dir=env.get('CONNECT4_DATA_DIR') or DEFAULT_DATA_DIR,
            api_url=(env.get('CONNECT4_API_URL') or DEFAULT_API_URL).rstrip('/'),
            host=env.get('CONNECT4_HOST') or "127.0.0.1",
            port=_env_int(env, 'CONNECT4_PORT', 5000),
            seed=_env_int(env, 'CONNECT4_SEED', None),
            tick_seconds=_env_float(env, 'CONNECT4_TICK_SECONDS', DEFAULT_TICK_SECONDS),
            replay_interval_ticks=_env_int(env, 'CONNECT4_REPLAY_INTERVAL_TICKS',
                                           DEFAULT_REPLAY_INTERVAL_TICKS),
            request_timeout=_env_float(env, 'CONNECT4_REQUEST_TIMEOUT', 10.0),
            log_level=env.get('CONNECT4_LOG_LEVEL') or "info",
            log_file=env.get('CONNECT4_LOG_FILE') or None,
        )

    def override(self, **changes) -> 'Settings':
        """Return a copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})
