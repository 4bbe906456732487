"""
Configuration for the player supervisor
Handles .env files, CHRONUS_* environment variables and timing defaults
"""

import os
import shlex
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Mapping, Optional

from .channel import TRANSPORTS, TRANSPORT_TCP
from .errors import ConfigError

# Timing defaults (seconds)
DISCOVERY_TIMEOUT = 20.0
POOL_FILL_INTERVAL = 15.0
PING_TIMEOUT = 5.0
PING_INTERVAL = 1.0
TICK_INTERVAL = 0.1
REGISTRY_TIMEOUT = 5.0
RETRY_INTERVAL = 0.1

POOL_SIZE = 2
DEFAULT_STATE_DIR = Path.home() / ".cache" / "chronus" / "players"
DEFAULT_ENV_FILE = ".env"


def load_env_file(env_path: str = DEFAULT_ENV_FILE) -> Dict[str, str]:
    """Load KEY=VALUE pairs from a file; a missing file gives an empty dict"""
    env_vars = {}
    path = Path(env_path)

    if not path.exists():
        return env_vars

    with open(path, 'r') as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith('#') or '=' not in line:
                continue
            key, value = line.split('=', 1)
            # Remove inline comments
            if '#' in value:
                value = value.split('#')[0]
            env_vars[key.strip()] = value.strip()

    return env_vars


def apply_env_file(env_path: str = DEFAULT_ENV_FILE) -> Dict[str, str]:
    """Copy an env file into os.environ. Variables already set win."""
    env_vars = load_env_file(env_path)
    for key, value in env_vars.items():
        os.environ.setdefault(key, value)
    return env_vars


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


@dataclass
class SupervisorConfig:
    """Timing and process settings for PlayerSupervisor"""
    discovery_timeout: float = DISCOVERY_TIMEOUT
    pool_fill_interval: float = POOL_FILL_INTERVAL
    ping_timeout: float = PING_TIMEOUT
    ping_interval: float = PING_INTERVAL
    tick_interval: float = TICK_INTERVAL
    registry_timeout: float = REGISTRY_TIMEOUT
    retry_interval: float = RETRY_INTERVAL
    pool_size: int = POOL_SIZE
    state_dir: Path = DEFAULT_STATE_DIR
    player_command: List[str] = field(default_factory=list)
    player_host: str = "127.0.0.1"
    transport: str = TRANSPORT_TCP

    def __post_init__(self):
        self.state_dir = Path(self.state_dir).expanduser()
        self.validate()

    def validate(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if f.type is float and value <= 0:
                raise ConfigError(f"{f.name} must be positive, got {value}")

        if self.pool_size < 0:
            raise ConfigError(f"pool_size must not be negative, got {self.pool_size}")
        if self.ping_timeout >= self.pool_fill_interval:
            raise ConfigError("ping_timeout must be shorter than pool_fill_interval")
        if self.transport not in TRANSPORTS:
            raise ConfigError(f"transport must be one of {TRANSPORTS}, got {self.transport!r}")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'SupervisorConfig':
        """Build a config from CHRONUS_* variables, falling back to defaults"""
        env = os.environ if environ is None else environ

        command = env.get('CHRONUS_PLAYER_COMMAND', '')
        state_dir = env.get('CHRONUS_PLAYER_STATE_DIR') or DEFAULT_STATE_DIR

        return cls(
            discovery_timeout=_env_float(env, 'CHRONUS_DISCOVERY_TIMEOUT', DISCOVERY_TIMEOUT),
            pool_fill_interval=_env_float(env, 'CHRONUS_POOL_FILL_INTERVAL', POOL_FILL_INTERVAL),
            ping_timeout=_env_float(env, 'CHRONUS_PING_TIMEOUT', PING_TIMEOUT),
            ping_interval=_env_float(env, 'CHRONUS_PING_INTERVAL', PING_INTERVAL),
            tick_interval=_env_float(env, 'CHRONUS_TICK_INTERVAL', TICK_INTERVAL),
            registry_timeout=_env_float(env, 'CHRONUS_REGISTRY_TIMEOUT', REGISTRY_TIMEOUT),
            retry_interval=_env_float(env, 'CHRONUS_RETRY_INTERVAL', RETRY_INTERVAL),
            pool_size=_env_int(env, 'CHRONUS_POOL_SIZE', POOL_SIZE),
            state_dir=Path(state_dir),
            player_command=shlex.split(command),
            player_host=env.get('CHRONUS_PLAYER_HOST', '127.0.0.1'),
            transport=env.get('CHRONUS_TRANSPORT', TRANSPORT_TCP).lower(),
        )
