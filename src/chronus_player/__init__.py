"""
Chronus Player - player process supervision for Music Chronus clients
Keeps one player bound at all times, with a warm spare pool for fast failover
"""

__version__ = "0.4.0"

from .channel import PlayerChannel
from .config import SupervisorConfig
from .errors import NoPlayerAvailable, OperationTimeout, PlayerError, PlayerNotFound
from .player_state import Found, NotFound, PlayerState, TransientError
from .registry import PlayerRegistry, StateDirRegistry
from .supervisor import PlayerSupervisor

__all__ = [
    'PlayerSupervisor', 'PlayerChannel', 'SupervisorConfig',
    'PlayerRegistry', 'StateDirRegistry',
    'PlayerState', 'Found', 'NotFound', 'TransientError',
    'PlayerError', 'NoPlayerAvailable', 'PlayerNotFound', 'OperationTimeout',
]
