"""
Active player slot

Holds the one player the supervisor is currently using. The supervisor loop
and any number of callers share it, so every read and write goes through
these methods under a lock.
"""

import threading
from typing import Optional

from .player_state import PlayerState


class PlayerSlot:
    """Single-value store for the bound player; None means no player"""

    def __init__(self):
        self._lock = threading.Lock()
        self._player: Optional[PlayerState] = None

    def get(self) -> Optional[PlayerState]:
        with self._lock:
            return self._player

    def has_player(self) -> bool:
        with self._lock:
            return self._player is not None

    def bind(self, player: Optional[PlayerState]) -> None:
        """Replace the slot contents. A player without a port leaves the slot empty."""
        if player is not None and not player.reachable:
            player = None
        with self._lock:
            self._player = player

    def clear(self) -> None:
        """Empty the slot. Clearing an empty slot is a no-op."""
        with self._lock:
            self._player = None

    def __repr__(self):
        return f"PlayerSlot({self.get()!r})"
