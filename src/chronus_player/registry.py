"""
Player Registry - discovery, lookup and pool filling for player processes

Provides:
- PlayerRegistry: the interface the supervisor talks to
- StateDirRegistry: registry backed by a directory of player state files

Each player process announces itself by writing <state_dir>/<id>.json:

    {"id": "p1", "state": "ready", "port": 27713, "pid": 4242, "expiry": 1700000000.0}
"""

import json
import subprocess
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Collection, List, Optional, Sequence

import psutil

from .errors import NoPlayerAvailable, PlayerCommandError
from .log import get_logger
from .player_state import (
    PLAYER_READY, PLAYER_STARTING,
    Found, LookupResult, NotFound, PlayerState, TransientError,
)

log = get_logger(__name__)


class PlayerRegistry(ABC):
    """What the supervisor needs from a player registry"""

    @abstractmethod
    def find_available(self, exclude: Collection[str] = ()) -> PlayerState:
        """
        Return a player ready for use, skipping the ids in `exclude` (the
        bound player and players already evicted). Raises NoPlayerAvailable
        when there is none.
        """

    @abstractmethod
    def find_by_id(self, player_id: str) -> LookupResult:
        """Look a player up again by id"""

    @abstractmethod
    def fill_pool(self, exclude: Collection[str] = ()) -> None:
        """
        Make sure enough spare players are starting or ready. Players in
        `exclude` are not spares. Raises on failure.
        """


def process_alive(pid: Optional[int]) -> bool:
    """True if pid names a running, non-zombie process"""
    if not pid:
        return False
    try:
        return psutil.Process(pid).status() != psutil.STATUS_ZOMBIE
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return psutil.pid_exists(pid)


class StateDirRegistry(PlayerRegistry):
    """
    Registry backed by JSON state files written by the players themselves.

    A player counts as present while its state file exists, its pid is alive
    and its expiry (if any) has not passed.
    """

    def __init__(self, state_dir: Path, player_command: Sequence[str] = (), pool_size: int = 2,
                 is_alive: Callable[[Optional[int]], bool] = process_alive,
                 clock: Callable[[], float] = time.time):
        self.state_dir = Path(state_dir)
        self.player_command = list(player_command)
        self.pool_size = pool_size
        self._is_alive = is_alive
        self._clock = clock

    def state_file(self, player_id: str) -> Path:
        return self.state_dir / f"{player_id}.json"

    def _read(self, path: Path) -> PlayerState:
        with open(path, 'r') as f:
            return PlayerState.from_dict(json.load(f))

    def _present(self, player: PlayerState) -> bool:
        return self._is_alive(player.pid) and not player.is_expired(self._clock())

    def list_players(self) -> List[PlayerState]:
        """All live players, sorted by id"""
        if not self.state_dir.is_dir():
            return []

        players = []
        for path in sorted(self.state_dir.glob('*.json')):
            try:
                player = self._read(path)
            except (OSError, ValueError) as e:
                log.debug(f"Skipping unreadable state file {path}: {e}")
                continue
            if self._present(player):
                players.append(player)

        return sorted(players, key=lambda p: p.id)

    def find_available(self, exclude: Collection[str] = ()) -> PlayerState:
        for player in self.list_players():
            if player.state == PLAYER_READY and player.id not in exclude:
                return player
        raise NoPlayerAvailable("no player processes available")

    def find_by_id(self, player_id: str) -> LookupResult:
        path = self.state_file(player_id)
        if not path.exists():
            return NotFound(player_id)

        try:
            player = self._read(path)
        except (OSError, ValueError) as e:
            return TransientError(player_id, str(e))

        if not self._present(player):
            return NotFound(player_id)
        return Found(player)

    def prune(self) -> int:
        """Delete state files of players that are gone. Returns how many were removed."""
        if not self.state_dir.is_dir():
            return 0

        removed = 0
        for path in self.state_dir.glob('*.json'):
            try:
                player = self._read(path)
            except (OSError, ValueError):
                continue
            if not self._present(player):
                path.unlink(missing_ok=True)
                removed += 1

        if removed:
            log.debug(f"Removed {removed} stale player state file(s)")
        return removed

    def spawn_player(self) -> subprocess.Popen:
        if not self.player_command:
            raise PlayerCommandError("no player command configured")
        try:
            return subprocess.Popen(
                self.player_command,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            raise PlayerCommandError(f"failed to launch player: {e}") from e

    def fill_pool(self, exclude: Collection[str] = ()) -> None:
        self.prune()

        spares = [p for p in self.list_players()
                  if p.state in (PLAYER_STARTING, PLAYER_READY) and p.id not in exclude]
        missing = self.pool_size - len(spares)

        for _ in range(missing):
            process = self.spawn_player()
            log.debug(f"Launched player process pid={process.pid}")
