"""
Player descriptors and registry lookup results
"""

from dataclasses import dataclass
from typing import Optional, Union

PLAYER_STARTING = 'starting'
PLAYER_READY = 'ready'


@dataclass(frozen=True)
class PlayerState:
    """
    One observation of a player process, as reported by the registry.

    Never mutated: a refresh replaces the whole descriptor.
    """
    id: str
    port: int
    state: str = PLAYER_READY
    pid: Optional[int] = None
    expiry: Optional[float] = None  # unix seconds

    @property
    def reachable(self) -> bool:
        """A descriptor without a port is as good as no descriptor"""
        return bool(self.port)

    def is_expired(self, now: float) -> bool:
        return self.expiry is not None and now >= self.expiry

    @classmethod
    def from_dict(cls, data: dict) -> 'PlayerState':
        """Build from a state file payload. Raises ValueError on bad input."""
        try:
            player_id = str(data['id'])
            port = int(data['port'])
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"invalid player state: {e}") from e

        pid = data.get('pid')
        expiry = data.get('expiry')
        return cls(
            id=player_id,
            port=port,
            state=str(data.get('state', PLAYER_READY)),
            pid=int(pid) if pid is not None else None,
            expiry=float(expiry) if expiry is not None else None,
        )


@dataclass(frozen=True)
class Found:
    player: PlayerState


@dataclass(frozen=True)
class NotFound:
    player_id: str


@dataclass(frozen=True)
class TransientError:
    player_id: str
    details: str


LookupResult = Union[Found, NotFound, TransientError]
