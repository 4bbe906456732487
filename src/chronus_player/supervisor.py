"""
Player Supervisor - keeps one player process bound and a spare pool warm

The supervisor has two jobs:

1. Keep the player pool full, so there is always a fresh player process to
   switch to if the one in use falls over.

2. Keep one specific player bound for callers to use, and keep checking that
   it is still reachable by pinging it. If it stops answering, or the
   registry says it is gone, the supervisor forgets it and binds another.

All of this happens in a polling loop (`run`). Callers never see the loop;
they go through has_player / with_channel / shutdown_player, which read the
same PlayerSlot the loop writes.
"""

import threading
import time
from collections import deque
from typing import Callable, Optional, Set, Tuple, TypeVar

from .bounded_wait import retry_until, run_bounded
from .channel import PlayerChannel
from .config import SupervisorConfig
from .errors import NOT_FOUND_PREFIX, NoPlayerAvailable
from .log import get_logger
from .player_state import Found, LookupResult, NotFound, PlayerState, TransientError
from .registry import PlayerRegistry
from .slot import PlayerSlot

log = get_logger(__name__)

T = TypeVar('T')

ChannelFactory = Callable[[PlayerState], PlayerChannel]

# How many evicted player ids are kept out of discovery
EVICTED_MEMORY = 32


class PlayerSupervisor:
    """Owns the active player slot and the loop that reconciles it"""

    def __init__(self, registry: PlayerRegistry, config: Optional[SupervisorConfig] = None,
                 channel_factory: Optional[ChannelFactory] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.registry = registry
        self.config = config or SupervisorConfig()
        self.slot = PlayerSlot()

        self._channel_factory = channel_factory or self._default_channel
        self._clock = clock
        self._sleep = sleep

        # Loop timing state, None until the step first runs
        self._pool_last_filled: Optional[float] = None
        self._last_ping: Optional[float] = None

        # Players that were evicted or shut down; never rebound
        self._evicted = deque(maxlen=EVICTED_MEMORY)

        self._thread: Optional[threading.Thread] = None
        self._thread_lock = threading.Lock()

    def _default_channel(self, player: PlayerState) -> PlayerChannel:
        return PlayerChannel(player.port, host=self.config.player_host,
                             transport=self.config.transport)

    # ============= ACCESSORS =============

    def has_player(self) -> bool:
        return self.slot.has_player()

    def current_player(self) -> Optional[PlayerState]:
        return self.slot.get()

    def _bound_channel(self) -> Tuple[PlayerState, PlayerChannel]:
        player = self.slot.get()
        if player is None:
            raise NoPlayerAvailable()
        return player, self._channel_factory(player)

    def channel(self) -> PlayerChannel:
        """Channel to the bound player. Raises NoPlayerAvailable if none is bound."""
        return self._bound_channel()[1]

    def _wait_for_channel(self) -> Tuple[PlayerState, PlayerChannel]:
        """
        Binding happens asynchronously in the loop, so a player is usually
        but not always there when a command arrives. This absorbs that gap.
        """
        return retry_until(
            self._bound_channel,
            self.config.discovery_timeout,
            self.config.retry_interval,
            clock=self._clock,
            sleep=self._sleep,
        )

    def with_channel(self, execute: Callable[[PlayerChannel], T]) -> T:
        """
        Wait (up to the discovery timeout) for a player, then run `execute`
        with a channel to it.
        """
        _, channel = self._wait_for_channel()
        return execute(channel)

    def shutdown_player(self) -> PlayerState:
        """
        Ask the bound player to exit, then forget it. Returns the player the
        shutdown was sent to.

        The loop may notice the player disappearing and clear the slot on its
        own before we get to clear it here. Clearing twice is harmless; what
        matters is that the slot ends up empty so nothing keeps talking to a
        player that is on its way out.
        """
        player, channel = self._wait_for_channel()
        channel.send_shutdown(0)
        self._evicted.append(player.id)
        self.slot.clear()
        return player

    # ============= RECONCILIATION STEPS =============

    def _evict(self, player: PlayerState) -> None:
        self._evicted.append(player.id)
        self.slot.clear()

    def _excluded(self) -> Set[str]:
        """Ids discovery must skip and the pool must not count as spares"""
        excluded = set(self._evicted)
        player = self.slot.get()
        if player is not None:
            excluded.add(player.id)
        return excluded

    def _due(self, last: Optional[float], interval: float, now: float) -> bool:
        return last is None or now - last > interval

    def fill_pool(self, now: float) -> None:
        if not self._due(self._pool_last_filled, self.config.pool_fill_interval, now):
            return

        try:
            excluded = self._excluded()
            run_bounded(lambda: self.registry.fill_pool(excluded), self.config.registry_timeout)
        except Exception as e:
            log.warning(f"Failed to fill player pool: {e}")
        else:
            log.debug("Filled player pool.")

        self._pool_last_filled = now

    def _lookup(self, player_id: str) -> LookupResult:
        try:
            result = run_bounded(lambda: self.registry.find_by_id(player_id),
                                 self.config.registry_timeout)
        except Exception as e:
            if str(e).startswith(NOT_FOUND_PREFIX):
                return NotFound(player_id)
            return TransientError(player_id, str(e))

        if isinstance(result, PlayerState):
            return Found(result)
        return result

    def refresh_player(self) -> None:
        """Replace the bound descriptor with the registry's latest view of it"""
        player = self.slot.get()
        if player is None:
            return

        result = self._lookup(player.id)

        if isinstance(result, Found):
            self.slot.bind(result.player)
        elif isinstance(result, NotFound):
            log.warning(f"Player process is offline. player={player}")
            self._evict(player)
        else:
            log.warning(f"Failed to update player state information: {result.details}")

    def acquire_player(self) -> None:
        if self.slot.has_player():
            return

        excluded = self._excluded()
        try:
            player = retry_until(
                lambda: self.registry.find_available(excluded),
                self.config.discovery_timeout,
                self.config.retry_interval,
                bounded=True,
                clock=self._clock,
                sleep=self._sleep,
            )
        except Exception as e:
            log.warning(f"No player processes available: {e}")
            return

        log.info(f"Found player process. player={player}")
        self.slot.bind(player)

    def ping_player(self, now: float) -> None:
        player = self.slot.get()
        if player is None or not self._due(self._last_ping, self.config.ping_interval, now):
            return

        try:
            channel = self._channel_factory(player)
            run_bounded(channel.send_ping, self.config.ping_timeout)
        except Exception as e:
            log.warning(f"Player process unreachable: {e} player={player}")
            self._evict(player)
            return

        log.debug(f"Sent ping to player process. player={player}")
        self._last_ping = now

    # ============= LOOP =============

    def tick(self) -> None:
        """One pass of the loop: fill, refresh, acquire, ping"""
        now = self._clock()
        steps = (
            lambda: self.fill_pool(now),
            self.refresh_player,
            self.acquire_player,
            lambda: self.ping_player(now),
        )
        for step in steps:
            try:
                step()
            except Exception:
                log.exception("Player supervisor step failed")

    def run(self) -> None:
        """Reconcile forever. Never returns."""
        log.debug("Player supervisor loop started")
        while True:
            self.tick()
            self._sleep(self.config.tick_interval)

    def start(self) -> threading.Thread:
        """Run the loop on a daemon thread; repeated calls return the same thread"""
        with self._thread_lock:
            if self._thread is None:
                self._thread = threading.Thread(target=self.run, name='player-supervisor', daemon=True)
                self._thread.start()
            return self._thread
