"""
Test doubles for the player supervisor: a clock that only moves when told,
a scriptable registry and channels that record what was sent.
"""

import threading

from chronus_player.errors import NoPlayerAvailable
from chronus_player.player_state import Found, NotFound
from chronus_player.registry import PlayerRegistry


class FakeClock:
    """Monotonic clock driven by sleep() instead of wall time"""

    def __init__(self, start=1000.0):
        self.now = start
        self.sleeps = []
        self.on_sleep = None

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds
        if self.on_sleep:
            self.on_sleep(len(self.sleeps))


class FakeRegistry(PlayerRegistry):
    """
    available: player handed out by find_available (None = none available)
    lookups: player id -> LookupResult or exception to raise
    Unknown ids are looked up as Found(<the player with that id>) if known.
    """

    def __init__(self):
        self.available = None
        self.lookups = {}
        self.known = {}
        self.fill_calls = 0
        self.fill_excludes = []
        self.fill_error = None
        self.lookup_calls = []

    def offer(self, player):
        self.available = player
        self.known[player.id] = player

    def find_available(self, exclude=()):
        if self.available is None or self.available.id in exclude:
            raise NoPlayerAvailable("no player processes available")
        return self.available

    def find_by_id(self, player_id):
        self.lookup_calls.append(player_id)
        result = self.lookups.get(player_id)
        if isinstance(result, Exception):
            raise result
        if result is not None:
            return result
        if player_id in self.known:
            return Found(self.known[player_id])
        return NotFound(player_id)

    def fill_pool(self, exclude=()):
        self.fill_calls += 1
        self.fill_excludes.append(set(exclude))
        if self.fill_error:
            raise self.fill_error


class RecordingChannel:
    def __init__(self, factory, player):
        self.factory = factory
        self.player = player

    def send_ping(self):
        if self.player.port in self.factory.hanging_ports:
            self.factory.release.wait(5.0)
        if self.player.port in self.factory.failing_ports:
            raise ConnectionRefusedError(f"port {self.player.port} refused")
        self.factory.pings.append(self.player.id)

    def send_shutdown(self, offset=0):
        self.factory.shutdowns.append((self.player.id, offset))

    def send_message(self, address, *args):
        self.factory.messages.append((self.player.id, address, args))


class ChannelFactory:
    """Builds RecordingChannels and collects everything they send"""

    def __init__(self):
        self.pings = []
        self.shutdowns = []
        self.messages = []
        self.failing_ports = set()
        self.hanging_ports = set()
        self.release = threading.Event()

    def __call__(self, player):
        return RecordingChannel(self, player)
