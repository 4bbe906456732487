"""
Unit tests for PlayerSlot
"""

import threading
import unittest

from chronus_player.player_state import PlayerState
from chronus_player.slot import PlayerSlot


class TestPlayerSlot(unittest.TestCase):
    """Test the active player slot"""

    def setUp(self):
        self.slot = PlayerSlot()
        self.player = PlayerState(id="p1", port=27713)

    def test_starts_empty(self):
        self.assertFalse(self.slot.has_player())
        self.assertIsNone(self.slot.get())

    def test_bind_and_clear(self):
        self.slot.bind(self.player)
        self.assertTrue(self.slot.has_player())
        self.assertEqual(self.slot.get(), self.player)

        self.slot.clear()
        self.assertFalse(self.slot.has_player())

    def test_clear_is_idempotent(self):
        self.slot.clear()
        self.slot.clear()
        self.assertIsNone(self.slot.get())

        self.slot.bind(self.player)
        self.slot.clear()
        self.slot.clear()
        self.assertFalse(self.slot.has_player())

    def test_bind_replaces_whole_descriptor(self):
        self.slot.bind(self.player)
        refreshed = PlayerState(id="p1", port=27713, state="active")
        self.slot.bind(refreshed)
        self.assertIs(self.slot.get(), refreshed)

    def test_zero_port_counts_as_empty(self):
        self.slot.bind(PlayerState(id="", port=0))
        self.assertFalse(self.slot.has_player())
        self.assertIsNone(self.slot.get())

    def test_concurrent_bind_and_clear(self):
        """Readers only ever see None or a complete descriptor"""
        other = PlayerState(id="p2", port=27714)
        seen = set()
        stop = threading.Event()

        def reader():
            while not stop.is_set():
                seen.add(self.slot.get())

        def writer(player):
            for _ in range(1000):
                self.slot.bind(player)
                self.slot.clear()

        readers = [threading.Thread(target=reader) for _ in range(2)]
        writers = [threading.Thread(target=writer, args=(p,)) for p in (self.player, other)]
        for t in readers + writers:
            t.start()
        for t in writers:
            t.join()
        stop.set()
        for t in readers:
            t.join()

        self.assertTrue(seen <= {None, self.player, other})


if __name__ == '__main__':
    unittest.main()
