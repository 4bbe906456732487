"""
Test bounded-wait helpers

Tests:
- run_bounded returns values, re-raises errors, times out hung operations
- retry_until keeps trying until success or the deadline
"""

import threading
import time

import pytest

from chronus_player.bounded_wait import retry_until, run_bounded
from chronus_player.errors import NoPlayerAvailable, OperationTimeout

from fakes import FakeClock


class TestRunBounded:

    def test_returns_result(self):
        assert run_bounded(lambda: 42, 1.0) == 42

    def test_reraises_operation_error(self):
        def fail():
            raise ConnectionRefusedError("refused")

        with pytest.raises(ConnectionRefusedError, match="refused"):
            run_bounded(fail, 1.0)

    def test_times_out_hung_operation(self):
        release = threading.Event()
        start = time.monotonic()

        with pytest.raises(OperationTimeout):
            run_bounded(lambda: release.wait(5.0), 0.05)

        assert time.monotonic() - start < 1.0
        release.set()

    def test_timeout_is_a_timeout_error(self):
        release = threading.Event()
        with pytest.raises(TimeoutError):
            run_bounded(lambda: release.wait(5.0), 0.01)
        release.set()

    def test_late_result_is_discarded(self):
        release = threading.Event()
        finished = threading.Event()

        def slow():
            release.wait(5.0)
            finished.set()
            return "late"

        with pytest.raises(OperationTimeout):
            run_bounded(slow, 0.01)

        release.set()
        assert finished.wait(1.0)


class TestRetryUntil:

    def setup_method(self):
        self.clock = FakeClock()

    def test_first_success_does_not_sleep(self):
        assert retry_until(lambda: "ok", 5.0, clock=self.clock, sleep=self.clock.sleep) == "ok"
        assert self.clock.sleeps == []

    def test_succeeds_after_failures(self):
        attempts = []

        def flaky():
            attempts.append(1)
            if len(attempts) < 3:
                raise NoPlayerAvailable()
            return "player"

        result = retry_until(flaky, 5.0, 0.1, clock=self.clock, sleep=self.clock.sleep)

        assert result == "player"
        assert len(attempts) == 3
        assert self.clock.sleeps == [0.1, 0.1]

    def test_raises_last_error_at_deadline(self):
        def never():
            raise NoPlayerAvailable()

        with pytest.raises(NoPlayerAvailable):
            retry_until(never, 1.0, 0.25, clock=self.clock, sleep=self.clock.sleep)

        assert sum(self.clock.sleeps) == pytest.approx(1.0)

    def test_last_sleep_is_cut_to_deadline(self):
        def never():
            raise NoPlayerAvailable()

        with pytest.raises(NoPlayerAvailable):
            retry_until(never, 0.25, 0.1, clock=self.clock, sleep=self.clock.sleep)

        assert self.clock.sleeps[-1] == pytest.approx(0.05)

    def test_bounded_attempt_times_out(self):
        release = threading.Event()

        with pytest.raises(OperationTimeout):
            retry_until(lambda: release.wait(5.0), 0.05, bounded=True)

        release.set()
