"""
Bounded-wait helpers

Every call that reaches a player process or the registry goes through one of
these so that no caller is ever suspended past its timeout:

- run_bounded: run once on a helper thread, give up after `timeout`
- retry_until: keep trying until the operation succeeds or the deadline passes
"""

import threading
import time
from typing import Callable, TypeVar

from .errors import OperationTimeout

T = TypeVar('T')

RETRY_INTERVAL = 0.1


def run_bounded(operation: Callable[[], T], timeout: float) -> T:
    """
    Run `operation` and wait at most `timeout` seconds for it.

    The operation runs on a daemon thread. If it overruns, the caller gets
    OperationTimeout and whatever the operation eventually produces is
    dropped. Errors raised by the operation are re-raised in the caller.
    """
    outcome = {}
    done = threading.Event()

    def runner():
        try:
            outcome['value'] = operation()
        except Exception as e:
            outcome['error'] = e
        finally:
            done.set()

    worker = threading.Thread(target=runner, name='bounded-wait', daemon=True)
    worker.start()

    if not done.wait(max(timeout, 0.0)):
        raise OperationTimeout(f"operation timed out after {timeout:.2f}s")

    if 'error' in outcome:
        raise outcome['error']
    return outcome.get('value')


def retry_until(operation: Callable[[], T], timeout: float,
                interval: float = RETRY_INTERVAL, *, bounded: bool = False,
                clock: Callable[[], float] = time.monotonic,
                sleep: Callable[[float], None] = time.sleep) -> T:
    """
    Call `operation` until it succeeds or `timeout` seconds have passed.

    At least one attempt is always made. With `bounded=True` each attempt is
    itself limited to the time left before the deadline. When the deadline
    passes, the last error seen is raised, so an unavailable player surfaces
    as NoPlayerAvailable rather than a bare timeout.
    """
    deadline = clock() + timeout

    while True:
        try:
            if bounded:
                return run_bounded(operation, deadline - clock())
            return operation()
        except Exception:
            remaining = deadline - clock()
            if remaining <= 0:
                raise

        sleep(min(interval, remaining))
