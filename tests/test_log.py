"""
Test logging setup
"""

import io
import logging

from chronus_player.log import configure_logging, get_logger


def test_tagged_output():
    stream = io.StringIO()
    configure_logging(logging.INFO, stream=stream)

    get_logger("chronus_player.supervisor").warning("Player process unreachable.")
    get_logger("chronus_player.supervisor").debug("Sent ping to player process.")

    assert stream.getvalue() == "[supervisor] WARNING Player process unreachable.\n"


def test_verbose_enables_debug():
    stream = io.StringIO()
    configure_logging(verbose=True, stream=stream)

    get_logger("registry").debug("Launched player process pid=1")

    assert "[registry] DEBUG Launched player process pid=1" in stream.getvalue()


def test_reconfigure_replaces_handler():
    configure_logging(stream=io.StringIO())
    configure_logging(stream=io.StringIO())

    assert len(logging.getLogger("chronus_player").handlers) == 1
