"""
Logging setup for chronus_player

Module loggers live under the "chronus_player" namespace. configure_logging
attaches one console handler that prints bracketed tags, e.g.

    [supervisor] WARNING Player process unreachable. player=PlayerState(...)
"""

import logging
import sys

ROOT_LOGGER = "chronus_player"


class TagFormatter(logging.Formatter):
    """Render the last component of the logger name as a [tag]"""

    def format(self, record: logging.LogRecord) -> str:
        record.tag = record.name.rsplit('.', 1)[-1]
        return super().format(record)


def get_logger(name: str) -> logging.Logger:
    if name.startswith(ROOT_LOGGER):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def configure_logging(level: int = logging.INFO, verbose: bool = False, stream=None) -> logging.Logger:
    """Install (or replace) the console handler. verbose forces DEBUG."""
    logger = logging.getLogger(ROOT_LOGGER)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(TagFormatter("[%(tag)s] %(levelname)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else level)
    logger.propagate = False
    return logger
