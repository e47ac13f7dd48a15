"""Shared logging helpers for Silent Partners."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def level_for_verbosity(verbosity: int) -> int:
    """Map a count of ``-v`` flags (negative for ``-q``) onto a logging level."""

    if verbosity <= -1:
        return logging.WARNING
    if verbosity == 0:
        return logging.INFO
    return logging.DEBUG


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with a terse CLI format.

    Thin wrapper over ``logging.basicConfig``; pass ``force=True`` to
    reconfigure from tests or a second entry point.
    """

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        force=force,
    )
