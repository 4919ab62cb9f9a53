"""Logging setup shared by the CLI and the web server."""

from __future__ import annotations

import logging


def configure_logging(*, level: int | str = logging.WARNING, force: bool = False) -> None:
    """Initialise the root logger once with a terse format.

    Log lines go to stderr so they never mix with rendered CLI output. Pass
    ``force=True`` to reconfigure during tests.
    """

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
