"""Logging setup for command line entry points."""

from __future__ import annotations

import logging
from typing import Final

from .env import env_value

LOG_LEVEL_VAR: Final[str] = "LOG_LEVEL"
DEFAULT_LOG_LEVEL: Final[int] = logging.INFO

log = logging.getLogger(__name__)


def parse_log_level(value: str | None) -> tuple[int, bool]:
    """Return the level named by ``value`` and whether it was recognised.

    Unrecognised or empty values resolve to ``INFO``.
    """

    if not value:
        return DEFAULT_LOG_LEVEL, True
    level = logging.getLevelNamesMapping().get(value.strip().upper())
    if level is None:
        return DEFAULT_LOG_LEVEL, False
    return level, True


def configure_logging(*, level: int | None = None, force: bool = False) -> None:
    """Initialise the root logger once with a terse format suitable for CLI output.

    Without an explicit ``level`` the ``LOG_LEVEL`` environment variable is
    used. Pass ``force=True`` to reconfigure during tests.
    """

    recognised = True
    raw_level = env_value(LOG_LEVEL_VAR)
    if level is None:
        level, recognised = parse_log_level(raw_level)

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    if not recognised:
        log.warning("Incorrect log level %r, using INFO instead", raw_level)
