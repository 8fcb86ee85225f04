"""Logging setup for the command-line entry points."""

from __future__ import annotations

import logging
import os
from typing import Final

LOG_LEVEL_ENV_VAR: Final[str] = "CATALOGSYNC_LOG_LEVEL"
AUDIT_LOGGER_NAME: Final[str] = "catalogsync.audit"
LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, level: int | str | None = None, force: bool = False) -> None:
    """Configure the root logger for terse CLI output.

    ``level`` falls back to ``CATALOGSYNC_LOG_LEVEL`` and then INFO. Audit records of override
    changes are emitted at INFO even when the root level is raised above it.
    """

    resolved = level if level is not None else os.getenv(LOG_LEVEL_ENV_VAR, "").strip().upper()
    logging.basicConfig(
        level=resolved or logging.INFO,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        force=force,
    )
    logging.getLogger(AUDIT_LOGGER_NAME).setLevel(logging.INFO)
