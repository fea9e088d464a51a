"""Logging configuration for the command line."""

from __future__ import annotations

import logging
import os
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV_VAR = "OSCAR_ICS_LOG_LEVEL"
LOG_HANDLER_NAME = "oscar-ics-console"


def resolve_log_level(value: Optional[Union[str, int]] = None, default: int = logging.WARNING) -> int:
    """
    Resolve a level name or number, falling back to the environment and then to `default`.
    """
    if value is None:
        value = os.getenv(LOG_LEVEL_ENV_VAR)
    if value is None:
        return default
    if isinstance(value, int):
        return value

    value = value.strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        resolved = getattr(logging, value.upper(), None)
        return resolved if isinstance(resolved, int) else default


def configure_logging(level: Optional[Union[str, int]] = None) -> int:
    """
    Attach a single rich console handler (stderr) to the root logger.

    Calling this again only updates the level.
    """
    numeric_level = resolve_log_level(level)
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers:
        if handler.get_name() == LOG_HANDLER_NAME:
            handler.setLevel(numeric_level)
            return numeric_level

    handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
    handler.set_name(LOG_HANDLER_NAME)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root_logger.addHandler(handler)
    return numeric_level
