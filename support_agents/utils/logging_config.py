"""Logging setup for the CLI and host integrations.

Library modules only create module-level loggers; handlers are attached
here, once, by whatever process embeds the add-on.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    name: str = "support_agents",
    level: str | None = None,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure root logging with the add-on's format.

    Args:
        name: Logger to return once configured
        level: Log level (defaults to the LOG_LEVEL env var, then INFO)
        log_file: Optional file to mirror output into

    Returns:
        The named logger
    """
    level = level or os.getenv("LOG_LEVEL", "INFO")

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    return logging.getLogger(name)


def setup_logging_from_settings(settings: Settings, component: str) -> logging.Logger:
    """Configure logging using the level and log directory from settings.

    Args:
        settings: Loaded add-on settings
        component: Component name used for the daily log file

    Returns:
        The "support_agents" logger
    """
    return setup_logging(
        level=settings.log_level,
        log_file=settings.get_log_file(component),
    )
