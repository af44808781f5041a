"""
Logging setup for the tag engine.

Every module logs under the `liquid_tags` namespace: the registry records
each registration and freeze, the tree builder each compiled tag occurrence,
and the renderer each failing render step. Nothing is configured on import;
applications that want those records call `configure_logging()`.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

LOGGER_NAME = "liquid_tags"


@dataclass
class LogConfig:
    # Every record the package emits is DEBUG, so the console stays quiet by default.
    log_file: Path | str | None = None
    log_level: int = logging.DEBUG
    console_level: int = logging.WARNING
    file_level: int = logging.DEBUG
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(config: LogConfig | None = None) -> logging.Logger:
    """Install fresh handlers on the `liquid_tags` logger and return it."""
    config = config or LogConfig()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(config.log_level)
    logger.handlers.clear()

    formatter = logging.Formatter(config.format)
    handlers: list[logging.Handler] = []
    if config.log_file is not None:
        trace = logging.FileHandler(config.log_file)
        trace.setLevel(config.file_level)
        handlers.append(trace)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(config.console_level)
    handlers.append(console)

    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
