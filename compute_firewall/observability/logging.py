"""Logging configuration for compute-firewall.

Library logging is silent by default (a NullHandler sits on the package
root). Applications opt in with ``setup_logging``:

Example:
    from compute_firewall import LogConfig, setup_logging

    handler_ids = setup_logging(LogConfig(level="DEBUG", console=True))
    ...
    teardown_logging(handler_ids)
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, TypeAlias

from compute_firewall.observability.logger import ROOT_LOGGER_NAME, logger

LogLevel: TypeAlias = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR"]


@dataclass(frozen=True, slots=True)
class LogConfig:
    """Logging configuration.

    Attributes:
        level: Minimum log level for the console sink.
        file: Path to a log file. ``None`` disables file output.
        console: Whether to log to stderr through rich.
        rotation: File rotation threshold (e.g. "50 MB").
        retention: Number of rotated files to keep.
    """

    level: LogLevel = "INFO"
    file: str | None = None
    console: bool = True
    rotation: str = "50 MB"
    retention: int = 10


def setup_logging(config: LogConfig) -> list[int]:
    """Attach the configured sinks and return their handler IDs."""
    logger.enable(ROOT_LOGGER_NAME)
    handler_ids: list[int] = []

    if config.console:
        handler_ids.append(logger.add(sys.stderr, level=config.level))

    if config.file:
        Path(config.file).parent.mkdir(parents=True, exist_ok=True)
        handler_ids.append(logger.add(
            config.file,
            level="DEBUG",
            rotation=config.rotation,
            retention=config.retention,
            compression=True,
        ))

    return handler_ids


def teardown_logging(handler_ids: list[int]) -> None:
    for hid in handler_ids:
        logger.remove(hid)
