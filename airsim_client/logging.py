"""Logging setup for applications embedding the client.

The library itself only creates loggers. ``airsim_client.wire`` carries one
record per frame sent or received and stays at INFO unless wire logging is
requested, so DEBUG on the root does not flood the console with traffic.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .config import LoggingConfig

WIRE_LOGGER_NAME = "airsim_client.wire"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _resolve_level(level: str) -> int:
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
    level: str = "INFO", *, log_path: Optional[Path] = None, log_wire: bool = False
) -> None:
    """Replace the root handlers with a console handler and an optional file.

    Parameters
    ----------
    level:
        Level name for the root logger; unknown names fall back to INFO.
    log_path:
        File that receives the same records as the console. Parent
        directories are created.
    log_wire:
        Emit per-frame DEBUG records (method, request id, frame size).
    """

    logging.captureWarnings(True)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_path:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(_resolve_level(level))

    logging.getLogger(WIRE_LOGGER_NAME).setLevel(logging.DEBUG if log_wire else logging.INFO)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def apply_logging_config(config: LoggingConfig) -> None:
    """Configure logging from the ``[logging]`` section of a loaded config."""

    configure_logging(config.level, log_path=config.path, log_wire=config.log_wire)
