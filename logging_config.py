"""Centralised logging configuration utilities."""
from __future__ import annotations

import logging
from typing import Union


LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_LEVEL = logging.WARNING


def configure_logging(level: Union[int, str] = DEFAULT_LEVEL) -> None:
    """Configure root logging once; later calls only adjust the level."""

    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = DEFAULT_LEVEL

    root_logger = logging.getLogger()
    if root_logger.handlers:
        root_logger.setLevel(level)
        return

    logging.basicConfig(level=level, format=LOG_FORMAT)
