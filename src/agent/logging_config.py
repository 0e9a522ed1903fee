# src/agent/logging_config.py
"""
Logging setup for planner entrypoints.

The CLI calls configure_logging() once; library modules only create
`logging.getLogger(__name__)` loggers and never attach handlers.
"""

from __future__ import annotations

import logging
import sys
from typing import Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO) -> None:
    """
    Attach one stdout handler to the root logger unless one exists.

    `level` may be a logging constant or a name such as "debug".
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
        return

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)
