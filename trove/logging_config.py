"""Logging configuration — called once by the CLI at process start.

Every module logs through ``logging.getLogger(__name__)``. Levels resolve
in precedence order:

    --debug  >  --verbose  >  TROVE_LOG_LEVEL env var  >  WARNING
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_FMT = "%(message)s"
_DATEFMT = "%H:%M:%S"


def setup_logging(level: str = "WARNING", console: Console | None = None) -> None:
    """Route all log records through a rich handler on stderr."""
    numeric_level = _parse_level(level)

    handler = RichHandler(
        console=console or Console(stderr=True),
        level=numeric_level,
        show_time=numeric_level <= logging.DEBUG,
        show_path=numeric_level <= logging.DEBUG,
        markup=False,
    )
    handler.setFormatter(logging.Formatter(_FMT, datefmt=_DATEFMT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)


def _parse_level(level: str | None) -> int:
    """Convert a level name to its numeric constant; unknown names mean WARNING."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
