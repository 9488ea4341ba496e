from __future__ import annotations

import logging
import sys
from logging import Handler
from pathlib import Path
from typing import Optional

from .formatters import JSONFormatter, ConsoleFormatter


def build_handlers(*, log_file: Optional[Path], console_output: bool, level: int) -> list[Handler]:
    """Handlers for one reporting run.

    The JSON-lines file (appended to, one object per event) is only added
    when ``log_file`` is given; the console handler writes to stderr so
    stdout stays reserved for the CLI result.
    """
    handlers: list[Handler] = []

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8", mode="a")
        file_handler.setFormatter(JSONFormatter())
        handlers.append(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(ConsoleFormatter())
        handlers.append(console_handler)

    for handler in handlers:
        handler.setLevel(level)
    return handlers
