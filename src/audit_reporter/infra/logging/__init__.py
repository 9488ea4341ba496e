from __future__ import annotations

from .logger import RunLogger
from .handlers import build_handlers
from .formatters import JSONFormatter, ConsoleFormatter

__all__ = [
    "RunLogger",
    "build_handlers",
    "JSONFormatter",
    "ConsoleFormatter",
]
