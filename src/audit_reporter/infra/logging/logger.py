from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from dependency_injector.resources import Resource

from .handlers import build_handlers


class RunLogger(Resource):
    """Structured logger for one reporting run.

    Events are logged as short snake_case messages with keyword fields
    attached through ``extra``. Handlers are owned by the resource and
    closed on container shutdown.
    """

    def init(
        self,
        *,
        log_file: Optional[Path] = None,
        logger_name: str = "audit_reporter",
        console_output: bool = True,
        level: str = "INFO",
    ) -> "RunLogger":
        """Initialize the logger.

        Args:
            log_file: JSONL file to append to (no file handler when None)
            logger_name: Logger name
            console_output: Whether to log to stderr
            level: Logging level (DEBUG, INFO, WARNING, ERROR)

        Returns:
            Self for dependency_injector Resource pattern
        """
        numeric_level = getattr(logging, level.upper())

        self._logger = logging.getLogger(logger_name)
        self._logger.setLevel(numeric_level)
        self._logger.propagate = False

        self._logger.handlers.clear()
        self._handlers = build_handlers(log_file=log_file, console_output=console_output, level=numeric_level)
        for handler in self._handlers:
            self._logger.addHandler(handler)

        return self

    def shutdown(self, resource: "RunLogger") -> None:
        """Flush and close every handler added by ``init``."""
        for handler in self._handlers:
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)
        self._handlers = []

    def debug(self, message: str, **kwargs) -> None:
        self._logger.debug(message, extra=kwargs or None)

    def info(self, message: str, **kwargs) -> None:
        self._logger.info(message, extra=kwargs or None)

    def warning(self, message: str, **kwargs) -> None:
        self._logger.warning(message, extra=kwargs or None)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        self._logger.error(message, extra=kwargs or None, exc_info=exc_info)

    def exception(self, message: str, **kwargs) -> None:
        self._logger.exception(message, extra=kwargs or None)
