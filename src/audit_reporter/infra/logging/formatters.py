from __future__ import annotations

import logging
from datetime import datetime, timezone

from pythonjsonlogger.json import JsonFormatter


class JSONFormatter(JsonFormatter):
    """JSON-lines formatter for run logs.

    Structured fields passed through ``extra`` are emitted as top-level keys
    by python-json-logger; this adds a fixed envelope around them.
    """

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record['time'] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="seconds")
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['message'] = record.getMessage()


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for pipeline console output.

    Appends structured fields as ``key=value`` pairs after the event name.
    """

    _RESERVED = frozenset(vars(logging.makeLogRecord({})).keys()) | {"message", "asctime"}

    def __init__(self) -> None:
        super().__init__(
            fmt='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        fields = {k: v for k, v in vars(record).items() if k not in self._RESERVED}
        if fields:
            text = f"{text} " + " ".join(f"{k}={v}" for k, v in fields.items())
        return text
