from __future__ import annotations

from typing import Any, Protocol

from .domain.models import PublishResult


class ScannerPort(Protocol):
    """Port for the dependency scan producer.

    Wraps the external ``npm audit`` process and hands back its decoded
    JSON document untouched; interpretation belongs to the normalizer.
    """

    def run(self) -> Any:
        """Run the scan to completion and return the decoded JSON document.

        Raises:
            SubprocessError: If the scan fails or produces unusable output
        """
        ...


class ReportPublisherPort(Protocol):
    """Port for the report consumer (Bitbucket Code Insights)."""

    def put_report(self, report_id: str, payload: dict[str, object]) -> PublishResult:
        """Create or replace the summary report for the current commit."""
        ...

    def put_annotation(self, report_id: str, annotation_id: str, payload: dict[str, object]) -> PublishResult:
        """Create or replace one annotation of a report."""
        ...


class LoggerPort(Protocol):
    """Port for structured logging.

    Extra keyword arguments are attached to the record as structured fields.
    """

    def debug(self, message: str, **kwargs: Any) -> None:
        ...

    def info(self, message: str, **kwargs: Any) -> None:
        ...

    def warning(self, message: str, **kwargs: Any) -> None:
        ...

    def error(self, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        ...

    def exception(self, message: str, **kwargs: Any) -> None:
        ...
