"""Domain exceptions for audit_reporter."""

from __future__ import annotations


class AuditReporterError(Exception):
    """Base class for every fatal condition of a reporting run."""


class ConfigurationError(AuditReporterError):
    """Raised when environment-derived configuration is missing or invalid.

    Always raised before any subprocess or network work is attempted.
    """


class SubprocessError(AuditReporterError):
    """Raised when the scan tool fails or its output cannot be used.

    Covers a non-empty error stream, a missing executable, an output larger
    than the configured buffer ceiling and output that is not a JSON object.
    """


class DataShapeError(SubprocessError):
    """Raised when the scan output parsed but a required field is missing or malformed."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        if message is None:
            message = f"Missing or malformed field in audit output: {field}"
        super().__init__(message)


class PublishError(AuditReporterError):
    """Raised when the report consumer rejects a publish call.

    Already-sent publishes are not rolled back.
    """

    def __init__(self, url: str, status_code: int | None, body: str = "") -> None:
        self.url = url
        self.status_code = status_code
        self.body = body
        status = status_code if status_code is not None else "no response"
        message = f"Could not push to Bitbucket ({status}): {url}"
        if body:
            message = f"{message}\n{body}"
        super().__init__(message)
