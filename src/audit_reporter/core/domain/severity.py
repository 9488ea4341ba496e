from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """npm audit severity levels, declared from least to most severe."""

    INFO = "info"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class DisplaySeverity(str, Enum):
    """Annotation severity accepted by the Bitbucket reports API."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ReportOutcome(str, Enum):
    PASSED = "PASSED"
    FAILED = "FAILED"


SEVERITY_SCALE: tuple[Severity, ...] = tuple(Severity)

DEFAULT_DISPLAY_SEVERITY: dict[str, str] = {
    Severity.INFO.value: DisplaySeverity.LOW.value,
    Severity.LOW.value: DisplaySeverity.LOW.value,
    Severity.MODERATE.value: DisplaySeverity.MEDIUM.value,
    Severity.HIGH.value: DisplaySeverity.HIGH.value,
    Severity.CRITICAL.value: DisplaySeverity.CRITICAL.value,
}
