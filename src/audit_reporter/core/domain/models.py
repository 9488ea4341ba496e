from __future__ import annotations

from dataclasses import dataclass, field

from .severity import DisplaySeverity, ReportOutcome, Severity


UNDETERMINED_RANGE = "Undetermined Range"


def path_safe(identifier: str) -> str:
    """Make an identifier usable as a single URL path segment."""
    return identifier.replace("/", "-")


@dataclass(frozen=True)
class Effect:
    """A package pulled into a finding through its dependency chain."""
    name: str
    range: str = UNDETERMINED_RANGE


@dataclass(frozen=True)
class Finding:
    """Canonical vulnerability record, independent of the audit layout it came from."""
    key: str
    subject: str
    title: str
    details: str
    link: str
    severity: Severity
    affected_range: str = UNDETERMINED_RANGE
    effects: tuple[Effect, ...] = ()

    @property
    def summary(self) -> str:
        return f"{self.subject}: {self.title}"


@dataclass(frozen=True)
class ScanSummary:
    highest_severity_index: int
    dependency_count: int
    duration_seconds: int


@dataclass(frozen=True)
class Annotation:
    external_id: str
    summary: str
    details: str
    link: str
    severity: DisplaySeverity
    annotation_type: str = "VULNERABILITY"

    def to_payload(self) -> dict[str, object]:
        return {
            "external_id": self.external_id,
            "annotation_type": self.annotation_type,
            "summary": self.summary,
            "details": self.details,
            "link": self.link,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class ReportDataPoint:
    title: str
    type: str
    value: object


@dataclass(frozen=True)
class ReportPayload:
    title: str
    details: str
    reporter: str
    result: ReportOutcome
    data: tuple[ReportDataPoint, ...] = ()
    report_type: str = "SECURITY"

    def to_payload(self) -> dict[str, object]:
        return {
            "title": self.title,
            "details": self.details,
            "report_type": self.report_type,
            "reporter": self.reporter,
            "result": self.result.value,
            "data": [{"title": d.title, "type": d.type, "value": d.value} for d in self.data],
        }


@dataclass(frozen=True)
class PublishResult:
    """Outcome of a single PUT against the reports API.

    ``status_code`` is None when no HTTP response was received.
    """
    url: str
    status_code: int | None
    body: str = ""

    @property
    def ok(self) -> bool:
        return self.status_code == 200


@dataclass
class RunResult:
    summary: ScanSummary
    outcome: ReportOutcome
    findings_total: int = 0
    annotations_published: int = 0
    annotations_skipped: int = 0
    published: bool = False
    report: ReportPayload | None = None
    annotations: list[Annotation] = field(default_factory=list)
