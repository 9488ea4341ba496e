from __future__ import annotations

from ..domain.models import ReportDataPoint, ReportPayload, ScanSummary
from ..domain.severity import ReportOutcome


DEFAULT_TITLE = "Security: npm audit"
REPORT_DETAILS = "Results of npm audit."


class ReportAssembler:
    """Domain service building the summary report payload."""

    def __init__(self, *, reporter: str | None, title: str = DEFAULT_TITLE) -> None:
        self._reporter = reporter or ""
        self._title = title

    def build(self, *, outcome: ReportOutcome, summary: ScanSummary) -> ReportPayload:
        return ReportPayload(
            title=self._title,
            details=REPORT_DETAILS,
            reporter=self._reporter,
            result=outcome,
            data=(
                ReportDataPoint(title="Duration (seconds)", type="DURATION", value=summary.duration_seconds),
                ReportDataPoint(title="Dependencies", type="NUMBER", value=summary.dependency_count),
                ReportDataPoint(title="Safe to merge?", type="BOOLEAN", value=outcome is ReportOutcome.PASSED),
            ),
        )
