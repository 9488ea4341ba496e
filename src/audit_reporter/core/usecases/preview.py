from __future__ import annotations

from ..domain.models import RunResult
from ..services import ReportOrchestrator


class PreviewReportUseCase:
    """Use case for showing the report and annotations without publishing them."""

    def __init__(self, *, orchestrator: ReportOrchestrator) -> None:
        self._orchestrator = orchestrator

    def execute(self, *, started_at: float, limit: int | None = None) -> RunResult:
        return self._orchestrator.preview(started_at=started_at, limit=limit)
