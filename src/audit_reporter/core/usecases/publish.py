from __future__ import annotations

from ..domain.models import RunResult
from ..services import ReportOrchestrator


class PublishReportUseCase:
    """Use case for scanning and publishing the Code Insights report.

    Thin orchestration layer that delegates to ReportOrchestrator.
    """

    def __init__(self, *, orchestrator: ReportOrchestrator) -> None:
        self._orchestrator = orchestrator

    def execute(self, *, started_at: float) -> RunResult:
        """Execute the reporting workflow.

        Args:
            started_at: Invocation start time (epoch seconds)

        Returns:
            Run result with outcome and publish counts
        """
        return self._orchestrator.publish(started_at=started_at)
