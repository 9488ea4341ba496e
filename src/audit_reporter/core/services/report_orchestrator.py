from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from ..domain.audit import parse_audit
from ..domain.exceptions import PublishError
from ..domain.models import PublishResult, ReportPayload, RunResult, ScanSummary
from ..domain.severity import ReportOutcome
from ..ports import LoggerPort, ReportPublisherPort, ScannerPort
from .annotation_emitter import AnnotationEmitter
from .normalizer import FindingSequence, ScanNormalizer
from .report_assembler import ReportAssembler
from .severity_policy import SeverityPolicy


@dataclass
class PreparedReport:
    """Everything computed from one audit, before anything is published."""
    report: ReportPayload
    summary: ScanSummary
    outcome: ReportOutcome
    findings: FindingSequence


class ReportOrchestrator:
    """Orchestrates the complete reporting workflow.

    The scan runs to completion first. The summary report is then published,
    followed by one annotation at a time; the first rejected call stops the
    sequence with ``PublishError``.
    """

    def __init__(
        self,
        *,
        scanner: ScannerPort,
        publisher: ReportPublisherPort,
        normalizer: ScanNormalizer,
        policy: SeverityPolicy,
        assembler: ReportAssembler,
        emitter: AnnotationEmitter,
        logger: LoggerPort,
        report_id: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._scanner = scanner
        self._publisher = publisher
        self._normalizer = normalizer
        self._policy = policy
        self._assembler = assembler
        self._emitter = emitter
        self._logger = logger
        self._report_id = report_id
        self._clock = clock

    def prepare(self, *, started_at: float) -> PreparedReport:
        """Run the audit and build the summary report.

        Args:
            started_at: Invocation start, in ``clock`` seconds

        Returns:
            Prepared report with a lazy view over the findings
        """
        # 1) Scan
        raw = self._scanner.run()
        audit = parse_audit(raw)
        self._logger.info(
            "audit_completed",
            layout=type(audit).__name__,
            severity_counts=dict(audit.metadata.vulnerabilities),
        )

        # 2) Summarize and decide
        duration = round(self._clock() - started_at)
        summary = self._normalizer.summarize(audit, duration)
        outcome = self._policy.decide(summary.highest_severity_index)

        # 3) Assemble
        report = self._assembler.build(outcome=outcome, summary=summary)
        self._logger.info(
            "report_prepared",
            report_id=self._report_id,
            outcome=outcome.value,
            highest_severity_index=summary.highest_severity_index,
            threshold_index=self._policy.threshold_index,
            dependency_count=summary.dependency_count,
            duration_seconds=summary.duration_seconds,
        )

        return PreparedReport(
            report=report,
            summary=summary,
            outcome=outcome,
            findings=self._normalizer.findings(audit),
        )

    def publish(self, *, started_at: float) -> RunResult:
        """Run the audit and publish the report followed by its annotations."""
        prepared = self.prepare(started_at=started_at)

        self._check(self._publisher.put_report(self._report_id, prepared.report.to_payload()))
        self._logger.info("report_published", report_id=self._report_id, outcome=prepared.outcome.value)

        for annotation in self._emitter.emit(prepared.findings):
            self._check(
                self._publisher.put_annotation(self._report_id, annotation.external_id, annotation.to_payload())
            )
            self._logger.debug("annotation_published", annotation_id=annotation.external_id)

        stats = self._emitter.stats
        if stats.skipped:
            self._logger.warning("annotations_capped", published=stats.emitted, skipped=stats.skipped)

        return RunResult(
            summary=prepared.summary,
            outcome=prepared.outcome,
            findings_total=stats.emitted + stats.filtered + stats.skipped,
            annotations_published=stats.emitted,
            annotations_skipped=stats.skipped,
            published=True,
            report=prepared.report,
        )

    def preview(self, *, started_at: float, limit: int | None = None) -> RunResult:
        """Run the audit and collect what would be published, without publishing."""
        prepared = self.prepare(started_at=started_at)

        annotations = []
        for annotation in self._emitter.emit(prepared.findings):
            if limit is None or len(annotations) < limit:
                annotations.append(annotation)

        stats = self._emitter.stats
        return RunResult(
            summary=prepared.summary,
            outcome=prepared.outcome,
            findings_total=stats.emitted + stats.filtered + stats.skipped,
            annotations_published=0,
            annotations_skipped=stats.skipped,
            published=False,
            report=prepared.report,
            annotations=annotations,
        )

    def _check(self, result: PublishResult) -> None:
        if result.ok:
            return
        self._logger.error("publish_failed", url=result.url, status_code=result.status_code)
        raise PublishError(result.url, result.status_code, result.body)
