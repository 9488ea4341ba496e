from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from typing import cast

from ..domain.audit import (
    AdvisoryAudit,
    Advisory,
    AuditReport,
    VulnerabilityAudit,
    VulnerabilityNode,
    ViaDetail,
)
from ..domain.exceptions import DataShapeError
from ..domain.models import UNDETERMINED_RANGE, Effect, Finding, ScanSummary, path_safe
from ..domain.severity import SEVERITY_SCALE, Severity


class FindingSequence:
    """Lazy, restartable view over the findings of one audit.

    Each iteration walks the parsed audit again, so the sequence can be
    consumed more than once without materializing it.
    """

    def __init__(self, produce: Callable[[], Iterator[Finding]]) -> None:
        self._produce = produce

    def __iter__(self) -> Iterator[Finding]:
        return self._produce()

    def count(self) -> int:
        return sum(1 for _ in self)


class ScanNormalizer:
    """Domain service turning either npm audit layout into canonical findings."""

    def __init__(self, *, scale: Sequence[Severity] = SEVERITY_SCALE) -> None:
        self._scale = tuple(scale)

    def findings(self, audit: AuditReport) -> FindingSequence:
        if isinstance(audit, AdvisoryAudit):
            return FindingSequence(lambda: self._advisory_findings(audit))
        if isinstance(audit, VulnerabilityAudit):
            return FindingSequence(lambda: self._vulnerability_findings(audit))
        return FindingSequence(lambda: iter(()))

    def highest_severity_index(self, audit: AuditReport) -> int:
        """Highest scale index with a non-zero count in the audit metadata, or -1."""
        counts = audit.metadata.vulnerabilities
        highest = -1
        for index, level in enumerate(self._scale):
            if counts.get(level.value):
                highest = index
        return highest

    def dependency_count(self, audit: AuditReport) -> int:
        """Total dependencies audited.

        Raises:
            DataShapeError: If neither ``dependencies.total`` nor ``totalDependencies`` is present
        """
        total = audit.metadata.dependency_total
        if total is None:
            raise DataShapeError(
                "metadata.dependencies.total",
                "Audit metadata has neither dependencies.total nor totalDependencies",
            )
        return total

    def summarize(self, audit: AuditReport, duration_seconds: int) -> ScanSummary:
        return ScanSummary(
            highest_severity_index=self.highest_severity_index(audit),
            dependency_count=self.dependency_count(audit),
            duration_seconds=duration_seconds,
        )

    # advisories layout

    def _advisory_findings(self, audit: AdvisoryAudit) -> Iterator[Finding]:
        for advisory in audit.advisories:
            yield self._from_advisory(advisory)

    def _from_advisory(self, advisory: Advisory) -> Finding:
        affected = advisory.vulnerable_versions or UNDETERMINED_RANGE
        parts = [p for p in (advisory.overview, advisory.recommendation) if p]
        parts.append(f"Vulnerable versions: {affected}")
        return Finding(
            key=path_safe(advisory.id),
            subject=advisory.module_name,
            title=advisory.title,
            details="\n\n".join(parts),
            link=advisory.url,
            severity=advisory.severity,
            affected_range=affected,
        )

    # vulnerabilities layout

    def _vulnerability_findings(self, audit: VulnerabilityAudit) -> Iterator[Finding]:
        for node in audit.nodes.values():
            if node.is_derived:
                continue
            effects = self._resolve_effects(node, audit)
            for position, entry in enumerate(node.via):
                if isinstance(entry, str) or not entry.is_informative:
                    continue
                yield self._from_via(node, entry, position, effects)

    def _resolve_effects(self, node: VulnerabilityNode, audit: VulnerabilityAudit) -> tuple[Effect, ...]:
        effects: list[Effect] = []
        for name in node.effects:
            target = audit.nodes.get(name)
            effects.append(Effect(name=name, range=(target.range if target and target.range else UNDETERMINED_RANGE)))
        return tuple(effects)

    def _from_via(
        self,
        node: VulnerabilityNode,
        via: ViaDetail,
        position: int,
        effects: tuple[Effect, ...],
    ) -> Finding:
        affected = via.range or UNDETERMINED_RANGE
        fix_available = via.fix_available if via.fix_available is not None else node.fix_available

        lines = [f"Vulnerable versions: {affected}"]
        if fix_available is None:
            lines.append("Fix available: Unknown")
        else:
            lines.append(f"Fix available: {'Yes' if fix_available else 'No'}")
        if effects:
            lines.append("Effects:")
            lines.extend(f"- {e.name} ({e.range})" for e in effects)

        identifier = via.source if via.source is not None else str(position)
        return Finding(
            key=path_safe(f"{node.name}-{identifier}"),
            subject=via.name,
            title=via.title,
            details="\n".join(lines),
            link=via.url,
            severity=cast(Severity, via.severity),
            affected_range=affected,
            effects=effects,
        )
