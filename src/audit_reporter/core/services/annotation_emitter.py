from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from ..domain.models import Annotation, Finding, path_safe
from .severity_policy import SeverityPolicy


MAX_ANNOTATIONS = 1000
MAX_DETAILS_CHARS = 2000
TRUNCATION_MARKER = "[...]"


def truncate_details(text: str, limit: int = MAX_DETAILS_CHARS, marker: str = TRUNCATION_MARKER) -> str:
    """Cut text so that, marker included, it is exactly ``limit`` characters long."""
    if len(text) <= limit:
        return text
    return text[: limit - len(marker)] + marker


@dataclass
class EmissionStats:
    emitted: int = 0
    filtered: int = 0
    skipped: int = 0


class AnnotationEmitter:
    """Domain service turning findings into report annotations.

    Applies the minimum annotation severity, the per-annotation details
    limit and the per-report annotation cap of the Bitbucket reports API.
    Findings beyond the cap are counted in ``stats.skipped`` and otherwise
    ignored.
    """

    def __init__(
        self,
        *,
        policy: SeverityPolicy,
        report_id: str,
        max_annotations: int = MAX_ANNOTATIONS,
    ) -> None:
        self._policy = policy
        self._report_id = report_id
        self._max_annotations = max_annotations
        self.stats = EmissionStats()

    def annotation_id(self, finding: Finding) -> str:
        return path_safe(f"{self._report_id}-{finding.key}")

    def build(self, finding: Finding) -> Annotation:
        return Annotation(
            external_id=self.annotation_id(finding),
            summary=finding.summary,
            details=truncate_details(finding.details),
            link=finding.link,
            severity=self._policy.display_severity(finding.severity),
        )

    def emit(self, findings: Iterable[Finding]) -> Iterator[Annotation]:
        """Yield one annotation per eligible finding, up to the cap."""
        self.stats = EmissionStats()
        for finding in findings:
            if not self._policy.should_annotate(finding.severity):
                self.stats.filtered += 1
                continue
            if self.stats.emitted >= self._max_annotations:
                self.stats.skipped += 1
                continue
            self.stats.emitted += 1
            yield self.build(finding)
