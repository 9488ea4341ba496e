from __future__ import annotations

from .severity_policy import SeverityPolicy
from .normalizer import ScanNormalizer, FindingSequence
from .annotation_emitter import AnnotationEmitter, truncate_details
from .report_assembler import ReportAssembler
from .report_orchestrator import ReportOrchestrator, PreparedReport

__all__ = [
    "SeverityPolicy",
    "ScanNormalizer",
    "FindingSequence",
    "AnnotationEmitter",
    "truncate_details",
    "ReportAssembler",
    "ReportOrchestrator",
    "PreparedReport",
]
