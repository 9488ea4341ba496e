"""CLI output formatting utilities for human-readable display."""

from __future__ import annotations

from ..core.domain.models import RunResult
from ..core.domain.severity import SEVERITY_SCALE


def _highest_label(index: int) -> str:
    if 0 <= index < len(SEVERITY_SCALE):
        return SEVERITY_SCALE[index].value
    return "none"


def run_result_to_dict(result: RunResult) -> dict[str, object]:
    """Convert a run result to a JSON-serializable dict."""
    return {
        "outcome": result.outcome.value,
        "published": result.published,
        "highest_severity": _highest_label(result.summary.highest_severity_index),
        "dependency_count": result.summary.dependency_count,
        "duration_seconds": result.summary.duration_seconds,
        "findings_total": result.findings_total,
        "annotations_published": result.annotations_published,
        "annotations_skipped": result.annotations_skipped,
        "report": result.report.to_payload() if result.report else None,
        "annotations": [a.to_payload() for a in result.annotations],
    }


def format_run_result(result: RunResult) -> str:
    """Format a run result for human-readable CLI output.

    Args:
        result: Run result from the publish or preview use case

    Returns:
        Formatted string for display
    """
    lines = []
    lines.append("=" * 80)
    lines.append("NPM AUDIT REPORT" if result.published else "NPM AUDIT REPORT (preview, not published)")
    lines.append("=" * 80)

    if result.report:
        lines.append(f"\nTitle: {result.report.title}")
    lines.append(f"Result: {result.outcome.value}")
    lines.append(f"Highest severity: {_highest_label(result.summary.highest_severity_index)}")
    lines.append(f"Dependencies: {result.summary.dependency_count}")
    lines.append(f"Duration: {result.summary.duration_seconds}s")

    lines.append("\n" + "-" * 80)
    lines.append("FINDINGS")
    lines.append("-" * 80)
    lines.append(f"\nTotal: {result.findings_total}")
    if result.published:
        lines.append(f"Annotations published: {result.annotations_published}")
    if result.annotations_skipped:
        lines.append(f"Annotations skipped (limit reached): {result.annotations_skipped}")

    if result.annotations:
        lines.append("")
        lines.append(f"{'Severity':<10} {'Summary':<60} Id")
        for a in result.annotations:
            summary = a.summary if len(a.summary) <= 60 else a.summary[:57] + "..."
            lines.append(f"{a.severity.value:<10} {summary:<60} {a.external_id}")

    lines.append("\n" + "=" * 80)

    return "\n".join(lines)
