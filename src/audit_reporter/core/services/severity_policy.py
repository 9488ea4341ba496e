from __future__ import annotations

from collections.abc import Mapping, Sequence

from ..domain.exceptions import ConfigurationError
from ..domain.severity import (
    DEFAULT_DISPLAY_SEVERITY,
    SEVERITY_SCALE,
    DisplaySeverity,
    ReportOutcome,
    Severity,
)


class SeverityPolicy:
    """Domain service deciding pass/fail and annotation eligibility.

    The pass/fail scale (``info`` .. ``critical``) and the annotation display
    scale (``LOW`` .. ``CRITICAL``) are separate: the display mapping is a
    fixed lookup table, not derived from scale positions.
    """

    def __init__(
        self,
        *,
        threshold: str | Severity = Severity.HIGH,
        min_annotation: str | Severity | None = None,
        display_map: Mapping[str, str] | None = None,
        scale: Sequence[Severity] = SEVERITY_SCALE,
    ) -> None:
        self._scale = tuple(scale)
        self._threshold_index = self.index_of(threshold)
        self._min_annotation_index = None if min_annotation is None else self.index_of(min_annotation)
        self._display_map = self._build_display_map(display_map or DEFAULT_DISPLAY_SEVERITY)

    @property
    def scale(self) -> tuple[Severity, ...]:
        return self._scale

    @property
    def threshold_index(self) -> int:
        return self._threshold_index

    def index_of(self, severity: str | Severity) -> int:
        """Return the position of a severity on the scale.

        Raises:
            ConfigurationError: If the severity is not part of the scale
        """
        for index, level in enumerate(self._scale):
            if severity == level or str(severity).lower() == level.value:
                return index
        raise ConfigurationError(f"Unsupported audit level: {severity}")

    def decide(self, highest_index: int, threshold_index: int | None = None) -> ReportOutcome:
        """PASSED only when the worst level found is strictly below the threshold."""
        if threshold_index is None:
            threshold_index = self._threshold_index
        return ReportOutcome.PASSED if highest_index < threshold_index else ReportOutcome.FAILED

    def should_annotate(self, severity: str | Severity, minimum: str | Severity | None = None) -> bool:
        if minimum is not None:
            return self.index_of(severity) >= self.index_of(minimum)
        if self._min_annotation_index is None:
            return True
        return self.index_of(severity) >= self._min_annotation_index

    def display_severity(self, severity: str | Severity) -> DisplaySeverity:
        return self._display_map[self._scale[self.index_of(severity)]]

    def _build_display_map(self, table: Mapping[str, str]) -> dict[Severity, DisplaySeverity]:
        mapping: dict[Severity, DisplaySeverity] = {}
        for level, display in table.items():
            try:
                mapping[self._scale[self.index_of(level)]] = DisplaySeverity(str(display).upper())
            except ValueError:
                raise ConfigurationError(f"Unsupported display severity: {display}") from None

        missing = [level.value for level in self._scale if level not in mapping]
        if missing:
            raise ConfigurationError(f"Display severity table has no entry for: {', '.join(missing)}")
        return mapping
