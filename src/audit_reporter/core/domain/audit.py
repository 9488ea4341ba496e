"""Raw ``npm audit --json`` payloads parsed into tagged variants.

npm has shipped two incompatible report layouts:

- the legacy layout (npm <= 6) keyed by ``advisories`` (advisory id -> advisory)
- the current layout (npm >= 7) keyed by ``vulnerabilities``
  (package name -> node with a ``via`` chain)

``parse_audit`` inspects the payload once and returns one of
``AdvisoryAudit``, ``VulnerabilityAudit`` or ``EmptyAudit``; everything
downstream dispatches on the variant type instead of sniffing keys.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from .exceptions import DataShapeError, SubprocessError
from .severity import Severity


NON_INFORMATIVE_NAMES = frozenset({"", "undefined"})


@dataclass(frozen=True)
class AuditMetadata:
    vulnerabilities: dict[str, int] = field(default_factory=dict)
    dependency_total: int | None = None


@dataclass(frozen=True)
class Advisory:
    id: str
    module_name: str
    title: str
    overview: str
    recommendation: str
    url: str
    severity: Severity
    vulnerable_versions: str | None = None


@dataclass(frozen=True)
class ViaDetail:
    """A root-cause entry of a ``via`` chain.

    ``severity`` is None only for entries whose name is non-informative;
    those are never turned into findings.
    """
    name: str
    title: str
    url: str
    severity: Severity | None
    range: str | None = None
    source: str | None = None
    fix_available: bool | None = None

    @property
    def is_informative(self) -> bool:
        return self.name not in NON_INFORMATIVE_NAMES


@dataclass(frozen=True)
class VulnerabilityNode:
    name: str
    via: tuple[str | ViaDetail, ...]
    effects: tuple[str, ...] = ()
    range: str | None = None
    fix_available: bool | None = None

    @property
    def is_derived(self) -> bool:
        """True when every ``via`` entry only points back at another node."""
        return bool(self.via) and all(isinstance(v, str) for v in self.via)


@dataclass(frozen=True)
class AdvisoryAudit:
    advisories: tuple[Advisory, ...]
    metadata: AuditMetadata


@dataclass(frozen=True)
class VulnerabilityAudit:
    nodes: dict[str, VulnerabilityNode]
    metadata: AuditMetadata


@dataclass(frozen=True)
class EmptyAudit:
    metadata: AuditMetadata


AuditReport = Union[AdvisoryAudit, VulnerabilityAudit, EmptyAudit]


def parse_severity(value: Any, field_name: str = "severity") -> Severity:
    """Convert a raw severity string to ``Severity``.

    Raises:
        DataShapeError: If the value is not a known severity level
    """
    try:
        return Severity(str(value).lower())
    except ValueError:
        raise DataShapeError(field_name, f"Unknown severity {value!r} in {field_name}") from None


def _as_mapping(value: Any, field_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise DataShapeError(field_name)
    return value


def _as_list(value: Any, field_name: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise DataShapeError(field_name)
    return list(value)


def _as_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise DataShapeError(field_name)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise DataShapeError(field_name) from None


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _fix_flag(value: Any) -> bool | None:
    # npm reports either a boolean or an object describing the fixing upgrade
    if value is None:
        return None
    return bool(value)


def _parse_metadata(raw: Mapping[str, Any]) -> AuditMetadata:
    metadata = _as_mapping(raw.get("metadata"), "metadata")

    counts: dict[str, int] = {}
    for level, count in _as_mapping(metadata.get("vulnerabilities"), "metadata.vulnerabilities").items():
        counts[str(level)] = _as_int(count, f"metadata.vulnerabilities.{level}")

    total: int | None = None
    dependencies = metadata.get("dependencies")
    if isinstance(dependencies, Mapping) and dependencies.get("total") is not None:
        total = _as_int(dependencies["total"], "metadata.dependencies.total")
    elif metadata.get("totalDependencies") is not None:
        total = _as_int(metadata["totalDependencies"], "metadata.totalDependencies")

    return AuditMetadata(vulnerabilities=counts, dependency_total=total)


def _parse_advisory(key: str, raw: Any) -> Advisory:
    entry = _as_mapping(raw, f"advisories.{key}")
    return Advisory(
        id=str(entry.get("id", key)),
        module_name=str(entry.get("module_name") or ""),
        title=str(entry.get("title") or ""),
        overview=str(entry.get("overview") or ""),
        recommendation=str(entry.get("recommendation") or ""),
        url=str(entry.get("url") or ""),
        severity=parse_severity(entry.get("severity"), f"advisories.{key}.severity"),
        vulnerable_versions=_optional_str(entry.get("vulnerable_versions")),
    )


def _parse_via_detail(node_name: str, raw: Mapping[str, Any]) -> ViaDetail:
    name = raw.get("name")
    name = "" if name is None else str(name)
    severity: Severity | None = None
    if name not in NON_INFORMATIVE_NAMES:
        severity = parse_severity(raw.get("severity"), f"vulnerabilities.{node_name}.via.severity")
    return ViaDetail(
        name=name,
        title=str(raw.get("title") or ""),
        url=str(raw.get("url") or ""),
        severity=severity,
        range=_optional_str(raw.get("range")),
        source=_optional_str(raw.get("source")),
        fix_available=_fix_flag(raw.get("fixAvailable")),
    )


def _parse_node(name: str, raw: Any) -> VulnerabilityNode:
    entry = _as_mapping(raw, f"vulnerabilities.{name}")

    via: list[str | ViaDetail] = []
    for item in _as_list(entry.get("via"), f"vulnerabilities.{name}.via"):
        if isinstance(item, str):
            via.append(item)
        elif isinstance(item, Mapping):
            via.append(_parse_via_detail(name, item))

    return VulnerabilityNode(
        name=str(entry.get("name") or name),
        via=tuple(via),
        effects=tuple(str(e) for e in _as_list(entry.get("effects"), f"vulnerabilities.{name}.effects")),
        range=_optional_str(entry.get("range")),
        fix_available=_fix_flag(entry.get("fixAvailable")),
    )


def parse_audit(raw: Any) -> AuditReport:
    """Parse a decoded ``npm audit --json`` document into its tagged variant.

    Args:
        raw: Decoded JSON document

    Returns:
        AdvisoryAudit, VulnerabilityAudit or EmptyAudit

    Raises:
        SubprocessError: If the document is not an object or is an npm error report
        DataShapeError: If a present field has an unexpected shape
    """
    if not isinstance(raw, Mapping):
        raise SubprocessError("npm audit output is not a JSON object")

    error = raw.get("error")
    if isinstance(error, Mapping):
        summary = error.get("summary") or error.get("code") or "unknown error"
        raise SubprocessError(f"npm audit reported an error: {summary}")

    metadata = _parse_metadata(raw)

    if raw.get("advisories") is not None:
        advisories = _as_mapping(raw["advisories"], "advisories")
        return AdvisoryAudit(
            advisories=tuple(_parse_advisory(str(k), v) for k, v in advisories.items()),
            metadata=metadata,
        )

    if raw.get("vulnerabilities") is not None:
        nodes = _as_mapping(raw["vulnerabilities"], "vulnerabilities")
        return VulnerabilityAudit(
            nodes={str(k): _parse_node(str(k), v) for k, v in nodes.items()},
            metadata=metadata,
        )

    return EmptyAudit(metadata=metadata)
