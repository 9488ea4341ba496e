"""Shared fakes and sample audit documents for the test suite."""
from pathlib import Path

from audit_reporter.core.domain.models import PublishResult


def mark_by_dir(items, base_dir, marker):
    base = Path(base_dir).resolve()
    for item in items:
        # pytest >= 7 exposes item.path; older versions only item.fspath
        p = getattr(item, "path", None)
        p = Path(p) if p is not None else Path(str(getattr(item, "fspath")))
        try:
            p.resolve().relative_to(base)
        except ValueError:
            continue
        item.add_marker(marker)


def advisories_audit(*, count: int = 1, severity: str = "high", high: int = 2, total: int = 42) -> dict:
    """npm 6 style report with ``count`` advisories."""
    return {
        "advisories": {
            str(i): {
                "id": i,
                "module_name": f"pkg-{i}" if i > 1 else "foo",
                "title": "X" if i == 1 else f"Issue {i}",
                "overview": "o",
                "recommendation": "r",
                "url": "u",
                "severity": severity,
                "vulnerable_versions": "<1.2.3",
            }
            for i in range(1, count + 1)
        },
        "metadata": {
            "vulnerabilities": {"info": 0, "low": 0, "moderate": 0, "high": high, "critical": 0},
            "dependencies": {"total": total},
        },
    }


def vulnerabilities_audit() -> dict:
    """npm 7+ style report with a root cause, a derived node and odd via entries."""
    return {
        "auditReportVersion": 2,
        "vulnerabilities": {
            "@scope/pkg": {
                "name": "@scope/pkg",
                "severity": "critical",
                "isDirect": False,
                "via": [
                    {
                        "source": 1096,
                        "name": "@scope/pkg",
                        "dependency": "@scope/pkg",
                        "title": "Prototype pollution",
                        "url": "https://github.com/advisories/GHSA-aaaa",
                        "severity": "critical",
                        "range": "<2.0.0",
                    },
                    "minimist",
                ],
                "effects": ["consumer", "ghost"],
                "range": "<2.0.0",
                "fixAvailable": True,
            },
            "consumer": {
                "name": "consumer",
                "severity": "critical",
                "isDirect": True,
                "via": ["@scope/pkg"],
                "effects": [],
                "range": "1.0.0 - 1.4.0",
                "fixAvailable": {"name": "consumer", "version": "1.5.0", "isSemVerMajor": False},
            },
            "minimist": {
                "name": "minimist",
                "severity": "moderate",
                "isDirect": False,
                "via": [
                    {
                        "source": 1179,
                        "name": "minimist",
                        "dependency": "minimist",
                        "title": "Prototype Pollution in minimist",
                        "url": "https://github.com/advisories/GHSA-bbbb",
                        "severity": "moderate",
                        "range": "<1.2.6",
                    },
                    {
                        "source": 9999,
                        "name": "undefined",
                        "title": "",
                        "url": "",
                        "severity": "bogus",
                        "range": "",
                    },
                    {"name": "", "title": "", "url": "", "severity": "low"},
                ],
                "effects": [],
                "range": "<1.2.6",
                "fixAvailable": False,
            },
        },
        "metadata": {
            "vulnerabilities": {"info": 0, "low": 0, "moderate": 1, "high": 0, "critical": 2, "total": 3},
            "dependencies": {"prod": 10, "dev": 5, "optional": 0, "peer": 0, "total": 15},
        },
    }


class FakeScanner:
    def __init__(self, raw):
        self.raw = raw
        self.calls = 0

    def run(self):
        self.calls += 1
        return self.raw


class FakePublisher:
    """Records every PUT; ``fail_at`` makes the n-th call (0-based) return 500."""

    def __init__(self, fail_at: int | None = None, status_code: int = 500):
        self.calls: list[tuple[str, str | None, dict]] = []
        self._fail_at = fail_at
        self._status_code = status_code

    def _result(self, url: str) -> PublishResult:
        index = len(self.calls) - 1
        if self._fail_at is not None and index == self._fail_at:
            return PublishResult(url=url, status_code=self._status_code, body="boom")
        return PublishResult(url=url, status_code=200)

    def put_report(self, report_id, payload):
        self.calls.append((report_id, None, payload))
        return self._result(f"fake://reports/{report_id}")

    def put_annotation(self, report_id, annotation_id, payload):
        self.calls.append((report_id, annotation_id, payload))
        return self._result(f"fake://reports/{report_id}/annotations/{annotation_id}")

    @property
    def report_calls(self):
        return [c for c in self.calls if c[1] is None]

    @property
    def annotation_calls(self):
        return [c for c in self.calls if c[1] is not None]


class FakeLogger:
    def __init__(self):
        self.records: list[tuple[str, str, dict]] = []

    def debug(self, message, **kwargs):
        self.records.append(("debug", message, kwargs))

    def info(self, message, **kwargs):
        self.records.append(("info", message, kwargs))

    def warning(self, message, **kwargs):
        self.records.append(("warning", message, kwargs))

    def error(self, message, exc_info=False, **kwargs):
        self.records.append(("error", message, kwargs))

    def exception(self, message, **kwargs):
        self.records.append(("exception", message, kwargs))

    def messages(self, level: str | None = None) -> list[str]:
        return [m for lvl, m, _ in self.records if level is None or lvl == level]
