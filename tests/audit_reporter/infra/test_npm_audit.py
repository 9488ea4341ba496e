"""Tests for NpmAuditScanner with subprocess.Popen monkeypatched."""
import io
import json
import subprocess
import threading

import pytest

from audit_reporter.core.domain.exceptions import SubprocessError
from audit_reporter.infra import npm_audit
from audit_reporter.infra.npm_audit import NpmAuditScanner

from helpers import FakeLogger, advisories_audit


class BlockingStream:
    """Pipe that yields nothing until the process is killed."""

    def __init__(self, killed: threading.Event):
        self._killed = killed

    def read(self, size=-1):
        self._killed.wait(5)
        return b""

    def close(self):
        pass


class FakeProcess:
    def __init__(self, stdout=b"", stderr=b"", hang=False):
        self.killed = threading.Event()
        self.stdout = BlockingStream(self.killed) if hang else io.BytesIO(stdout)
        self.stderr = io.BytesIO(stderr)
        self.returncode = None

    def kill(self):
        self.killed.set()

    def wait(self, timeout=None):
        self.returncode = 1
        return self.returncode


def _fake_popen(monkeypatch, process, calls=None):
    def popen(cmd, **kwargs):
        if calls is not None:
            calls.append((cmd, kwargs))
        return process

    monkeypatch.setattr(subprocess, "Popen", popen)
    return process


def test_run_decodes_json_despite_nonzero_exit(monkeypatch):
    calls = []
    _fake_popen(monkeypatch, FakeProcess(stdout=json.dumps(advisories_audit()).encode()), calls)
    logger = FakeLogger()

    raw = NpmAuditScanner(logger=logger, timeout=5).run()

    assert raw["metadata"]["dependencies"]["total"] == 42
    cmd, kwargs = calls[0]
    assert cmd == ["npm", "audit", "--json"]
    assert kwargs["stdout"] is subprocess.PIPE
    assert kwargs["stderr"] is subprocess.PIPE
    assert logger.messages("info") == ["audit_started"]


def test_run_passes_cwd(monkeypatch, tmp_path):
    calls = []
    _fake_popen(monkeypatch, FakeProcess(stdout=b"{}"), calls)

    NpmAuditScanner(logger=FakeLogger(), cwd=tmp_path).run()

    assert calls[0][1]["cwd"] == str(tmp_path)


def test_stderr_output_is_fatal(monkeypatch):
    _fake_popen(monkeypatch, FakeProcess(stdout=b"{}", stderr=b"npm ERR! code ENOLOCK\n"))

    with pytest.raises(SubprocessError, match="ENOLOCK"):
        NpmAuditScanner(logger=FakeLogger()).run()


def test_whitespace_only_stderr_is_ignored(monkeypatch):
    _fake_popen(monkeypatch, FakeProcess(stdout=b'{"advisories": {}}', stderr=b"\n"))

    assert NpmAuditScanner(logger=FakeLogger()).run() == {"advisories": {}}


def test_output_over_buffer_limit_kills_process(monkeypatch):
    process = _fake_popen(monkeypatch, FakeProcess(stdout=b"{" + b" " * 64 + b"}"))

    with pytest.raises(SubprocessError, match="buffer limit of 16 bytes"):
        NpmAuditScanner(logger=FakeLogger(), max_buffer=16).run()

    assert process.killed.is_set()


def test_output_is_read_in_chunks(monkeypatch):
    monkeypatch.setattr(npm_audit, "READ_CHUNK", 4)
    process = _fake_popen(monkeypatch, FakeProcess(stdout=b"[" + b"1," * 20 + b"1]"))

    with pytest.raises(SubprocessError, match="buffer limit"):
        NpmAuditScanner(logger=FakeLogger(), max_buffer=10).run()

    # stopped after the chunk that crossed the limit
    assert process.stdout.tell() == 12
    assert process.killed.is_set()


def test_stderr_over_buffer_limit(monkeypatch):
    _fake_popen(monkeypatch, FakeProcess(stdout=b"{}", stderr=b"x" * 64))

    with pytest.raises(SubprocessError, match="buffer limit"):
        NpmAuditScanner(logger=FakeLogger(), max_buffer=16).run()


def test_invalid_json(monkeypatch):
    _fake_popen(monkeypatch, FakeProcess(stdout=b"not json"))

    with pytest.raises(SubprocessError, match="valid JSON"):
        NpmAuditScanner(logger=FakeLogger()).run()


def test_missing_executable(monkeypatch):
    def popen(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", "npm")

    monkeypatch.setattr(subprocess, "Popen", popen)

    with pytest.raises(SubprocessError, match="Could not execute"):
        NpmAuditScanner(logger=FakeLogger()).run()


def test_timeout_kills_process(monkeypatch):
    process = _fake_popen(monkeypatch, FakeProcess(hang=True))

    with pytest.raises(SubprocessError, match="did not finish within 0.05"):
        NpmAuditScanner(logger=FakeLogger(), timeout=0.05).run()

    assert process.killed.is_set()
