"""Shared fixtures for app-level tests."""
import pytest
from dependency_injector import providers

from audit_reporter.app.container import Container

from helpers import FakePublisher, FakeScanner, advisories_audit


IDENTITY_ENV = {
    "BITBUCKET_BRANCH": "main",
    "BITBUCKET_COMMIT": "abc123",
    "BITBUCKET_REPO_OWNER": "acme",
    "BITBUCKET_REPO_SLUG": "web",
    "BITBUCKET_BUILD_NUMBER": "17",
}


@pytest.fixture
def identity_env(monkeypatch, tmp_path):
    """Pipeline identity variables plus quiet logging under tmp_path."""
    for name, value in IDENTITY_ENV.items():
        monkeypatch.setenv(name, value)
    monkeypatch.setenv("BPR_LOG_CONSOLE_OUTPUT", "false")
    monkeypatch.setenv("BPR_LOG_HOME", str(tmp_path))


class FakeAdapters:
    """Holds the fakes wired into patched containers so tests can inspect them."""

    def __init__(self):
        self.scanner = FakeScanner(advisories_audit())
        self.publisher = FakePublisher()

    def container(self) -> Container:
        c = Container()
        c.scanner.override(providers.Object(self.scanner))
        c.publisher.override(providers.Object(self.publisher))
        return c


@pytest.fixture
def fake_adapters(monkeypatch):
    """Patch the CLI and facade containers to use in-memory adapters."""
    adapters = FakeAdapters()
    monkeypatch.setattr("audit_reporter.app.cli.Container", adapters.container)
    monkeypatch.setattr("audit_reporter.app.main.Container", adapters.container)
    return adapters
