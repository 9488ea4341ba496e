import os
from pathlib import Path

import pytest

from helpers import mark_by_dir


ENV_PREFIXES = ("BITBUCKET_", "BPR_", "AUDIT_REPORTER_")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # Tests may run inside a real pipeline; never let its variables leak in
    for name in list(os.environ):
        if name.startswith(ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)
    yield


TESTS = Path(__file__).parent

def pytest_collection_modifyitems(config, items):
    # Mark tests by directory structure
    mark_by_dir(items, TESTS / "audit_reporter" / "core", pytest.mark.unit)
    mark_by_dir(items, TESTS / "audit_reporter" / "infra", pytest.mark.integration)
    mark_by_dir(items, TESTS / "audit_reporter" / "app", pytest.mark.e2e)
