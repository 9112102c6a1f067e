"""Pytest configuration and fixtures."""

import logging
import os
import sys
from pathlib import Path

import pytest
import structlog

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from deprecations import registry as registry_module  # noqa: E402
from deprecations.frames import CallerFrame, StaticFrameProvider  # noqa: E402
from deprecations.registry import DeprecationRegistry  # noqa: E402
from deprecations.testing import RecordingSink  # noqa: E402


CALLER = CallerFrame(file="/srv/acme/src/acme/api.py", line=10, module="acme.api")
OUTER = CallerFrame(file="/srv/app/main.py", line=42, module="app.main")


@pytest.fixture
def frames() -> StaticFrameProvider:
    """Fixed caller frames: acme/api.py:10 called by app/main.py:42."""
    return StaticFrameProvider(CALLER, OUTER)


@pytest.fixture
def registry(monkeypatch: pytest.MonkeyPatch, frames: StaticFrameProvider) -> DeprecationRegistry:
    """Isolated registry installed as the process-wide one for the test."""
    fresh = DeprecationRegistry(frame_provider=frames)
    monkeypatch.setattr(registry_module, "_registry", fresh)
    return fresh


@pytest.fixture
def stack_registry(monkeypatch: pytest.MonkeyPatch) -> DeprecationRegistry:
    """Isolated registry using the real call stack for caller frames."""
    fresh = DeprecationRegistry()
    monkeypatch.setattr(registry_module, "_registry", fresh)
    return fresh


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Drop DEPRECATIONS_* variables and run from an empty directory (no .env)."""
    for key in list(os.environ):
        if key.startswith("DEPRECATIONS_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def restore_logging():
    """Restore root handlers and structlog defaults after logging setup tests."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()
