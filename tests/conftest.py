"""Shared pytest fixtures and configuration for the venv-wrap test suite.

Guidelines
----------
* No internet access in any test.
* pip must be faked at the ``EnvironmentTool`` boundary.
* Core tests must be pure — no side effects.
* Real child processes are limited to ``sys.executable``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from venv_wrap.config import ProjectLayout


@pytest.fixture
def layout(tmp_path: Path) -> ProjectLayout:
    """A project rooted in a temporary directory, without an environment."""
    return ProjectLayout(root=tmp_path, venv_dir=".venv", python="python3")


@pytest.fixture
def fake_env(layout: ProjectLayout) -> ProjectLayout:
    """Create just enough of ``.venv`` for the marker check to pass."""
    layout.bin_dir.mkdir(parents=True)
    layout.marker.write_text("# activate\n", encoding="utf-8")
    return layout


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep user overrides from leaking into layouts built by tests."""
    for name in ("VENV_WRAP_PYTHON", "VENV_WRAP_VENV_DIR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Drop handlers installed by ``configure_logging`` during a test."""
    logger = logging.getLogger("venv_wrap")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
