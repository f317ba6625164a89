"""Package version and build metadata."""

from __future__ import annotations

import subprocess
from pathlib import Path

from venv_wrap.core.semver import SemanticVersion

__version__: str = "0.1.0"


def _commit_hash() -> str | None:
    """Return the short commit hash of the source checkout, if any."""
    try:
        completed = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=Path(__file__).resolve().parent,
            capture_output=True,
            text=True,
            check=False,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if completed.returncode != 0:
        return None
    return completed.stdout.strip() or None


def build_version() -> SemanticVersion:
    """Return :data:`__version__` with the commit hash attached as metadata."""
    base = SemanticVersion.parse(__version__)
    return SemanticVersion(base.major, base.minor, base.patch, _commit_hash())
