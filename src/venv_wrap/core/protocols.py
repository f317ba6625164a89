"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from venv_wrap.core.models import Requirement


class EnvironmentTool(Protocol):
    """Contract for the package tool that runs inside the environment.

    Implementations own the tool's text formats: every method returns
    plain typed values, so the tool can later be swapped for a
    machine-readable query without touching the core.

    All methods raise
    :class:`~venv_wrap.exceptions.EnvironmentMissingError` when the
    environment does not exist and
    :class:`~venv_wrap.exceptions.ToolExecutionError` when the tool
    fails.
    """

    async def install(self, spec: str) -> None:
        """Install the package described by *spec*."""
        ...  # pragma: no cover

    async def show_version(self, name: str) -> str:
        """Return the raw installed version string of *name*."""
        ...  # pragma: no cover

    async def uninstall(self, name: str) -> None:
        """Remove *name*.

        Raises
        ------
        AlreadyAbsentError
            When the tool reports that *name* is not installed.
        """
        ...  # pragma: no cover

    async def list_installed(self) -> list[tuple[str, str]]:
        """Return ``(name, raw_version)`` for every installed package."""
        ...  # pragma: no cover

    async def list_outdated(self) -> list[tuple[str, str, str]]:
        """Return ``(name, current, latest)`` for every outdated package."""
        ...  # pragma: no cover

    async def install_manifest(self, manifest_path: Path) -> int:
        """Install everything listed in *manifest_path*; return the exit code."""
        ...  # pragma: no cover


class ManifestRepository(Protocol):
    """Contract for the persisted dependency list."""

    def read(self) -> list[Requirement]:
        """Return every valid entry; never raises for missing/bad content."""
        ...  # pragma: no cover

    def write(self, requirements: Sequence[Requirement]) -> None:
        """Replace the whole manifest with *requirements*."""
        ...  # pragma: no cover

    @property
    def path(self) -> Path:
        ...  # pragma: no cover


class ScaffoldWorkspace(Protocol):
    """Filesystem/process actions performed by ``init``.

    Each ``plan_*`` method names the paths the matching action will
    create so that the caller can log them before the action runs.
    """

    def plan_templates(self) -> list[Path]:
        ...  # pragma: no cover

    async def copy_templates(self, project_name: str, version: str) -> None:
        ...  # pragma: no cover

    def plan_environment(self) -> list[Path]:
        ...  # pragma: no cover

    async def create_environment(self) -> None:
        ...  # pragma: no cover

    def plan_manifest(self) -> list[Path]:
        ...  # pragma: no cover

    async def create_manifest(self) -> None:
        ...  # pragma: no cover

    def plan_entry_point(self) -> list[Path]:
        ...  # pragma: no cover

    async def create_entry_point(self) -> None:
        ...  # pragma: no cover

    def plan_vcs(self) -> list[Path]:
        ...  # pragma: no cover

    async def init_vcs(self) -> None:
        ...  # pragma: no cover

    def remove(self, path: Path) -> None:
        """Delete *path* (recursively for directories) if it exists."""
        ...  # pragma: no cover
