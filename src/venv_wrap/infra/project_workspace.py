"""Filesystem and process work behind ``venv-wrap init``.

Implements :class:`~venv_wrap.core.protocols.ScaffoldWorkspace`.  The
ordering, the transaction log and the rollback policy live in
:class:`~venv_wrap.core.scaffold_service.ScaffoldService`; this module
only performs individual actions and reports failures as typed errors.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

from venv_wrap.config import ProjectLayout
from venv_wrap.exceptions import ToolExecutionError
from venv_wrap.infra.manifest_store import ManifestStore
from venv_wrap.infra.process_runner import ProcessCommand, ProcessRunner, tool_error

logger = logging.getLogger(__name__)

TEMPLATE_DIR: Path = Path(__file__).resolve().parent.parent / "templates"

PROJECT_NAME_TOKEN: str = "{{project_name}}"
VERSION_TOKEN: str = "{{venv_version}}"


def render_template(content: str, project_name: str, version: str) -> str:
    """Substitute the placeholder tokens verbatim."""
    return content.replace(PROJECT_NAME_TOKEN, project_name).replace(VERSION_TOKEN, version)


class ProjectWorkspace:
    """Concrete :class:`ScaffoldWorkspace` rooted at ``layout.root``.

    Parameters
    ----------
    layout:
        Where the project files go.
    runner:
        Spawns ``python -m venv`` and ``git init``.
    template_dir:
        Directory whose files are copied into the project root.
    """

    def __init__(
        self,
        layout: ProjectLayout,
        runner: ProcessRunner,
        *,
        template_dir: Path = TEMPLATE_DIR,
    ) -> None:
        self._layout: ProjectLayout = layout
        self._runner: ProcessRunner = runner
        self._template_dir: Path = template_dir

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    def _template_files(self) -> list[Path]:
        if not self._template_dir.is_dir():
            return []
        return sorted(p for p in self._template_dir.iterdir() if p.is_file())

    def plan_templates(self) -> list[Path]:
        return [self._layout.root / src.name for src in self._template_files()]

    async def copy_templates(self, project_name: str, version: str) -> None:
        """Copy every template concurrently; existing files are not overwritten."""
        await asyncio.gather(
            *(
                asyncio.to_thread(
                    self._copy_template,
                    src,
                    self._layout.root / src.name,
                    project_name,
                    version,
                )
                for src in self._template_files()
            )
        )

    @staticmethod
    def _copy_template(src: Path, dest: Path, project_name: str, version: str) -> None:
        if dest.exists():
            logger.warning("%s already exists, leaving it unchanged", dest.name)
            return
        content = src.read_text(encoding="utf-8")
        dest.write_text(render_template(content, project_name, version), encoding="utf-8")

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    def plan_environment(self) -> list[Path]:
        return [self._layout.venv_path]

    async def create_environment(self) -> None:
        await self._run_host(
            self._runner.host_command(
                self._layout.python, "-m", "venv", self._layout.venv_dir,
            )
        )
        if not self._layout.has_environment():
            raise ToolExecutionError(
                f"Environment created without {self._layout.marker.name}: "
                f"{self._layout.venv_path}",
            )

    # ------------------------------------------------------------------
    # Manifest / entry point
    # ------------------------------------------------------------------

    def plan_manifest(self) -> list[Path]:
        return [self._layout.manifest_path]

    async def create_manifest(self) -> None:
        await asyncio.to_thread(ManifestStore(self._layout.manifest_path).create_empty)

    def plan_entry_point(self) -> list[Path]:
        return [self._layout.entry_point_path]

    async def create_entry_point(self) -> None:
        await asyncio.to_thread(self._layout.entry_point_path.touch, exist_ok=True)

    # ------------------------------------------------------------------
    # Version control
    # ------------------------------------------------------------------

    def plan_vcs(self) -> list[Path]:
        return [self._layout.root / ".git"]

    async def init_vcs(self) -> None:
        await self._run_host(self._runner.host_command("git", "init"))

    # ------------------------------------------------------------------
    # Rollback
    # ------------------------------------------------------------------

    def remove(self, path: Path) -> None:
        """Delete *path*; directories are removed recursively."""
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _run_host(self, command: ProcessCommand) -> None:
        output = await self._runner.capture(command, require_environment=False)
        if not output.ok:
            raise tool_error(command, output)
