"""pip-backed implementation of :class:`~venv_wrap.core.protocols.EnvironmentTool`.

This module is the **only** place that knows which pip subcommands are
run; the text they print is interpreted by :mod:`venv_wrap.infra.pip_output`.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from venv_wrap.exceptions import AlreadyAbsentError, ToolExecutionError
from venv_wrap.infra import pip_output
from venv_wrap.infra.process_runner import ProcessCommand, ProcessRunner, tool_error

logger = logging.getLogger(__name__)

_QUIET_ENV: dict[str, str | None] = {
    "PIP_DISABLE_PIP_VERSION_CHECK": "1",
    "PIP_NO_INPUT": "1",
}


class PipEnvironmentTool:
    """Concrete :class:`EnvironmentTool` driving ``pip`` inside ``.venv``.

    Usage::

        tool = PipEnvironmentTool(ProcessRunner(layout))
        await tool.install("flask==2.0.1")
        version = await tool.show_version("flask")

    This class satisfies the :class:`~venv_wrap.core.protocols.EnvironmentTool`
    protocol structurally — no explicit inheritance required.
    """

    def __init__(self, runner: ProcessRunner, *, executable: str = "pip") -> None:
        self._runner: ProcessRunner = runner
        self._executable: str = executable

    def _pip(self, *args: str) -> ProcessCommand:
        return self._runner.command(self._executable, *args, extra_env=_QUIET_ENV)

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    async def install(self, spec: str) -> None:
        await self._runner.run_capture(self._pip("install", spec))

    async def show_version(self, name: str) -> str:
        """Return the ``Version:`` value reported by ``pip show``.

        Raises
        ------
        ToolExecutionError
            When pip does not know *name* or prints no version.
        """
        text = await self._runner.run_capture(self._pip("show", name))
        version = pip_output.parse_show_version(text)
        if version is None:
            raise ToolExecutionError(f"pip show {name} reported no version")
        return version

    async def uninstall(self, name: str) -> None:
        """Run ``pip uninstall -y``.

        pip reports an absent package as a warning and may still exit 0,
        so both streams are checked regardless of the exit code.

        Raises
        ------
        AlreadyAbsentError
            When pip says *name* is not installed.
        ToolExecutionError
            For any other failure.
        """
        command = self._pip("uninstall", "-y", name)
        output = await self._runner.capture(command)
        if pip_output.is_not_installed_message(f"{output.stdout}\n{output.stderr}"):
            logger.debug("pip reports %s as not installed", name)
            raise AlreadyAbsentError(f"{name} is not installed")
        if not output.ok:
            raise tool_error(command, output)

    async def list_installed(self) -> list[tuple[str, str]]:
        text = await self._runner.run_capture(self._pip("list"))
        return pip_output.parse_list_table(text)

    async def list_outdated(self) -> list[tuple[str, str, str]]:
        text = await self._runner.run_capture(self._pip("list", "--outdated"))
        return pip_output.parse_outdated_table(text)

    async def install_manifest(self, manifest_path: Path) -> int:
        """Install from *manifest_path*, streaming pip's output."""
        return await self._runner.run(
            self._pip("install", "-r", str(manifest_path)),
            stream=True,
        )

    # ------------------------------------------------------------------
    # Extras used by ``run`` and ``info``
    # ------------------------------------------------------------------

    async def run_script(self, script: Path, args: Sequence[str] = ()) -> int:
        """Run *script* with the environment's python, streaming its output."""
        return await self._runner.run(
            self._runner.command("python", str(script), *args),
            stream=True,
        )

    async def python_version(self) -> str:
        text = await self._runner.run_capture(
            self._runner.command("python", "--version"),
        )
        return text.removeprefix("Python").strip()

    async def tool_version(self) -> str:
        """Return the bare pip version, e.g. ``24.0``."""
        text = await self._runner.run_capture(self._pip("--version"))
        tokens = text.split()
        return tokens[1] if len(tokens) > 1 else text
