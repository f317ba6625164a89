"""Infrastructure: structured child-process invocation.

Commands are never assembled as shell strings.  A :class:`ProcessCommand`
carries an explicit executable, an argument vector, a working directory
and an environment overlay; "activating" the virtual environment is
expressed as that overlay (``VIRTUAL_ENV`` set, the environment's bin
directory first on ``PATH``, ``PYTHONHOME`` removed).

Rules
-----
* Exactly one child process per call, no retry.
* Every spawn starts from a fresh copy of ``os.environ``.
* Only :class:`~venv_wrap.exceptions.VenvWrapError` subclasses escape.
* No ``print()`` — callers handle user-facing output.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from venv_wrap.config import ProjectLayout
from venv_wrap.exceptions import (
    EnvironmentMissingError,
    ToolExecutionError,
    missing_environment_hint,
)

logger = logging.getLogger(__name__)

ENVIRONMENT_MISSING_EXIT_CODE: int = 127
"""Returned by :meth:`ProcessRunner.run` when no environment exists."""


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ProcessCommand:
    """One child-process invocation."""

    executable: str
    args: tuple[str, ...] = ()
    cwd: Path | None = None
    env: Mapping[str, str | None] = field(default_factory=dict)
    """Overlay applied on top of ``os.environ``; ``None`` unsets a variable."""

    def argv(self) -> list[str]:
        return [self.executable, *self.args]

    def display(self) -> str:
        return " ".join(self.argv())


@dataclass(frozen=True, slots=True)
class ProcessOutput:
    """Exit code plus decoded standard streams of a finished child."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

class ProcessRunner:
    """Runs commands inside (or, on request, outside) the project environment.

    Parameters
    ----------
    layout:
        Locates the environment, its bin directory and its marker.
    """

    def __init__(self, layout: ProjectLayout) -> None:
        self._layout: ProjectLayout = layout

    @property
    def layout(self) -> ProjectLayout:
        return self._layout

    # ------------------------------------------------------------------
    # Command construction
    # ------------------------------------------------------------------

    def command(
        self,
        executable: str,
        *args: str,
        extra_env: Mapping[str, str | None] | None = None,
    ) -> ProcessCommand:
        """Build a command that runs inside the environment.

        A bare *executable* name is resolved inside the environment's
        bin directory when it exists there.
        """
        env: dict[str, str | None] = dict(self.activation_env())
        if extra_env:
            env.update(extra_env)
        return ProcessCommand(
            executable=self._resolve(executable),
            args=tuple(args),
            cwd=self._layout.root,
            env=env,
        )

    def host_command(self, executable: str, *args: str) -> ProcessCommand:
        """Build a command that runs in the project root, outside the environment."""
        return ProcessCommand(
            executable=executable,
            args=tuple(args),
            cwd=self._layout.root,
        )

    def activation_env(self) -> dict[str, str | None]:
        """Return the overlay equivalent to sourcing ``bin/activate``."""
        bin_dir = str(self._layout.bin_dir)
        path = os.environ.get("PATH", "")
        return {
            "VIRTUAL_ENV": str(self._layout.venv_path),
            "PATH": f"{bin_dir}{os.pathsep}{path}" if path else bin_dir,
            "PYTHONHOME": None,
        }

    def _resolve(self, executable: str) -> str:
        if os.sep in executable or (os.altsep and os.altsep in executable):
            return executable
        found = shutil.which(executable, path=str(self._layout.bin_dir))
        return found if found is not None else executable

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(self, command: ProcessCommand, *, stream: bool = False) -> int:
        """Run *command* and return its exit code.

        With ``stream=True`` the child writes straight to this process's
        stdout/stderr; otherwise its output is discarded.  Returns
        :data:`ENVIRONMENT_MISSING_EXIT_CODE` without spawning when the
        environment does not exist.
        """
        if not self._layout.has_environment():
            logger.debug("no environment at %s, not running %s",
                         self._layout.venv_path, command.display())
            return ENVIRONMENT_MISSING_EXIT_CODE

        target = None if stream else asyncio.subprocess.DEVNULL
        process = await self._spawn(
            command, stdin=target, stdout=target, stderr=target,
        )
        return await process.wait()

    async def run_capture(self, command: ProcessCommand) -> str:
        """Run *command* inside the environment and return its trimmed stdout.

        Raises
        ------
        EnvironmentMissingError
            When the environment does not exist (nothing is spawned).
        ToolExecutionError
            When the command exits non-zero; the message is the trimmed
            stderr, or a generic message with the exit code.
        """
        output = await self.capture(command)
        if output.ok:
            return output.stdout.strip()
        raise tool_error(command, output)

    async def capture(
        self,
        command: ProcessCommand,
        *,
        require_environment: bool = True,
    ) -> ProcessOutput:
        """Run *command*, buffering stdout and stderr separately."""
        if require_environment and not self._layout.has_environment():
            raise EnvironmentMissingError(
                f"No virtual environment found at {self._layout.venv_path}",
                hint=missing_environment_hint(),
            )

        process = await self._spawn(
            command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()
        returncode = process.returncode if process.returncode is not None else 1
        return ProcessOutput(
            returncode=returncode,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )

    async def _spawn(
        self,
        command: ProcessCommand,
        *,
        stdin: int | None,
        stdout: int | None,
        stderr: int | None,
    ) -> asyncio.subprocess.Process:
        logger.debug("spawning: %s", command.display())
        try:
            return await asyncio.create_subprocess_exec(
                *command.argv(),
                cwd=str(command.cwd) if command.cwd is not None else None,
                env=_merge_env(command.env),
                stdin=stdin,
                stdout=stdout,
                stderr=stderr,
            )
        except OSError as exc:
            raise ToolExecutionError(
                f"Could not start `{command.executable}`: {exc.strerror or exc}",
                hint="Check that the tool is installed and on PATH.",
            ) from exc


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _merge_env(overlay: Mapping[str, str | None]) -> dict[str, str]:
    env = dict(os.environ)
    for key, value in overlay.items():
        if value is None:
            env.pop(key, None)
        else:
            env[key] = value
    return env


def tool_error(command: ProcessCommand, output: ProcessOutput) -> ToolExecutionError:
    """Build the :class:`ToolExecutionError` for a failed *output*."""
    message = output.stderr.strip()
    if not message:
        message = f"`{command.display()}` failed with exit code {output.returncode}"
    return ToolExecutionError(message, returncode=output.returncode)

