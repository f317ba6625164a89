"""Immutable configuration values.

:data:`DEFAULT_CONFIG` describes the command-line surface (commands,
aliases, arguments and global options) and is passed explicitly into the
argument-parser builder and the help renderer.  :class:`ProjectLayout`
describes where a project keeps its environment and manifest.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

ENV_PYTHON: str = "VENV_WRAP_PYTHON"
"""Environment variable naming the interpreter used to create environments."""

ENV_VENV_DIR: str = "VENV_WRAP_VENV_DIR"
"""Environment variable overriding the environment directory name."""


# ---------------------------------------------------------------------------
# CLI surface
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class OptionSpec:
    name: str
    short: str | None
    description: str


@dataclass(frozen=True, slots=True)
class ArgumentSpec:
    name: str
    optional: bool
    description: str
    variadic: bool = False


@dataclass(frozen=True, slots=True)
class CommandSpec:
    name: str
    description: str
    aliases: tuple[str, ...] = ()
    arg: ArgumentSpec | None = None


@dataclass(frozen=True, slots=True)
class CliConfig:
    name: str
    summary: str
    options: tuple[OptionSpec, ...]
    commands: tuple[CommandSpec, ...]

    def command(self, name_or_alias: str | None) -> CommandSpec | None:
        """Resolve a command by its name or one of its aliases."""
        for command in self.commands:
            if name_or_alias == command.name or name_or_alias in command.aliases:
                return command
        return None


DEFAULT_CONFIG = CliConfig(
    name="venv-wrap",
    summary="a virtual environment and package manager for Python",
    options=(
        OptionSpec("help", "h", "Print help text and exit"),
        OptionSpec("version", "v", "Print version info and exit"),
        OptionSpec("verbose", None, "Show debug logging"),
    ),
    commands=(
        CommandSpec(
            "init",
            "Create an empty venv project from a blank template",
        ),
        CommandSpec(
            "run",
            "Run a script in the current virtual environment",
            arg=ArgumentSpec(
                "script",
                optional=False,
                description="Run a script in the current virtual environment",
            ),
        ),
        CommandSpec(
            "install",
            "Install packages in the current virtual environment",
            aliases=("add", "i"),
            arg=ArgumentSpec(
                "pkg",
                optional=True,
                variadic=True,
                description="Install and add a dependency to your project",
            ),
        ),
        CommandSpec(
            "uninstall",
            "Uninstall packages in the current virtual environment",
            aliases=("remove", "rm"),
            arg=ArgumentSpec(
                "pkg",
                optional=False,
                variadic=True,
                description="Uninstall and remove a dependency from your project",
            ),
        ),
        CommandSpec("list", "List installed packages in the current project"),
        CommandSpec("update", "Update packages in the current virtual environment"),
        CommandSpec("info", "Show information about the current virtual environment"),
    ),
)


# ---------------------------------------------------------------------------
# Project layout
# ---------------------------------------------------------------------------

def _default_python() -> str:
    return os.environ.get(ENV_PYTHON) or sys.executable


def _default_venv_dir() -> str:
    return os.environ.get(ENV_VENV_DIR) or ".venv"


@dataclass(frozen=True, slots=True)
class ProjectLayout:
    """Fixed relative paths of a venv-wrap project."""

    root: Path
    venv_dir: str = field(default_factory=_default_venv_dir)
    manifest_name: str = "requirements.txt"
    entry_point_name: str = "main.py"
    python: str = field(default_factory=_default_python)

    @classmethod
    def from_cwd(cls) -> ProjectLayout:
        return cls(root=Path.cwd())

    @property
    def venv_path(self) -> Path:
        return self.root / self.venv_dir

    @property
    def bin_dir(self) -> Path:
        return self.venv_path / ("Scripts" if os.name == "nt" else "bin")

    @property
    def marker(self) -> Path:
        """Path whose existence signals a usable environment."""
        return self.bin_dir / "activate"

    @property
    def manifest_path(self) -> Path:
        return self.root / self.manifest_name

    @property
    def entry_point_path(self) -> Path:
        return self.root / self.entry_point_name

    def has_environment(self) -> bool:
        return self.marker.exists()
