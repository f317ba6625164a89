"""Infrastructure layer — external system integration.

This layer wraps all interaction with pip, git, the ``venv`` module and
the filesystem.  Every raw OS/subprocess exception must be caught here
and re-raised as a :class:`~venv_wrap.exceptions.VenvWrapError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering); diagnostics
  go through :mod:`logging`.
* Must expose clean, typed interfaces consumed by the core layer.
"""

from venv_wrap.infra.manifest_store import ManifestStore
from venv_wrap.infra.pip_tool import PipEnvironmentTool
from venv_wrap.infra.process_runner import (
    ENVIRONMENT_MISSING_EXIT_CODE,
    ProcessCommand,
    ProcessOutput,
    ProcessRunner,
)
from venv_wrap.infra.project_workspace import ProjectWorkspace

__all__: list[str] = [
    "ENVIRONMENT_MISSING_EXIT_CODE",
    "ManifestStore",
    "PipEnvironmentTool",
    "ProcessCommand",
    "ProcessOutput",
    "ProcessRunner",
    "ProjectWorkspace",
]
