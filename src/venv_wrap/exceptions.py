"""Custom exception hierarchy for venv-wrap.

All exceptions that cross layer boundaries must inherit from
:class:`VenvWrapError`.  Raw OS and subprocess exceptions must NEVER
propagate beyond the infrastructure layer — they must be caught and
re-raised as a typed subclass defined here.

Hierarchy
---------
VenvWrapError
├── InvalidSpecifierError
├── InvalidVersionError
├── EnvironmentMissingError
├── ToolExecutionError
├── AlreadyAbsentError
├── ManifestIOError
├── ScaffoldStepError
└── EnvironmentError
"""

from __future__ import annotations


class VenvWrapError(Exception):
    """Base exception for all venv-wrap errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Parsing ---------------------------------------------------------------

class InvalidSpecifierError(VenvWrapError):
    """Raised when no package name can be extracted from a specifier."""


class InvalidVersionError(VenvWrapError):
    """Raised when a string is not a ``major.minor.patch[+meta]`` version."""


# --- Environment tool ------------------------------------------------------

class EnvironmentMissingError(VenvWrapError):
    """Raised when the project has no virtual environment."""


class ToolExecutionError(VenvWrapError):
    """Raised when an external tool exits non-zero or cannot be spawned."""

    def __init__(
        self,
        message: str,
        *,
        returncode: int | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.returncode: int | None = returncode


class AlreadyAbsentError(VenvWrapError):
    """Raised when uninstalling a package that is not installed.

    Not a true failure: the reconciliation engine maps it to an
    ``AlreadyAbsent`` outcome.
    """


# --- Manifest ----------------------------------------------------------------

class ManifestIOError(VenvWrapError):
    """Raised when the manifest file cannot be written."""


# --- Scaffolding -------------------------------------------------------------

class ScaffoldStepError(VenvWrapError):
    """Raised when an ``init`` step fails; the scaffold has been rolled back."""

    def __init__(self, message: str, *, step: str, hint: str | None = None) -> None:
        super().__init__(message, hint=hint)
        self.step: str = step


# --- Runtime dependencies ----------------------------------------------------

class EnvironmentError(VenvWrapError):
    """Raised when an optional runtime dependency is not available."""


def missing_environment_hint() -> str:
    """Return the guidance shown whenever ``.venv`` is absent."""
    return "Run `venv-wrap init` to create a project, or `python -m venv .venv`."
