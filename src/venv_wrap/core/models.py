"""Domain models for venv-wrap.

Value objects are **frozen** dataclasses with no behaviour beyond data
access and a few derived properties.  The one mutable model is
:class:`ScaffoldTransaction`, which is an append-only log owned by a
single ``init`` run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from venv_wrap.core.semver import SemanticVersion
from venv_wrap.exceptions import VenvWrapError


# ---------------------------------------------------------------------------
# Manifest entries
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Requirement:
    """One ``name==version`` line of the manifest."""

    name: str
    """Canonical package name — no version suffix, no whitespace."""

    version: SemanticVersion

    def to_line(self) -> str:
        return f"{self.name}=={self.version.to_string()}"


@dataclass(frozen=True, slots=True)
class InstalledPackage:
    """A package reported by the environment tool's listing."""

    name: str
    version: SemanticVersion


@dataclass(frozen=True, slots=True)
class OutdatedPackage:
    """One row of the environment tool's outdated report."""

    name: str
    current: str
    latest: str


# ---------------------------------------------------------------------------
# Per-package outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Installed:
    name: str
    version: SemanticVersion


@dataclass(frozen=True, slots=True)
class Uninstalled:
    name: str


@dataclass(frozen=True, slots=True)
class AlreadyAbsent:
    """Uninstall target was not installed — an expected, successful outcome."""

    name: str


@dataclass(frozen=True, slots=True)
class Updated:
    name: str
    current: str
    latest: str


@dataclass(frozen=True, slots=True)
class Failed:
    """A package whose operation failed; siblings are unaffected."""

    name: str
    error: VenvWrapError

    @property
    def diagnostic(self) -> str:
        return str(self.error)


Outcome = Union[Installed, Uninstalled, AlreadyAbsent, Updated, Failed]


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Outcomes of one batch, in the order the packages were requested."""

    outcomes: tuple[Outcome, ...]

    @property
    def failures(self) -> tuple[Failed, ...]:
        return tuple(o for o in self.outcomes if isinstance(o, Failed))

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def __len__(self) -> int:
        return len(self.outcomes)

    def __bool__(self) -> bool:
        return len(self.outcomes) > 0


# ---------------------------------------------------------------------------
# Scaffold log
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class ScaffoldTransaction:
    """Ordered, in-memory list of paths created by ``init``.

    Never persisted: a crash mid-scaffold can leave partial state.
    """

    created: list[Path] = field(default_factory=list)
    completed_steps: list[str] = field(default_factory=list)

    def record(self, path: Path) -> None:
        if path not in self.created:
            self.created.append(path)

    def __len__(self) -> int:
        return len(self.created)
