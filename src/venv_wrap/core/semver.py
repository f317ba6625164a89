"""Semantic version model.

Versions have the strict shape ``major.minor.patch`` with an optional
``+metadata`` suffix.  Ordering only looks at the numeric triple;
metadata never takes part in comparisons.

Every function in this module is **pure**.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

from venv_wrap.exceptions import InvalidVersionError

_VERSION_RE = re.compile(
    r"^(?P<major>[0-9]+)\.(?P<minor>[0-9]+)\.(?P<patch>[0-9]+)(?:\+(?P<metadata>[0-9A-Za-z.-]+))?$"
)


class Ordering(enum.IntEnum):
    """Result of :func:`compare`."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


@dataclass(frozen=True, slots=True)
class SemanticVersion:
    """An immutable ``major.minor.patch[+metadata]`` version."""

    major: int
    minor: int
    patch: int
    metadata: str | None = None

    def __post_init__(self) -> None:
        for field_name in ("major", "minor", "patch"):
            value = getattr(self, field_name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise InvalidVersionError(
                    f"Invalid version component {field_name}={value!r}: "
                    "expected a non-negative integer.",
                )

    # ------------------------------------------------------------------
    # Parsing / serialisation
    # ------------------------------------------------------------------

    @classmethod
    def parse(cls, text: str) -> SemanticVersion:
        """Parse *text* or raise :class:`InvalidVersionError`."""
        match = _VERSION_RE.match(text.strip()) if isinstance(text, str) else None
        if match is None:
            raise InvalidVersionError(
                f"Invalid semantic version: {text!r}",
                hint="Expected the form MAJOR.MINOR.PATCH, e.g. 1.2.3",
            )
        return cls(
            major=int(match.group("major")),
            minor=int(match.group("minor")),
            patch=int(match.group("patch")),
            metadata=match.group("metadata"),
        )

    def to_string(self, *, with_metadata: bool = False) -> str:
        """Render as ``major.minor.patch``, optionally with ``+metadata``."""
        core = f"{self.major}.{self.minor}.{self.patch}"
        if with_metadata and self.metadata:
            return f"{core}+{self.metadata}"
        return core

    def __str__(self) -> str:
        return self.to_string(with_metadata=True)

    # ------------------------------------------------------------------
    # Ordering (metadata ignored)
    # ------------------------------------------------------------------

    @property
    def precedence(self) -> tuple[int, int, int]:
        return (self.major, self.minor, self.patch)

    def __lt__(self, other: SemanticVersion) -> bool:
        return compare(self, other) is Ordering.LESS

    def __le__(self, other: SemanticVersion) -> bool:
        return compare(self, other) is not Ordering.GREATER

    def __gt__(self, other: SemanticVersion) -> bool:
        return compare(self, other) is Ordering.GREATER

    def __ge__(self, other: SemanticVersion) -> bool:
        return compare(self, other) is not Ordering.LESS


def compare(a: SemanticVersion, b: SemanticVersion) -> Ordering:
    """Compare two versions numerically, field by field."""
    if a.precedence < b.precedence:
        return Ordering.LESS
    if a.precedence > b.precedence:
        return Ordering.GREATER
    return Ordering.EQUAL
