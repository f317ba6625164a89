"""Pure parsers for pip's human-readable output.

pip's text output has no schema guarantee; every assumption about its
layout lives in this module so that nothing above
:class:`~venv_wrap.infra.pip_tool.PipEnvironmentTool` depends on it.

Formats handled
---------------
* ``pip show``            — ``Key: value`` lines, one of them ``Version:``.
* ``pip list``            — two header lines, then ``name  version`` rows.
* ``pip list --outdated`` — two header lines, then
  ``name  current  latest  type`` rows.
* ``pip uninstall``       — a "not installed" warning for absent packages.
"""

from __future__ import annotations

_HEADER_LINES: int = 2

_NOT_INSTALLED_SIGNALS: tuple[str, ...] = (
    "not installed",
    "no files were found to uninstall",
)


def parse_show_version(text: str) -> str | None:
    """Return the value of the first ``Version:`` line, or ``None``."""
    for line in text.strip().splitlines():
        if line.startswith("Version:"):
            value = line.split(":", 1)[1].strip()
            return value or None
    return None


def _data_rows(text: str) -> list[list[str]]:
    """Split every non-blank line after the header into whitespace tokens."""
    lines = text.strip().splitlines()[_HEADER_LINES:]
    return [line.split() for line in lines if line.strip()]


def parse_list_table(text: str) -> list[tuple[str, str]]:
    """Parse ``pip list`` output into ``(name, version)`` pairs.

    The first token of a row is the name and the last token is the
    version, so extra columns (e.g. an editable location) are ignored.
    Rows with a single token are skipped.
    """
    return [(tokens[0], tokens[-1]) for tokens in _data_rows(text) if len(tokens) >= 2]


def parse_outdated_table(text: str) -> list[tuple[str, str, str]]:
    """Parse ``pip list --outdated`` into ``(name, current, latest)`` triples.

    Rows with fewer than three tokens are skipped.
    """
    return [
        (tokens[0], tokens[1], tokens[2])
        for tokens in _data_rows(text)
        if len(tokens) >= 3
    ]


def is_not_installed_message(text: str) -> bool:
    """Return ``True`` when *text* says the target package is not installed."""
    lowered = text.lower()
    return any(signal in lowered for signal in _NOT_INSTALLED_SIGNALS)
