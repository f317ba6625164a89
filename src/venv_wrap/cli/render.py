"""Presentation of results: batch outcomes, package tables and help text.

Pure string builders are kept separate from the functions that print,
so the text can be tested without a console.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from venv_wrap.cli.console import console, err_console, escape_markup
from venv_wrap.config import CliConfig, CommandSpec
from venv_wrap.core.models import (
    AlreadyAbsent,
    BatchResult,
    Failed,
    Installed,
    InstalledPackage,
    Outcome,
    Uninstalled,
    Updated,
)

_INDENT: int = 4


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

def outcome_line(outcome: Outcome) -> str:
    """One-line, markup-annotated summary of *outcome*."""
    if isinstance(outcome, Installed):
        return f"[green]+[/green] {outcome.name}=={outcome.version.to_string()}"
    if isinstance(outcome, Uninstalled):
        return f"[green]-[/green] {outcome.name}"
    if isinstance(outcome, AlreadyAbsent):
        return f"[yellow]=[/yellow] {outcome.name} (not installed)"
    if isinstance(outcome, Updated):
        return f"[cyan]↑[/cyan] {outcome.name} {outcome.current} -> {outcome.latest}"
    name = escape_markup(outcome.name)
    return f"[red]✗[/red] {name}: {escape_markup(outcome.diagnostic)}"


def print_batch(result: BatchResult) -> None:
    """Print successes to stdout and failures (with hints) to stderr."""
    for outcome in result.outcomes:
        if isinstance(outcome, Failed):
            err_console.print(outcome_line(outcome))
            if outcome.error.hint:
                err_console.print(
                    f"  [yellow]Hint:[/yellow] {escape_markup(outcome.error.hint)}"
                )
        else:
            console.print(outcome_line(outcome))

    failures = len(result.failures)
    if failures:
        err_console.print(
            f"[bold red]{failures} of {len(result)} package(s) failed.[/bold red]"
        )


# ---------------------------------------------------------------------------
# Package table
# ---------------------------------------------------------------------------

def _import_rich_table() -> type[Any] | None:
    try:
        from rich.table import Table
    except ModuleNotFoundError:
        return None
    return Table


def print_packages(packages: Sequence[InstalledPackage]) -> None:
    """Render installed packages as a Rich table, or plain columns."""
    if not packages:
        console.print("No packages installed.")
        return

    table_class = _import_rich_table()
    if table_class is None:
        width = max(len(pkg.name) for pkg in packages)
        for pkg in packages:
            console.print(f"{pkg.name:<{width}}  {pkg.version.to_string()}")
        return

    table = table_class(
        title="Installed packages",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Package", style="bold")
    table.add_column("Version", justify="right")
    for pkg in packages:
        table.add_row(pkg.name, pkg.version.to_string())
    console.print(table)


# ---------------------------------------------------------------------------
# Help text
# ---------------------------------------------------------------------------

def _command_rows(command: CommandSpec) -> list[tuple[str, str]]:
    """Return ``(usage, description)`` rows for one command.

    A command with an optional argument gets a second row showing the
    argument form.
    """
    label = ", ".join((command.name, *command.aliases))
    arg = command.arg
    if arg is None:
        return [(label, command.description)]

    ellipsis = "..." if arg.variadic else ""
    if not arg.optional:
        return [(f"{label} <{arg.name}>{ellipsis}", arg.description)]
    return [
        (label, command.description),
        (f"{label} [{arg.name}{ellipsis}]", arg.description),
    ]


def _format_rows(rows: Sequence[tuple[str, str]]) -> list[str]:
    width = max((len(left) for left, _ in rows), default=0)
    pad = " " * _INDENT
    return [f"{pad}{left:<{width}}{pad}{right}".rstrip() for left, right in rows]


def generate_help_text(config: CliConfig) -> str:
    """Build the top-level help screen from *config*."""
    option_rows = [
        (f"--{opt.name}" + (f", -{opt.short}" if opt.short else ""), opt.description)
        for opt in config.options
    ]
    command_rows = [row for cmd in config.commands for row in _command_rows(cmd)]

    lines = [
        f"{config.name}: {config.summary}",
        "",
        f"Usage: {config.name} [OPTIONS] [COMMAND]",
        "",
        "Options:",
        *_format_rows(option_rows),
        "",
        "Commands:",
        *_format_rows(command_rows),
    ]
    return "\n".join(lines)
