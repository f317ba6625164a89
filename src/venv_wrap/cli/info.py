"""``venv-wrap info`` — project and environment diagnostics.

Gathers information about the current project and renders a Rich table
(or a plain table when Rich is missing).  No business logic resides
here; it purely collects and displays diagnostic data.
"""

from __future__ import annotations

import asyncio

from venv_wrap.cli import exit_codes
from venv_wrap.cli.console import console
from venv_wrap.config import ProjectLayout
from venv_wrap.exceptions import VenvWrapError
from venv_wrap.infra.manifest_store import ManifestStore
from venv_wrap.infra.pip_tool import PipEnvironmentTool
from venv_wrap.infra.process_runner import ProcessRunner
from venv_wrap.version import build_version

Row = tuple[str, str, str]


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _environment_row(layout: ProjectLayout) -> Row:
    if layout.has_environment():
        return "Environment", str(layout.venv_path), "[green]OK[/green]"
    return "Environment", f"{layout.venv_path} (missing)", "[red]FAIL[/red]"


def _manifest_row(layout: ProjectLayout) -> Row:
    store = ManifestStore(layout.manifest_path)
    if not store.exists():
        return "Manifest", f"{layout.manifest_name} (missing)", "[yellow]WARN[/yellow]"
    count = len(store.read())
    return "Manifest", f"{layout.manifest_name} ({count} requirement(s))", "[green]OK[/green]"


async def _tool_rows(layout: ProjectLayout) -> list[Row]:
    """Ask the environment for its python and pip versions."""
    if not layout.has_environment():
        return []
    tool = PipEnvironmentTool(ProcessRunner(layout))
    rows: list[Row] = []
    for label, query in (("Python", tool.python_version), ("pip", tool.tool_version)):
        try:
            rows.append((label, await query(), "[green]OK[/green]"))
        except VenvWrapError as exc:
            rows.append((label, str(exc), "[red]FAIL[/red]"))
    return rows


def collect_rows(layout: ProjectLayout) -> list[Row]:
    rows: list[Row] = [
        ("venv-wrap", str(build_version()), "[green]OK[/green]"),
        ("Project", str(layout.root), "[green]OK[/green]"),
        _environment_row(layout),
    ]
    rows.extend(asyncio.run(_tool_rows(layout)))
    rows.append(_manifest_row(layout))
    return rows


def _status_plain(status: str) -> str:
    """Convert rich-markup status to plain text."""
    for word in ("FAIL", "WARN", "OK"):
        if word in status:
            return word
    return status


def _print_plain_table(rows: list[Row]) -> None:
    """Render info output without Rich."""
    print("\nvenv-wrap info")
    print("=" * 64)
    print(f"{'Component':<12} {'Value':<42} {'Status':<8}")
    print("-" * 64)
    for label, value, status in rows:
        print(f"{label:<12} {value:<42} {_status_plain(status):<8}")
    print()


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def run_info(layout: ProjectLayout) -> int:
    """Render the info table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` when no check failed,
        :data:`exit_codes.GENERAL_ERROR` otherwise.
    """
    rows = collect_rows(layout)
    has_failure = any("FAIL" in status for _, _, status in rows)

    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_table(rows)
    else:
        table = Table(
            title="venv-wrap info",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=12)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)
        for label, value, status in rows:
            table.add_row(label, value, status)
        console.print(table)

    if has_failure:
        return exit_codes.GENERAL_ERROR
    return exit_codes.SUCCESS
