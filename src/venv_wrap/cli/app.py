"""CLI application entry point and command routing for venv-wrap.

This module is the **sole error boundary** for the entire application.
It catches :class:`~venv_wrap.exceptions.VenvWrapError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core
  services and infrastructure adapters.
* ``print()`` is avoided; the Rich console proxies are used instead.
* This module is the only place that translates between the domain world
  and the OS process exit code.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from venv_wrap.cli import exit_codes
from venv_wrap.cli.console import configure_logging, console, err_console, escape_markup
from venv_wrap.config import DEFAULT_CONFIG, CliConfig, ProjectLayout
from venv_wrap.exceptions import (
    EnvironmentMissingError,
    VenvWrapError,
    missing_environment_hint,
)


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser(config: CliConfig) -> argparse.ArgumentParser:
    """Construct the argument parser described by *config*.

    Help output is rendered by :func:`~venv_wrap.cli.render.generate_help_text`
    rather than argparse, so ``-h`` is a plain flag here.
    """
    parser = argparse.ArgumentParser(prog=config.name, add_help=False)
    for option in config.options:
        flags = [f"--{option.name}"]
        if option.short:
            flags.append(f"-{option.short}")
        parser.add_argument(*flags, action="store_true", help=option.description)

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    for command in config.commands:
        sub = subparsers.add_parser(
            command.name,
            aliases=list(command.aliases),
            help=command.description,
            description=command.description,
        )
        arg = command.arg
        if command.name == "run" and arg is not None:
            sub.add_argument(arg.name, help=arg.description)
            sub.add_argument(
                "script_args",
                nargs=argparse.REMAINDER,
                help="Arguments passed to the script",
            )
        elif arg is not None:
            if arg.variadic:
                nargs = "*" if arg.optional else "+"
            else:
                nargs = "?" if arg.optional else None
            sub.add_argument(arg.name, nargs=nargs, help=arg.description)

        if command.name == "init":
            sub.add_argument("--name", default=None, help="Project name (skips the prompt)")
            sub.add_argument(
                "-y", "--yes",
                action="store_true",
                help="Accept the default project name without prompting",
            )
    return parser


def _require_environment(layout: ProjectLayout) -> None:
    if not layout.has_environment():
        raise EnvironmentMissingError(
            f"No virtual environment found at {layout.venv_path}",
            hint=missing_environment_hint(),
        )


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _reconcile_service(layout: ProjectLayout):
    from venv_wrap.core.reconcile_service import ReconcileService
    from venv_wrap.infra.manifest_store import ManifestStore
    from venv_wrap.infra.pip_tool import PipEnvironmentTool
    from venv_wrap.infra.process_runner import ProcessRunner

    return ReconcileService(
        PipEnvironmentTool(ProcessRunner(layout)),
        ManifestStore(layout.manifest_path),
    )


def _handle_init(layout: ProjectLayout, name: str | None, assume_yes: bool) -> int:
    """Scaffold a new project in the current directory."""
    from venv_wrap.core.scaffold_service import ScaffoldService
    from venv_wrap.infra.process_runner import ProcessRunner
    from venv_wrap.infra.project_workspace import ProjectWorkspace
    from venv_wrap.version import build_version

    console.print(
        "venv-wrap init helps you get started with a minimal project and "
        "tries to guess sensible defaults. Press ^C anytime to quit."
    )
    default_name = layout.root.name
    if name is None:
        if assume_yes:
            name = default_name
        else:
            from venv_wrap.cli.prompt import prompt_project_name

            name = prompt_project_name(default_name)

    service = ScaffoldService(ProjectWorkspace(layout, ProcessRunner(layout)))
    transaction = asyncio.run(service.initialize(name, str(build_version())))

    for path in transaction.created:
        console.print(f"[green]created[/green] {escape_markup(path.name)}")
    console.print(f"\n[bold green]Project {escape_markup(name)} is ready.[/bold green]")
    return exit_codes.SUCCESS


def _handle_run(layout: ProjectLayout, script: str, script_args: list[str]) -> int:
    """Run *script* inside the environment and return its exit code."""
    from venv_wrap.infra.pip_tool import PipEnvironmentTool
    from venv_wrap.infra.process_runner import ProcessRunner

    script_path = Path(script)
    if not script_path.is_absolute():
        script_path = layout.root / script_path
    if not script_path.is_file():
        raise VenvWrapError(f"No script found at {script}")
    _require_environment(layout)

    tool = PipEnvironmentTool(ProcessRunner(layout))
    return asyncio.run(tool.run_script(script_path, script_args))


def _handle_install(layout: ProjectLayout, specs: list[str]) -> int:
    from venv_wrap.cli.render import print_batch

    _require_environment(layout)
    service = _reconcile_service(layout)

    if not specs:
        code = asyncio.run(service.install_all())
        return exit_codes.SUCCESS if code == 0 else exit_codes.GENERAL_ERROR

    result = asyncio.run(service.install(specs))
    print_batch(result)
    return exit_codes.SUCCESS if result.succeeded else exit_codes.GENERAL_ERROR


def _handle_uninstall(layout: ProjectLayout, specs: list[str]) -> int:
    from venv_wrap.cli.render import print_batch

    _require_environment(layout)
    result = asyncio.run(_reconcile_service(layout).uninstall(specs))
    print_batch(result)
    return exit_codes.SUCCESS if result.succeeded else exit_codes.GENERAL_ERROR


def _handle_list(layout: ProjectLayout) -> int:
    from venv_wrap.cli.render import print_packages

    _require_environment(layout)
    packages = asyncio.run(_reconcile_service(layout).list_packages())
    print_packages(packages)
    return exit_codes.SUCCESS


def _handle_update(layout: ProjectLayout) -> int:
    from venv_wrap.cli.render import print_batch

    _require_environment(layout)
    result = asyncio.run(_reconcile_service(layout).update())
    if not result:
        console.print("All packages are up to date.")
        return exit_codes.SUCCESS
    print_batch(result)
    return exit_codes.SUCCESS if result.succeeded else exit_codes.GENERAL_ERROR


def _handle_info(layout: ProjectLayout) -> int:
    """Dispatch the ``info`` diagnostics command."""
    from venv_wrap.cli.info import run_info

    return run_info(layout)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: list[str] | None = None,
    *,
    config: CliConfig = DEFAULT_CONFIG,
    layout: ProjectLayout | None = None,
) -> int:
    """Run the venv-wrap CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.
    config:
        Command-line surface description.
    layout:
        Project paths; defaults to the current working directory.

    Returns
    -------
    int
        OS process exit code.
    """
    from venv_wrap.cli.render import generate_help_text

    parser = _build_parser(config)
    args = parser.parse_args(argv)

    if args.help:
        console.print(generate_help_text(config), markup=False)
        return exit_codes.SUCCESS
    if args.version:
        from venv_wrap.version import build_version

        console.print(str(build_version()), markup=False)
        return exit_codes.SUCCESS

    command = config.command(args.command)
    if command is None:
        console.print(generate_help_text(config), markup=False)
        return exit_codes.SUCCESS

    configure_logging(verbose=args.verbose)
    if layout is None:
        layout = ProjectLayout.from_cwd()

    if command.name == "init":
        return _handle_init(layout, args.name, args.yes)
    if command.name == "run":
        return _handle_run(layout, args.script, list(args.script_args))
    if command.name == "install":
        return _handle_install(layout, list(args.pkg or []))
    if command.name == "uninstall":
        return _handle_uninstall(layout, list(args.pkg))
    if command.name == "list":
        return _handle_list(layout)
    if command.name == "update":
        return _handle_update(layout)
    return _handle_info(layout)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except VenvWrapError as exc:
        err_console.print(f"[bold red]Error:[/bold red] {escape_markup(str(exc))}")
        if exc.hint:
            err_console.print(f"[yellow]Hint:[/yellow] {escape_markup(exc.hint)}")
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        err_console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {escape_markup(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
