"""Interactive prompts for ``venv-wrap init``."""

from __future__ import annotations

from typing import Any

from venv_wrap.exceptions import EnvironmentError, VenvWrapError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
            hint="Or pass --name/--yes to skip the prompt.",
        ) from exc
    return questionary


def prompt_project_name(default: str) -> str:
    """Ask for the project name, offering *default*.

    Raises
    ------
    VenvWrapError
        If the user cancels the prompt (Esc / None return).
    """
    questionary = _import_questionary()

    answer: str | None = questionary.text("Project name", default=default).ask()
    if answer is None:
        raise VenvWrapError(
            "No project name given.",
            hint="Press Enter to accept the default name.",
        )
    return answer.strip() or default
