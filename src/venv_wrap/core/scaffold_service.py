"""Core scaffold service — all-or-nothing project initialisation.

Steps run in a fixed order:

1. copy template files
2. create the virtual environment
3. create an empty manifest
4. create the entry-point script
5. initialise version control

Before a step runs, the paths it will create are recorded in the
:class:`~venv_wrap.core.models.ScaffoldTransaction` — except paths that
already exist, which belong to the user and are never rolled back.  When
any step fails, every recorded path is removed and a
:class:`~venv_wrap.exceptions.ScaffoldStepError` is raised.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from venv_wrap.core.models import ScaffoldTransaction
from venv_wrap.core.protocols import ScaffoldWorkspace
from venv_wrap.exceptions import ScaffoldStepError

logger = logging.getLogger(__name__)


class ScaffoldService:
    """Creates a new project through a :class:`ScaffoldWorkspace`.

    Parameters
    ----------
    workspace:
        Performs the actual filesystem and process work.
    """

    def __init__(self, workspace: ScaffoldWorkspace) -> None:
        self._workspace: ScaffoldWorkspace = workspace

    async def initialize(self, project_name: str, version: str) -> ScaffoldTransaction:
        """Run every scaffold step, rolling back on the first failure.

        Parameters
        ----------
        project_name:
            Substituted for ``{{project_name}}`` in the templates.
        version:
            Substituted for ``{{venv_version}}`` in the templates.

        Returns
        -------
        ScaffoldTransaction
            The log of everything that was created.

        Raises
        ------
        ScaffoldStepError
            When a step fails.  Everything recorded so far has been
            removed by the time this is raised.
        """
        ws = self._workspace
        steps: list[tuple[str, Callable[[], list[Path]], Callable[[], Awaitable[None]]]] = [
            (
                "copy template files",
                ws.plan_templates,
                lambda: ws.copy_templates(project_name, version),
            ),
            ("create virtual environment", ws.plan_environment, ws.create_environment),
            ("create manifest", ws.plan_manifest, ws.create_manifest),
            ("create entry point", ws.plan_entry_point, ws.create_entry_point),
            ("initialize git repository", ws.plan_vcs, ws.init_vcs),
        ]

        transaction = ScaffoldTransaction()
        for step, plan, action in steps:
            for path in plan():
                if not path.exists():
                    transaction.record(path)
            try:
                await action()
            except Exception as exc:
                await self.rollback(transaction)
                raise ScaffoldStepError(
                    f"Failed to {step}: {exc}",
                    step=step,
                    hint="All files created by init have been removed.",
                ) from exc
            transaction.completed_steps.append(step)
            logger.debug("scaffold step done: %s", step)

        return transaction

    async def rollback(self, transaction: ScaffoldTransaction) -> None:
        """Remove every path in *transaction*, most recent first.

        Removal can walk a whole environment tree, so it runs in a worker
        thread.
        """
        logger.warning("Rolling back %d created path(s)...", len(transaction))
        for path in reversed(transaction.created):
            try:
                await asyncio.to_thread(self._workspace.remove, path)
            except OSError as exc:
                logger.error("Could not remove %s during rollback: %s", path, exc)
