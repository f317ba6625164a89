"""Tests for transactional project initialisation.

Coverage:
* Step order and the transaction log.
* Rollback on failure, most recent path first.
* Pre-existing paths are never recorded or removed.
* Rollback removal runs off the event-loop thread.
* A real ProjectWorkspace leaves no residue when environment creation fails.
* Template rendering.
"""

from __future__ import annotations

import asyncio
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from venv_wrap.config import ProjectLayout
from venv_wrap.core.models import ScaffoldTransaction
from venv_wrap.core.scaffold_service import ScaffoldService
from venv_wrap.exceptions import ScaffoldStepError, ToolExecutionError
from venv_wrap.infra.process_runner import ProcessRunner
from venv_wrap.infra.project_workspace import ProjectWorkspace, render_template


class FakeWorkspace:
    """Creates plain files/directories under *root*; one step may fail."""

    def __init__(self, root: Path, fail_on: str | None = None) -> None:
        self.root = root
        self.fail_on = fail_on
        self.calls: list[str] = []
        self.removed: list[Path] = []

    async def _act(self, step: str, path: Path, *, directory: bool = False) -> None:
        self.calls.append(step)
        if directory:
            path.mkdir(exist_ok=True)
        else:
            path.touch()
        if step == self.fail_on:
            raise ToolExecutionError(f"{step} exploded")

    def plan_templates(self) -> list[Path]:
        return [self.root / "README.md"]

    async def copy_templates(self, project_name: str, version: str) -> None:
        await self._act("templates", self.root / "README.md")

    def plan_environment(self) -> list[Path]:
        return [self.root / ".venv"]

    async def create_environment(self) -> None:
        await self._act("environment", self.root / ".venv", directory=True)

    def plan_manifest(self) -> list[Path]:
        return [self.root / "requirements.txt"]

    async def create_manifest(self) -> None:
        await self._act("manifest", self.root / "requirements.txt")

    def plan_entry_point(self) -> list[Path]:
        return [self.root / "main.py"]

    async def create_entry_point(self) -> None:
        await self._act("entry", self.root / "main.py")

    def plan_vcs(self) -> list[Path]:
        return [self.root / ".git"]

    async def init_vcs(self) -> None:
        await self._act("vcs", self.root / ".git", directory=True)

    def remove(self, path: Path) -> None:
        self.removed.append(path)
        if path.is_dir():
            path.rmdir()
        else:
            path.unlink(missing_ok=True)


# ---------------------------------------------------------------------------
# ScaffoldService with a fake workspace
# ---------------------------------------------------------------------------

class TestScaffoldService:
    def test_runs_steps_in_order(self, tmp_path: Path) -> None:
        ws = FakeWorkspace(tmp_path)
        txn = asyncio.run(ScaffoldService(ws).initialize("demo", "0.1.0"))
        assert ws.calls == ["templates", "environment", "manifest", "entry", "vcs"]
        assert txn.created == [
            tmp_path / "README.md",
            tmp_path / ".venv",
            tmp_path / "requirements.txt",
            tmp_path / "main.py",
            tmp_path / ".git",
        ]
        assert len(txn.completed_steps) == 5

    def test_failure_rolls_back_in_reverse(self, tmp_path: Path) -> None:
        ws = FakeWorkspace(tmp_path, fail_on="manifest")
        with pytest.raises(ScaffoldStepError) as exc_info:
            asyncio.run(ScaffoldService(ws).initialize("demo", "0.1.0"))

        assert exc_info.value.step == "create manifest"
        assert isinstance(exc_info.value.__cause__, ToolExecutionError)
        assert ws.removed == [
            tmp_path / "requirements.txt",
            tmp_path / ".venv",
            tmp_path / "README.md",
        ]
        assert list(tmp_path.iterdir()) == []
        assert "entry" not in ws.calls

    def test_existing_paths_are_left_alone(self, tmp_path: Path) -> None:
        (tmp_path / "README.md").write_text("mine", encoding="utf-8")
        ws = FakeWorkspace(tmp_path, fail_on="environment")
        with pytest.raises(ScaffoldStepError):
            asyncio.run(ScaffoldService(ws).initialize("demo", "0.1.0"))
        assert (tmp_path / "README.md").read_text(encoding="utf-8") == "mine"
        assert ws.removed == [tmp_path / ".venv"]

    def test_failing_removal_is_logged_not_raised(self, tmp_path: Path) -> None:
        ws = FakeWorkspace(tmp_path, fail_on="entry")
        with patch.object(ws, "remove", side_effect=OSError("busy")):
            with pytest.raises(ScaffoldStepError, match="create entry point"):
                asyncio.run(ScaffoldService(ws).initialize("demo", "0.1.0"))

    def test_rollback_removes_off_the_event_loop_thread(self, tmp_path: Path) -> None:
        ws = FakeWorkspace(tmp_path, fail_on="environment")
        threads: list[int] = []
        remove = ws.remove

        def record_thread(path: Path) -> None:
            threads.append(threading.get_ident())
            remove(path)

        loop_thread: list[int] = []

        async def run() -> None:
            loop_thread.append(threading.get_ident())
            await ScaffoldService(ws).initialize("demo", "0.1.0")

        with patch.object(ws, "remove", side_effect=record_thread):
            with pytest.raises(ScaffoldStepError):
                asyncio.run(run())

        assert len(threads) == 2
        assert loop_thread[0] not in threads
        assert list(tmp_path.iterdir()) == []

    def test_rollback_is_awaitable(self, tmp_path: Path) -> None:
        (tmp_path / "a").touch()
        ws = FakeWorkspace(tmp_path)
        txn = ScaffoldTransaction()
        txn.record(tmp_path / "a")
        asyncio.run(ScaffoldService(ws).rollback(txn))
        assert ws.removed == [tmp_path / "a"]
        assert not (tmp_path / "a").exists()


# ---------------------------------------------------------------------------
# Real ProjectWorkspace
# ---------------------------------------------------------------------------

def _workspace(root: Path, python: str = "python3") -> ProjectWorkspace:
    layout = ProjectLayout(root=root, python=python)
    return ProjectWorkspace(layout, ProcessRunner(layout))


class TestProjectWorkspace:
    def test_environment_failure_leaves_no_residue(self, tmp_path: Path) -> None:
        ws = _workspace(tmp_path, python=str(tmp_path.parent / "no-such-python"))
        with pytest.raises(ScaffoldStepError) as exc_info:
            asyncio.run(ScaffoldService(ws).initialize("demo", "0.1.0"))
        assert exc_info.value.step == "create virtual environment"
        assert list(tmp_path.iterdir()) == []

    def test_successful_scaffold(self, tmp_path: Path) -> None:
        ws = _workspace(tmp_path)

        async def fake_env() -> None:
            layout = ProjectLayout(root=tmp_path)
            layout.bin_dir.mkdir(parents=True)
            layout.marker.touch()

        async def fake_git() -> None:
            (tmp_path / ".git").mkdir()

        with patch.object(ws, "create_environment", fake_env), \
                patch.object(ws, "init_vcs", fake_git):
            txn = asyncio.run(ScaffoldService(ws).initialize("demo", "1.2.3+abc"))

        readme = (tmp_path / "README.md").read_text(encoding="utf-8")
        assert "# demo" in readme
        assert "1.2.3+abc" in readme
        assert "{{" not in readme
        assert (tmp_path / ".gitignore").is_file()
        assert (tmp_path / "requirements.txt").read_text(encoding="utf-8") == ""
        assert (tmp_path / "main.py").is_file()
        assert tmp_path / ".venv" in txn.created

    def test_existing_template_target_is_not_overwritten(self, tmp_path: Path) -> None:
        (tmp_path / "README.md").write_text("keep me", encoding="utf-8")
        ws = _workspace(tmp_path)
        asyncio.run(ws.copy_templates("demo", "0.1.0"))
        assert (tmp_path / "README.md").read_text(encoding="utf-8") == "keep me"
        assert (tmp_path / ".gitignore").is_file()

    def test_remove_handles_files_and_directories(self, tmp_path: Path) -> None:
        ws = _workspace(tmp_path)
        nested = tmp_path / "dir" / "sub"
        nested.mkdir(parents=True)
        (nested / "f").touch()
        single = tmp_path / "file.txt"
        single.touch()
        ws.remove(tmp_path / "dir")
        ws.remove(single)
        ws.remove(tmp_path / "never-existed")
        assert list(tmp_path.iterdir()) == []


def test_render_template_substitutes_tokens() -> None:
    text = "{{project_name}} v{{venv_version}} / {{project_name}}"
    assert render_template(text, "demo", "0.1.0") == "demo v0.1.0 / demo"
