"""Tests for structured child-process invocation.

Real child processes are spawned only with ``sys.executable``; the
environment is faked with a bare ``.venv/bin/activate`` marker.

Coverage:
* Activation overlay and executable resolution.
* Missing-environment sentinel and error.
* Captured output, exit codes and error messages.
* Spawn failures.
"""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from venv_wrap.config import ProjectLayout
from venv_wrap.exceptions import EnvironmentMissingError, ToolExecutionError
from venv_wrap.infra.process_runner import (
    ENVIRONMENT_MISSING_EXIT_CODE,
    ProcessCommand,
    ProcessOutput,
    ProcessRunner,
    _merge_env,
    tool_error,
)


def _py(runner: ProcessRunner, code: str) -> ProcessCommand:
    return runner.command(sys.executable, "-c", code)


# ---------------------------------------------------------------------------
# Command construction
# ---------------------------------------------------------------------------

class TestCommand:
    def test_activation_overlay(self, layout: ProjectLayout) -> None:
        env = ProcessRunner(layout).activation_env()
        assert env["VIRTUAL_ENV"] == str(layout.venv_path)
        assert env["PATH"].split(os.pathsep)[0] == str(layout.bin_dir)
        assert env["PYTHONHOME"] is None

    def test_command_runs_in_project_root(self, layout: ProjectLayout) -> None:
        command = ProcessRunner(layout).command("pip", "list")
        assert command.cwd == layout.root
        assert command.args == ("list",)

    def test_extra_env_is_merged(self, layout: ProjectLayout) -> None:
        command = ProcessRunner(layout).command("pip", extra_env={"PIP_NO_INPUT": "1"})
        assert command.env["PIP_NO_INPUT"] == "1"
        assert "VIRTUAL_ENV" in command.env

    def test_host_command_has_no_overlay(self, layout: ProjectLayout) -> None:
        command = ProcessRunner(layout).host_command("git", "init")
        assert command.env == {}
        assert command.argv() == ["git", "init"]
        assert command.display() == "git init"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX executable bit")
    def test_bare_name_resolves_inside_environment(self, fake_env: ProjectLayout) -> None:
        pip = fake_env.bin_dir / "pip"
        pip.write_text("#!/bin/sh\n", encoding="utf-8")
        pip.chmod(0o755)
        command = ProcessRunner(fake_env).command("pip", "list")
        assert command.executable == str(pip)

    def test_bare_name_outside_environment_is_unchanged(self, layout: ProjectLayout) -> None:
        assert ProcessRunner(layout).command("git").executable == "git"

    def test_merge_env_removes_none_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PYTHONHOME", "/somewhere")
        merged = _merge_env({"PYTHONHOME": None, "VIRTUAL_ENV": "/venv"})
        assert "PYTHONHOME" not in merged
        assert merged["VIRTUAL_ENV"] == "/venv"
        assert os.environ["PYTHONHOME"] == "/somewhere"


# ---------------------------------------------------------------------------
# Missing environment
# ---------------------------------------------------------------------------

class TestMissingEnvironment:
    def test_run_returns_sentinel_without_spawning(self, layout: ProjectLayout) -> None:
        runner = ProcessRunner(layout)
        with patch("asyncio.create_subprocess_exec") as spawn:
            code = asyncio.run(runner.run(_py(runner, "pass")))
        assert code == ENVIRONMENT_MISSING_EXIT_CODE
        spawn.assert_not_called()

    def test_run_capture_raises_without_spawning(self, layout: ProjectLayout) -> None:
        runner = ProcessRunner(layout)
        with patch("asyncio.create_subprocess_exec") as spawn:
            with pytest.raises(EnvironmentMissingError) as exc_info:
                asyncio.run(runner.run_capture(_py(runner, "pass")))
        spawn.assert_not_called()
        assert exc_info.value.hint is not None

    def test_capture_outside_environment_is_allowed(self, layout: ProjectLayout) -> None:
        runner = ProcessRunner(layout)
        command = runner.host_command(sys.executable, "-c", "print('hi')")
        output = asyncio.run(runner.capture(command, require_environment=False))
        assert output.ok
        assert output.stdout.strip() == "hi"


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------

class TestExecution:
    def test_run_returns_exit_code(self, fake_env: ProjectLayout) -> None:
        runner = ProcessRunner(fake_env)
        assert asyncio.run(runner.run(_py(runner, "import sys; sys.exit(3)"))) == 3

    def test_run_capture_returns_trimmed_stdout(self, fake_env: ProjectLayout) -> None:
        runner = ProcessRunner(fake_env)
        out = asyncio.run(runner.run_capture(_py(runner, "print('  hello  ')")))
        assert out == "hello"

    def test_child_sees_activation_overlay(self, fake_env: ProjectLayout) -> None:
        runner = ProcessRunner(fake_env)
        out = asyncio.run(
            runner.run_capture(_py(runner, "import os; print(os.environ['VIRTUAL_ENV'])"))
        )
        assert out == str(fake_env.venv_path)

    def test_child_runs_in_project_root(self, fake_env: ProjectLayout) -> None:
        runner = ProcessRunner(fake_env)
        out = asyncio.run(runner.run_capture(_py(runner, "import os; print(os.getcwd())")))
        assert Path(out).resolve() == fake_env.root.resolve()

    def test_failure_message_is_stderr(self, fake_env: ProjectLayout) -> None:
        runner = ProcessRunner(fake_env)
        code = "import sys; sys.stderr.write('  boom  \\n'); sys.exit(2)"
        with pytest.raises(ToolExecutionError) as exc_info:
            asyncio.run(runner.run_capture(_py(runner, code)))
        assert str(exc_info.value) == "boom"
        assert exc_info.value.returncode == 2

    def test_failure_without_stderr_mentions_exit_code(self, fake_env: ProjectLayout) -> None:
        runner = ProcessRunner(fake_env)
        with pytest.raises(ToolExecutionError, match="exit code 4"):
            asyncio.run(runner.run_capture(_py(runner, "import sys; sys.exit(4)")))

    def test_capture_keeps_streams_separate(self, fake_env: ProjectLayout) -> None:
        runner = ProcessRunner(fake_env)
        code = "import sys; print('out'); sys.stderr.write('err')"
        output = asyncio.run(runner.capture(_py(runner, code)))
        assert output == ProcessOutput(returncode=0, stdout=output.stdout, stderr="err")
        assert output.stdout.strip() == "out"

    def test_unspawnable_executable(self, fake_env: ProjectLayout) -> None:
        runner = ProcessRunner(fake_env)
        command = runner.command(str(fake_env.root / "no-such-tool"))
        with pytest.raises(ToolExecutionError, match="Could not start"):
            asyncio.run(runner.run_capture(command))


class TestToolError:
    def test_stderr_preferred(self) -> None:
        error = tool_error(ProcessCommand("pip"), ProcessOutput(1, "", "ERROR: nope\n"))
        assert str(error) == "ERROR: nope"
        assert error.returncode == 1

    def test_generic_message(self) -> None:
        error = tool_error(ProcessCommand("pip", ("install", "x")), ProcessOutput(9, "", " "))
        assert str(error) == "`pip install x` failed with exit code 9"
