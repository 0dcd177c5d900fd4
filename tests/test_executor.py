"""Tests for the shared command-execution primitive."""

from __future__ import annotations

import asyncio
import os
import sys
from pathlib import Path

import pytest

from testgate.core.executor import SubprocessExecutor
from testgate.errors import ConfigurationError
from testgate.utils.protocols import CommandExecutor

PY = sys.executable


def _py(code: str) -> list[str]:
	return [PY, "-c", code]


def test_satisfies_protocol():
	assert isinstance(SubprocessExecutor(), CommandExecutor)


@pytest.mark.asyncio
async def test_zero_exit_is_success():
	res = await SubprocessExecutor().run(_py("pass"))
	assert res.success is True
	assert res.returncode == 0
	assert res.output is None
	assert res.argv[0] == PY


@pytest.mark.asyncio
async def test_non_zero_exit_is_failure():
	res = await SubprocessExecutor().run(_py("import sys; sys.exit(3)"))
	assert res.success is False
	assert res.returncode == 3
	assert res.error is None
	assert res.status_text == "exit code 3"


@pytest.mark.asyncio
async def test_missing_binary_is_failure_not_exception():
	res = await SubprocessExecutor().run(["definitely-not-a-real-binary-xyz"])
	assert res.success is False
	assert res.returncode is None
	assert "FileNotFoundError" in res.error
	assert res.status_text.startswith("could not start")


@pytest.mark.asyncio
async def test_capture_keeps_stdout_and_stderr_apart():
	code = ("import sys; print('out'); "
	        "print('warning: noise', file=sys.stderr)")
	res = await SubprocessExecutor().run(_py(code), capture=True)
	assert res.success
	assert res.output == "out\n"
	assert res.stderr == "warning: noise\n"


@pytest.mark.asyncio
async def test_no_capture_leaves_streams_unset():
	res = await SubprocessExecutor().run(_py("pass"))
	assert res.output is None
	assert res.stderr is None


@pytest.mark.asyncio
async def test_runs_in_cwd(tmp_path):
	code = "import os; print(os.getcwd())"
	res = await SubprocessExecutor(cwd=tmp_path).run(_py(code), capture=True)
	assert Path(res.output.strip()).resolve() == tmp_path.resolve()


@pytest.mark.asyncio
async def test_env_is_merged_with_parent():
	code = ("import os; "
	        "print(os.environ['TESTGATE_MARK'], bool(os.environ.get('PATH')))")
	res = await SubprocessExecutor(env={
	    "TESTGATE_MARK": "hello"
	}).run(_py(code), capture=True)
	assert res.output.split() == ["hello", "True"]


@pytest.mark.asyncio
async def test_timeout_terminates_and_fails():
	executor = SubprocessExecutor(kill_grace_seconds=2)
	res = await executor.run(_py("import time; time.sleep(30)"), timeout=0.5)
	assert res.success is False
	assert res.timed_out is True
	assert res.returncode is None
	assert res.duration_seconds < 10


@pytest.mark.asyncio
async def test_timeout_not_hit_for_fast_command():
	res = await SubprocessExecutor().run(_py("pass"), timeout=30)
	assert res.success is True
	assert res.timed_out is False


@pytest.mark.asyncio
async def test_empty_argv_is_configuration_error():
	with pytest.raises(ConfigurationError):
		await SubprocessExecutor().run([])


@pytest.mark.asyncio
async def test_cancellation_terminates_child(tmp_path):
	marker = tmp_path / "pid"
	code = ("import os, sys, time; "
	        f"open({str(marker)!r}, 'w').write(str(os.getpid())); "
	        "time.sleep(30)")
	executor = SubprocessExecutor(kill_grace_seconds=2)
	task = asyncio.create_task(executor.run(_py(code)))
	for _ in range(100):
		if marker.exists() and marker.read_text():
			break
		await asyncio.sleep(0.05)
	task.cancel()
	with pytest.raises(asyncio.CancelledError):
		await task
	pid = int(marker.read_text())
	# reaped, so the pid no longer exists
	with pytest.raises(ProcessLookupError):
		os.kill(pid, 0)
