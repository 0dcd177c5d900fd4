"""Tests for the package-manager task runner adapters."""

from __future__ import annotations

import pytest

from testgate.core.task_runners import (
    NpmTaskRunner,
    PnpmTaskRunner,
    YarnTaskRunner,
    create_task_runner,
)
from testgate.errors import ConfigurationError
from testgate.models.command_result import CommandResult
from testgate.models.task import PackageManager, Task
from testgate.utils.protocols import TaskRunner


class RecordingExecutor:

	def __init__(self, returncode: int = 0):
		self.returncode = returncode
		self.calls = []

	async def run(self, argv, *, timeout=None, capture=False):
		self.calls.append((list(argv), timeout, capture))
		return CommandResult(argv=tuple(argv), returncode=self.returncode)


E2E = Task(name="test:e2e", args=("--project=chromium",))
BACKEND = Task(name="test", workspace="backend")
ALL = Task(name="test", all_workspaces=True)
LINT = Task(name="lint")


class TestNpm:

	def test_plain_script(self):
		assert NpmTaskRunner(None).command_for(LINT) == ["npm", "run", "lint"]

	def test_args_after_double_dash(self):
		assert NpmTaskRunner(None).command_for(E2E) == [
		    "npm", "run", "test:e2e", "--", "--project=chromium"
		]

	def test_workspace(self):
		assert NpmTaskRunner(None).command_for(BACKEND) == [
		    "npm", "run", "test", "--workspace=backend"
		]

	def test_all_workspaces(self):
		assert NpmTaskRunner(None).command_for(ALL) == [
		    "npm", "run", "test", "--workspaces"
		]


class TestPnpm:

	def test_workspace_filter(self):
		assert PnpmTaskRunner(None).command_for(BACKEND) == [
		    "pnpm", "--filter", "backend", "run", "test"
		]

	def test_recursive(self):
		assert PnpmTaskRunner(None).command_for(ALL) == [
		    "pnpm", "-r", "run", "test"
		]

	def test_args_passed_directly(self):
		assert PnpmTaskRunner(None).command_for(E2E) == [
		    "pnpm", "run", "test:e2e", "--project=chromium"
		]


class TestYarn:

	def test_workspace(self):
		assert YarnTaskRunner(None).command_for(BACKEND) == [
		    "yarn", "workspace", "backend", "run", "test"
		]

	def test_all_workspaces(self):
		assert YarnTaskRunner(None).command_for(ALL) == [
		    "yarn", "workspaces", "foreach", "--all", "run", "test"
		]

	def test_plain_script(self):
		assert YarnTaskRunner(None).command_for(E2E) == [
		    "yarn", "run", "test:e2e", "--project=chromium"
		]


@pytest.mark.parametrize("name, cls", [
    ("npm", NpmTaskRunner),
    ("pnpm", PnpmTaskRunner),
    (PackageManager.YARN, YarnTaskRunner),
])
def test_create_task_runner(name, cls):
	executor = RecordingExecutor()
	runner = create_task_runner(name, executor)
	assert isinstance(runner, cls)
	assert isinstance(runner, TaskRunner)
	assert runner.executor is executor


def test_create_task_runner_unknown():
	with pytest.raises(ConfigurationError, match="bun"):
		create_task_runner("bun", RecordingExecutor())


@pytest.mark.asyncio
async def test_run_delegates_to_executor():
	executor = RecordingExecutor(returncode=2)
	runner = NpmTaskRunner(executor)
	res = await runner.run(BACKEND, timeout=5, capture=True)
	assert res.success is False
	assert executor.calls == [(["npm", "run", "test", "--workspace=backend"],
	                           5, True)]
