import pytest

from testgate.core.pipeline import default_stages, run_pipeline, select_stages
from testgate.core.task_runners import NpmTaskRunner
from testgate.errors import ConfigurationError
from testgate.models.command_result import CommandResult
from testgate.models.task import Task


class DummyExecutor:

	def __init__(self, failing=(), burn_in_codes=()):
		self.failing = set(failing)
		self.burn_in_codes = list(burn_in_codes)
		self.calls = []

	async def run(self, argv, *, timeout=None, capture=False):
		self.calls.append(list(argv))
		if "--project=chromium" in argv and self.burn_in_codes:
			rc = self.burn_in_codes.pop(0)
		else:
			rc = 1 if self.failing.intersection(argv) else 0
		return CommandResult(argv=tuple(argv), returncode=rc)


BURN_IN_TASK = Task(name="test:e2e", args=("--project=chromium", ))
LINT = ["npm", "run", "lint"]
UNIT = ["npm", "run", "test", "--workspaces"]
E2E = ["npm", "run", "test:e2e"]
BURN = ["npm", "run", "test:e2e", "--", "--project=chromium"]


def test_default_stages():
	stages = default_stages(3)
	assert [s.name for s in stages] == ["lint", "unit", "e2e", "burn-in"]
	assert stages[-1].burn_in_iterations == 3
	assert stages[1].task.all_workspaces


def test_select_stages_keeps_order():
	kept, skipped = select_stages(default_stages(), ["e2e", "lint"])
	assert [s.name for s in kept] == ["unit", "burn-in"]
	assert skipped == ["lint", "e2e"]


def test_select_stages_unknown():
	with pytest.raises(ConfigurationError, match="unknown stage"):
		select_stages(default_stages(), ["deploy"])


@pytest.mark.asyncio
async def test_all_stages_pass():
	executor = DummyExecutor()
	result = await run_pipeline(default_stages(3), NpmTaskRunner(executor),
	                            BURN_IN_TASK)
	assert executor.calls == [LINT, UNIT, E2E, BURN, BURN, BURN]
	assert result.success
	assert [r.stage.name for r in result.stages] == [
	    "lint", "unit", "e2e", "burn-in"
	]
	assert result.stages[-1].burn_in.passed == 3


@pytest.mark.asyncio
async def test_halts_at_first_failing_stage():
	executor = DummyExecutor(failing={"--workspaces"})
	result = await run_pipeline(default_stages(3), NpmTaskRunner(executor),
	                            BURN_IN_TASK)
	assert executor.calls == [LINT, UNIT]
	assert result.failed_stage == "unit"
	assert result.success is False


@pytest.mark.asyncio
async def test_burn_in_stage_failure():
	executor = DummyExecutor(burn_in_codes=[0, 1])
	result = await run_pipeline(default_stages(3), NpmTaskRunner(executor),
	                            BURN_IN_TASK)
	assert executor.calls == [LINT, UNIT, E2E, BURN, BURN]
	assert result.failed_stage == "burn-in"
	assert result.stages[-1].burn_in.first_failure == 2


@pytest.mark.asyncio
async def test_skip_stages():
	executor = DummyExecutor()
	result = await run_pipeline(default_stages(2), NpmTaskRunner(executor),
	                            BURN_IN_TASK, skip=["lint", "burn-in"])
	assert executor.calls == [UNIT, E2E]
	assert result.skipped == ["lint", "burn-in"]
	assert result.success


@pytest.mark.asyncio
async def test_unknown_skip_runs_nothing():
	executor = DummyExecutor()
	with pytest.raises(ConfigurationError):
		await run_pipeline(default_stages(), NpmTaskRunner(executor),
		                   BURN_IN_TASK, skip=["nope"])
	assert executor.calls == []


@pytest.mark.asyncio
async def test_burn_in_stage_honours_fail_fast_setting():
	executor = DummyExecutor(burn_in_codes=[1, 0, 0])
	result = await run_pipeline(default_stages(3), NpmTaskRunner(executor),
	                            BURN_IN_TASK, skip=["lint", "unit", "e2e"],
	                            fail_fast=False)
	assert executor.calls == [BURN, BURN, BURN]
	burn_in = result.stages[-1].burn_in
	assert burn_in.executed == 3
	assert burn_in.failed_iterations == [1]
	assert result.failed_stage == "burn-in"
