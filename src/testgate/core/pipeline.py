"""
Local CI mirror.

Runs the CI stages in order on a developer machine and halts at the
first failing stage.
"""

from __future__ import annotations

from collections.abc import Sequence

from testgate.core.burn_in import run_burn_in
from testgate.errors import ConfigurationError
from testgate.models.pipeline import PipelineResult, Stage, StageResult
from testgate.models.task import Task
from testgate.utils.logging import get_logger
from testgate.utils.protocols import Reporter, TaskRunner

logger = get_logger(__name__)


def default_stages(burn_in_iterations: int = 3) -> list[Stage]:
	"""Return the CI stages: lint, unit, e2e, then a short burn-in."""
	return [
	    Stage(name="lint", title="Lint & Code Quality", task=Task(name="lint")),
	    Stage(
	        name="unit",
	        title="Unit & Integration Tests",
	        task=Task(name="test", all_workspaces=True),
	    ),
	    Stage(name="e2e", title="E2E Tests", task=Task(name="test:e2e")),
	    Stage(
	        name="burn-in",
	        title=f"Burn-in ({burn_in_iterations} iterations)",
	        burn_in_iterations=burn_in_iterations,
	    ),
	]


def select_stages(stages: Sequence[Stage],
                  skip: Sequence[str] = ()) -> tuple[list[Stage], list[str]]:
	"""
	Drop skipped stages, keeping the order of the rest.

	Parameters:
		stages: All stages.
		skip: Names of stages to leave out.

	Returns:
		Tuple of (stages to run, names skipped).

	Raises:
		ConfigurationError: If a skip name matches no stage.
	"""
	names = [s.name for s in stages]
	unknown = [n for n in skip if n not in names]
	if unknown:
		raise ConfigurationError(f"unknown stage(s): {', '.join(unknown)} "
		                         f"(stages: {', '.join(names)})")
	kept = [s for s in stages if s.name not in skip]
	return kept, [n for n in names if n in skip]


async def run_pipeline(
    stages: Sequence[Stage],
    runner: TaskRunner,
    burn_in_task: Task,
    *,
    skip: Sequence[str] = (),
    timeout: float | None = None,
    capture: bool = False,
    fail_fast: bool = True,
    reporter: Reporter | None = None,
) -> PipelineResult:
	"""
	Run stages in order until one fails.

	Parameters:
		stages: Stages to run.
		runner: Task runner for the workspace's package manager.
		burn_in_task: Task repeated by burn-in stages.
		skip: Stage names to leave out.
		timeout: Optional per-command timeout in seconds.
		capture: Capture command output.
		fail_fast: Stop burn-in stages at their first failing iteration.
		reporter: Optional progress reporter.

	Returns:
		PipelineResult with one entry per stage that ran.
	"""
	kept, skipped = select_stages(stages, skip)
	result = PipelineResult(skipped=skipped)
	for index, stage in enumerate(kept, start=1):
		if reporter:
			reporter.stage_started(index, stage)
		logger.info("stage %d %s start", index, stage.name)
		if stage.is_burn_in:
			aggregate = await run_burn_in(
			    runner.command_for(burn_in_task),
			    stage.burn_in_iterations,
			    runner.executor,
			    timeout=timeout,
			    capture=capture,
			    fail_fast=fail_fast,
			    reporter=reporter,
			    label=burn_in_task.label,
			)
			stage_result = StageResult(stage=stage, burn_in=aggregate)
		else:
			cmd = await runner.run(stage.task, timeout=timeout,
			                       capture=capture)
			stage_result = StageResult(stage=stage, command=cmd)
		result.stages.append(stage_result)
		if reporter:
			reporter.stage_finished(index, stage_result)
		if not stage_result.success:
			logger.warning("stage %s failed, halting pipeline", stage.name)
			break
	if reporter:
		reporter.pipeline_finished(result)
	return result


__all__ = ["default_stages", "select_stages", "run_pipeline"]
