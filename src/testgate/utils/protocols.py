"""
Protocol definitions for dependency injection.

Defines the command executor, task runner and reporter interfaces so the
harness, selector and pipeline can be exercised with fakes.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
	from testgate.models.aggregate import AggregateResult
	from testgate.models.change_set import ChangeSet
	from testgate.models.command_result import CommandResult
	from testgate.models.pipeline import PipelineResult, Stage, StageResult
	from testgate.models.run_outcome import RunOutcome
	from testgate.models.scope import ScopeRule
	from testgate.models.selection import (
	    FallbackReason,
	    ScopeRunResult,
	    SelectionResult,
	)
	from testgate.models.task import Task


@runtime_checkable
class CommandExecutor(Protocol):
	"""
	Protocol for the shared command-execution primitive.

	Runs one external command to completion and reports its exit status.
	"""

	async def run(self, argv: Sequence[str], *, timeout: float | None = None,
	              capture: bool = False) -> CommandResult:
		"""Run argv to completion and return its result."""
		...


@runtime_checkable
class TaskRunner(Protocol):
	"""
	Protocol for something that can execute a named task.

	One implementation exists per package manager; the core logic never
	depends on a specific tool's command-line conventions.
	"""

	name: str
	executor: CommandExecutor

	def command_for(self, task: Task) -> list[str]:
		"""Build the argv that runs the task."""
		...

	async def run(self, task: Task, *, timeout: float | None = None,
	              capture: bool = False) -> CommandResult:
		"""Run the task and return its result."""
		...


class Reporter(Protocol):
	"""Receives progress events from the harness, selector and pipeline."""

	def burn_in_started(self, iterations: int, label: str) -> None:
		...

	def iteration_started(self, iteration: int, total: int) -> None:
		...

	def iteration_finished(self, outcome: RunOutcome, total: int) -> None:
		...

	def burn_in_finished(self, result: AggregateResult) -> None:
		...

	def changes_detected(self, change_set: ChangeSet) -> None:
		...

	def scope_started(self, scope: ScopeRule, label: str) -> None:
		...

	def scope_finished(self, run: ScopeRunResult) -> None:
		...

	def fallback_started(self, reason: FallbackReason, label: str) -> None:
		...

	def fallback_finished(self, result: CommandResult) -> None:
		...

	def notice(self, message: str) -> None:
		...

	def selection_finished(self, result: SelectionResult) -> None:
		...

	def stage_started(self, index: int, stage: Stage) -> None:
		...

	def stage_finished(self, index: int, result: StageResult) -> None:
		...

	def pipeline_finished(self, result: PipelineResult) -> None:
		...


__all__ = ["CommandExecutor", "TaskRunner", "Reporter"]
