"""
Local CI pipeline models.

Stages run in order; the first failing stage halts the rest.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from .aggregate import AggregateResult
from .command_result import CommandResult
from .task import Task


class Stage(BaseModel):
	"""One pipeline stage: a task, or a burn-in over the burn-in task."""

	name: str = Field(min_length=1)
	title: str
	task: Task | None = None
	burn_in_iterations: int | None = Field(default=None, ge=1)

	@model_validator(mode="after")
	def check_kind(self) -> "Stage":
		if (self.task is None) == (self.burn_in_iterations is None):
			raise ValueError(
			    f"stage {self.name!r} needs exactly one of task or "
			    "burn_in_iterations")
		return self

	@property
	def is_burn_in(self) -> bool:
		return self.burn_in_iterations is not None


class StageResult(BaseModel):
	"""Result of one stage."""

	stage: Stage
	command: CommandResult | None = None
	burn_in: AggregateResult | None = None

	@property
	def success(self) -> bool:
		if self.burn_in is not None:
			return self.burn_in.success
		return self.command is not None and self.command.success

	@property
	def duration_seconds(self) -> float:
		if self.burn_in is not None:
			return self.burn_in.duration_seconds
		return self.command.duration_seconds if self.command else 0.0


class PipelineResult(BaseModel):
	"""Results of the stages that ran."""

	stages: list[StageResult] = Field(default_factory=list)
	skipped: list[str] = Field(default_factory=list)

	@property
	def failed_stage(self) -> str | None:
		for res in self.stages:
			if not res.success:
				return res.stage.name
		return None

	@property
	def success(self) -> bool:
		return self.failed_stage is None


__all__ = ["Stage", "StageResult", "PipelineResult"]
