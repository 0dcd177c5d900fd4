"""
Run outcome model.

Defines the result of a single burn-in iteration.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .command_result import CommandResult


class IterationStatus(str, Enum):
	"""Outcome of one iteration."""

	PASSED = "passed"
	FAILED = "failed"


class RunOutcome(BaseModel):
	"""
	Result of one burn-in iteration.

	Created once per iteration by the harness and immutable afterwards.
	"""

	model_config = ConfigDict(frozen=True)

	iteration: int = Field(ge=1, description="1-based iteration index")
	status: IterationStatus
	returncode: int | None = None
	output: str | None = None
	stderr: str | None = None
	error: str | None = None
	timed_out: bool = False
	duration_seconds: float = 0.0

	@property
	def passed(self) -> bool:
		return self.status is IterationStatus.PASSED

	@classmethod
	def from_command(cls, iteration: int,
	                 result: CommandResult) -> "RunOutcome":
		"""Build the outcome of an iteration from its command result."""
		return cls(
		    iteration=iteration,
		    status=(IterationStatus.PASSED
		            if result.success else IterationStatus.FAILED),
		    returncode=result.returncode,
		    output=result.output,
		    stderr=result.stderr,
		    error=result.error,
		    timed_out=result.timed_out,
		    duration_seconds=result.duration_seconds,
		)


__all__ = ["IterationStatus", "RunOutcome"]
