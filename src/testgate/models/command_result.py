"""
Command result model.

Result of one invocation of the shared command-execution primitive.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CommandResult(BaseModel):
	"""
	Outcome of running one external command to completion.

	``returncode`` is None when the process could not be started or was
	killed after a timeout. Output content is never interpreted.
	"""

	model_config = ConfigDict(frozen=True)

	argv: tuple[str, ...]
	returncode: int | None = None
	output: str | None = Field(
	    default=None,
	    description="Standard output when capture was requested",
	)
	stderr: str | None = Field(
	    default=None,
	    description="Standard error when capture was requested",
	)
	error: str | None = Field(
	    default=None,
	    description="Why the command could not be launched",
	)
	timed_out: bool = False
	duration_seconds: float = 0.0

	@property
	def success(self) -> bool:
		"""True iff the command exited with status zero."""
		return self.returncode == 0

	@property
	def status_text(self) -> str:
		"""Describe how the command ended."""
		if self.error:
			return f"could not start: {self.error}"
		if self.timed_out:
			return f"timed out after {self.duration_seconds:.1f}s"
		return f"exit code {self.returncode}"


__all__ = ["CommandResult"]
