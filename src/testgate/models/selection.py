"""
Selection result models.

Outcome of one change-scoped selector invocation.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from .change_set import ChangeSet
from .command_result import CommandResult
from .scope import ScopeRule


class FallbackReason(str, Enum):
	"""Why the full-suite task ran instead of (or after) scope matching."""

	NO_CHANGES = "no_changes"
	VCS_UNAVAILABLE = "vcs_unavailable"
	UNMATCHED = "unmatched"
	FORCED = "forced"


class ScopeRunResult(BaseModel):
	"""A triggered scope and the result of its task."""

	scope: ScopeRule
	result: CommandResult

	@property
	def success(self) -> bool:
		return self.result.success


class SelectionResult(BaseModel):
	"""
	Outcome of the selector.

	``success`` is the logical AND of every command the selector ran;
	running nothing is a success.
	"""

	change_set: ChangeSet
	scope_runs: list[ScopeRunResult] = Field(default_factory=list)
	fallback_reason: FallbackReason | None = None
	fallback_result: CommandResult | None = None
	unmatched_paths: list[str] = Field(default_factory=list)
	notices: list[str] = Field(default_factory=list)

	@property
	def triggered(self) -> list[str]:
		return [r.scope.name for r in self.scope_runs]

	@property
	def failed_scopes(self) -> list[str]:
		return [r.scope.name for r in self.scope_runs if not r.success]

	@property
	def commands_run(self) -> int:
		return len(self.scope_runs) + (1 if self.fallback_result else 0)

	@property
	def success(self) -> bool:
		fallback = self.fallback_result
		if fallback is not None and not fallback.success:
			return False
		return all(r.success for r in self.scope_runs)


__all__ = ["FallbackReason", "ScopeRunResult", "SelectionResult"]
