"""
Scope rule models.

A scope maps a path predicate to the task that tests that area of the
repository. Rules are evaluated independently, in declaration order.
"""

from __future__ import annotations

import re
from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from .task import Task


class UnmatchedPolicy(str, Enum):
	"""
	What to do when files changed but no scope matched.

	SKIP: emit a notice and run nothing.
	RUN_ALL: run the full-suite task.
	"""

	SKIP = "skip"
	RUN_ALL = "run_all"


class ScopeRule(BaseModel):
	"""Path predicate plus the task to run when it matches.

	Exactly one of ``prefixes`` or ``pattern`` is set. ``pattern`` is a
	regular expression searched anywhere in the path.
	"""

	model_config = ConfigDict(frozen=True, extra="forbid")

	name: str = Field(min_length=1)
	description: str | None = Field(
	    default=None,
	    description="Notice printed when the scope is triggered",
	)
	prefixes: tuple[str, ...] = ()
	pattern: str | None = None
	task: Task

	@field_validator("pattern")
	@classmethod
	def validate_pattern(cls, v: str | None) -> str | None:
		if v is None:
			return v
		try:
			re.compile(v)
		except re.error as exc:
			raise ValueError(f"invalid pattern {v!r}: {exc}") from exc
		return v

	@model_validator(mode="after")
	def check_single_matcher(self) -> "ScopeRule":
		if bool(self.prefixes) == (self.pattern is not None):
			raise ValueError(
			    f"scope {self.name!r} needs exactly one of prefixes or pattern"
			)
		return self

	def matches(self, path: str) -> bool:
		"""Return True if the path belongs to this scope."""
		if self.pattern is not None:
			return re.search(self.pattern, path) is not None
		return any(path.startswith(p) for p in self.prefixes)

	@property
	def notice(self) -> str:
		return self.description or f"{self.name} changes detected"


class ScopeConfig(BaseModel):
	"""Ordered scope rules plus the full-suite fallback task."""

	model_config = ConfigDict(extra="forbid")

	full_suite: Task
	scopes: list[ScopeRule] = Field(default_factory=list)

	@model_validator(mode="after")
	def check_unique_names(self) -> "ScopeConfig":
		names = [s.name for s in self.scopes]
		dupes = sorted({n for n in names if names.count(n) > 1})
		if dupes:
			raise ValueError(f"duplicate scope names: {', '.join(dupes)}")
		return self


DEFAULT_SCOPE_CONFIG = ScopeConfig(
    full_suite=Task(name="test:e2e"),
    scopes=[
        ScopeRule(
            name="backend",
            description="Backend changes detected",
            prefixes=("backend/",),
            task=Task(name="test", workspace="backend"),
        ),
        ScopeRule(
            name="frontend",
            description="Dashboard changes detected",
            prefixes=("dashboard/",),
            task=Task(name="test", workspace="dashboard"),
        ),
        ScopeRule(
            name="e2e-critical",
            description="E2E-affecting changes detected",
            pattern=r"(tests/e2e/|backend/src/api/|dashboard/src/)",
            task=Task(name="test:e2e"),
        ),
    ],
)

__all__ = [
    "UnmatchedPolicy",
    "ScopeRule",
    "ScopeConfig",
    "DEFAULT_SCOPE_CONFIG",
]
