"""
Task model.

A Task names a script known to the workspace's package manager,
optionally scoped to one workspace or to all of them.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PackageManager(str, Enum):
	"""Package managers with a task runner adapter."""

	NPM = "npm"
	PNPM = "pnpm"
	YARN = "yarn"


class Task(BaseModel):
	"""A named script, optionally scoped to a workspace."""

	model_config = ConfigDict(frozen=True, extra="forbid")

	name: str = Field(min_length=1, description="Script name, e.g. test:e2e")
	workspace: str | None = Field(
	    default=None,
	    description="Run the script in this workspace only",
	)
	all_workspaces: bool = Field(
	    default=False,
	    description="Run the script in every workspace",
	)
	args: tuple[str, ...] = Field(
	    default=(),
	    description="Extra arguments passed through to the script",
	)

	@model_validator(mode="after")
	def check_workspace_scope(self) -> "Task":
		if self.workspace and self.all_workspaces:
			raise ValueError("workspace and all_workspaces are exclusive")
		return self

	@property
	def label(self) -> str:
		"""Short human-readable description of the task."""
		text = self.name
		if self.workspace:
			text = f"{text} [{self.workspace}]"
		elif self.all_workspaces:
			text = f"{text} [all workspaces]"
		if self.args:
			text = f"{text} {' '.join(self.args)}"
		return text


__all__ = ["PackageManager", "Task"]
