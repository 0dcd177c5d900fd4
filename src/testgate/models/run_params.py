"""
Run parameters models.

Validated CLI overrides for each command. Every field defaults to None,
meaning "keep the value from the environment".
"""

from __future__ import annotations

from typing import ClassVar, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_core.core_schema import ValidationInfo

from .scope import UnmatchedPolicy
from .task import PackageManager


class RunParams(BaseModel):
	"""Overrides shared by every command."""

	OVERRIDES: ClassVar[tuple[tuple[str, str], ...]] = (
	    ("timeout", "iteration_timeout_seconds"),
	    ("capture", "capture_output"),
	    ("package_manager", "package_manager"),
	    ("project_root", "project_root"),
	)

	timeout: Optional[float] = Field(default=None,
	                                 description="Per-command timeout")
	capture: Optional[bool] = Field(default=None,
	                                description="Capture child output")
	package_manager: Optional[PackageManager] = Field(
	    default=None, description="Package manager override")
	project_root: Optional[str] = Field(default=None,
	                                    description="Working directory")

	@field_validator('timeout')
	@classmethod
	def validate_timeout(cls, v: Optional[float]) -> Optional[float]:
		if v is not None and v <= 0:
			raise ValueError("timeout must be > 0")
		return v


class BurnInParams(RunParams):
	"""Overrides for the burn-in command."""

	OVERRIDES: ClassVar[tuple[tuple[str, str], ...]] = (
	    *RunParams.OVERRIDES,
	    ("iterations", "burn_in_iterations"),
	    ("task", "burn_in_task"),
	    ("fail_fast", "burn_in_fail_fast"),
	)

	iterations: Optional[int] = Field(default=None,
	                                  description="Iteration count")
	task: Optional[str] = Field(default=None, description="Script name")
	command: Optional[str] = Field(
	    default=None,
	    description="Raw command line run instead of a script",
	)
	fail_fast: Optional[bool] = Field(default=None,
	                                  description="Stop at first failure")

	@field_validator('iterations')
	@classmethod
	def validate_iterations(cls, v: Optional[int]) -> Optional[int]:
		if v is not None and v <= 0:
			raise ValueError(f"iterations must be a positive integer, got {v}")
		return v

	@field_validator('task', 'command')
	@classmethod
	def validate_not_blank(cls, v: Optional[str],
	                       info: ValidationInfo) -> Optional[str]:
		if v is not None and not v.strip():
			raise ValueError(f"{info.field_name} must not be empty")
		return v


class SelectiveParams(RunParams):
	"""Overrides for the selective command."""

	OVERRIDES: ClassVar[tuple[tuple[str, str], ...]] = (
	    *RunParams.OVERRIDES,
	    ("base_ref", "base_ref"),
	    ("rules_file", "scope_rules_file"),
	    ("unmatched_policy", "unmatched_policy"),
	    ("force_full", "force_full_run"),
	)

	base_ref: Optional[str] = Field(default=None, description="Diff base")
	rules_file: Optional[str] = Field(default=None,
	                                  description="Scope rules YAML file")
	unmatched_policy: Optional[UnmatchedPolicy] = Field(
	    default=None, description="Policy for unmatched changes")
	force_full: Optional[bool] = Field(default=None,
	                                   description="Run the full suite")
	changed_files: Optional[list[str]] = Field(
	    default=None,
	    description="Explicit changed paths; skips the git diff",
	)


class LocalCiParams(RunParams):
	"""Overrides for the local-ci command."""

	OVERRIDES: ClassVar[tuple[tuple[str, str], ...]] = (
	    *RunParams.OVERRIDES,
	    ("burn_in_iterations", "local_ci_burn_in_iterations"),
	)

	burn_in_iterations: Optional[int] = Field(
	    default=None, description="Burn-in stage iterations")
	skip: list[str] = Field(default_factory=list,
	                        description="Stage names to skip")

	@field_validator('burn_in_iterations')
	@classmethod
	def validate_iterations(cls, v: Optional[int]) -> Optional[int]:
		if v is not None and v <= 0:
			raise ValueError(
			    f"burn_in_iterations must be a positive integer, got {v}")
		return v


__all__ = ["RunParams", "BurnInParams", "SelectiveParams", "LocalCiParams"]
