from __future__ import annotations

import shlex
from pathlib import Path
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_core.core_schema import ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

from .scope import UnmatchedPolicy
from .task import PackageManager, Task

if TYPE_CHECKING:
	from .run_params import RunParams


def load_env(env_file: str | Path | None = None) -> None:
	"""Load environment variables from an `.env` file if present."""
	env_path = Path(env_file) if env_file else Path(".env")
	if env_path.exists():
		load_dotenv(env_path)


class Config(BaseSettings):
	"""Runtime configuration loaded from environment variables."""

	model_config = SettingsConfigDict(env_prefix="", case_sensitive=False,
	                                  validate_assignment=True)

	burn_in_iterations: int = Field(
	    10,
	    alias="BURN_IN_ITERATIONS",
	    description="Number of burn-in iterations",
	)
	burn_in_task: str = Field(
	    "test:e2e",
	    alias="BURN_IN_TASK",
	    description="Script run by the burn-in harness",
	)
	burn_in_args: str = Field(
	    "--project=chromium",
	    alias="BURN_IN_ARGS",
	    description="Extra arguments for the burn-in script (shell syntax)",
	)
	burn_in_fail_fast: bool = Field(
	    True,
	    alias="BURN_IN_FAIL_FAST",
	    description="Stop the burn-in loop at the first failing iteration",
	)
	iteration_timeout_seconds: float | None = Field(
	    default=None,
	    alias="ITERATION_TIMEOUT_SECONDS",
	    description="Per-command timeout; unset blocks until exit",
	)
	capture_output: bool = Field(
	    False,
	    alias="CAPTURE_OUTPUT",
	    description="Capture child output instead of streaming it",
	)
	package_manager: PackageManager = Field(
	    PackageManager.NPM,
	    alias="PACKAGE_MANAGER",
	    description="Package manager used to run named scripts",
	)
	project_root: str = Field(
	    ".",
	    alias="PROJECT_ROOT",
	    description="Working directory for child processes",
	)
	base_ref: str = Field(
	    "origin/main",
	    alias="BASE_REF",
	    description="Reference the selector diffs against",
	)
	scope_rules_file: str | None = Field(
	    default=None,
	    alias="SCOPE_RULES_FILE",
	    description="YAML file with scope rules; built-in rules if unset",
	)
	unmatched_policy: UnmatchedPolicy = Field(
	    UnmatchedPolicy.SKIP,
	    alias="UNMATCHED_POLICY",
	    description="What to do when changed files match no scope",
	)
	force_full_run: bool = Field(
	    False,
	    alias="FORCE_FULL_RUN",
	    description="Make the selector run the full suite",
	)
	local_ci_burn_in_iterations: int = Field(
	    3,
	    alias="LOCAL_CI_BURN_IN_ITERATIONS",
	    description="Burn-in iterations in the local CI pipeline",
	)
	log_level: str = Field("warning", alias="LOG_LEVEL",
	                       description="Log level")

	@field_validator("burn_in_iterations", "local_ci_burn_in_iterations",
	                 "iteration_timeout_seconds")
	@classmethod
	def validate_positive(cls, v: Any, info: ValidationInfo) -> Any:
		if v is not None and v <= 0:
			raise ValueError(f"{info.field_name} must be > 0")
		return v

	@field_validator("burn_in_args")
	@classmethod
	def validate_burn_in_args(cls, v: str) -> str:
		shlex.split(v)
		return v

	@property
	def project_path(self) -> Path:
		"""Return project_root as Path."""
		return Path(self.project_root)

	@property
	def burn_in(self) -> Task:
		"""The task the burn-in harness repeats."""
		return Task(name=self.burn_in_task,
		            args=tuple(shlex.split(self.burn_in_args)))

	def apply_overrides(self, run_params: RunParams) -> None:
		"""Apply CLI overrides from run parameters onto this config.

		Only non-None fields are applied, preserving environment-based
		defaults for anything the user didn't set.

		Parameters:
			run_params: Validated run parameters with optional overrides.
		"""
		for param_field, config_field in run_params.OVERRIDES:
			value = getattr(run_params, param_field)
			if value is not None:
				setattr(self, config_field, value)


__all__ = ["Config", "load_env"]
