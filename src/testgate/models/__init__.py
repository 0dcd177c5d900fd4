"""
testgate models.

This subpackage contains Pydantic models for configuration, run
parameters, command results, burn-in outcomes, scope rules and
selection/pipeline results.

Key models:
    - Config: Application configuration loaded from environment
    - Task: A named package-manager script
    - CommandResult: Result of running one external command
    - RunOutcome / AggregateResult: Burn-in iteration and summary
    - ChangeSet / ScopeRule: Inputs to the change-scoped selector
    - SelectionResult / PipelineResult: Selector and local CI results
"""

from .task import PackageManager, Task
from .command_result import CommandResult
from .run_outcome import IterationStatus, RunOutcome
from .aggregate import AggregateResult, Verdict
from .change_set import ChangeSet, ChangeSource
from .scope import (
    DEFAULT_SCOPE_CONFIG,
    ScopeConfig,
    ScopeRule,
    UnmatchedPolicy,
)
from .selection import FallbackReason, ScopeRunResult, SelectionResult
from .pipeline import PipelineResult, Stage, StageResult
from .config import Config, load_env
from .run_params import BurnInParams, LocalCiParams, RunParams, SelectiveParams

__all__ = [
    "PackageManager",
    "Task",
    "CommandResult",
    "IterationStatus",
    "RunOutcome",
    "AggregateResult",
    "Verdict",
    "ChangeSet",
    "ChangeSource",
    "DEFAULT_SCOPE_CONFIG",
    "ScopeConfig",
    "ScopeRule",
    "UnmatchedPolicy",
    "FallbackReason",
    "ScopeRunResult",
    "SelectionResult",
    "PipelineResult",
    "Stage",
    "StageResult",
    "Config",
    "load_env",
    "RunParams",
    "BurnInParams",
    "SelectiveParams",
    "LocalCiParams",
]
