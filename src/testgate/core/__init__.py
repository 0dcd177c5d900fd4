"""Core orchestration logic.

This subpackage contains the command-execution primitive and the three
utilities built on it.

Key modules:
    - executor: SubprocessExecutor, the shared primitive
    - task_runners: package-manager adapters for named scripts
    - burn_in: repeated-run harness
    - changes: ChangeSet detection from git
    - selector: change-scoped test selection
    - pipeline: local CI mirror
"""

from testgate.core.executor import SubprocessExecutor, terminate_process
from testgate.core.task_runners import (
    BaseTaskRunner,
    NpmTaskRunner,
    PnpmTaskRunner,
    YarnTaskRunner,
    create_task_runner,
)
from testgate.core.burn_in import run_burn_in, validate_iterations
from testgate.core.changes import (
    change_set_from_paths,
    detect_change_set,
    read_changed_files,
)
from testgate.core.selector import (
    run_selective,
    triggered_scopes,
    unmatched_paths,
)
from testgate.core.pipeline import default_stages, run_pipeline, select_stages

__all__ = [
    # executor
    "SubprocessExecutor",
    "terminate_process",
    # task_runners
    "BaseTaskRunner",
    "NpmTaskRunner",
    "PnpmTaskRunner",
    "YarnTaskRunner",
    "create_task_runner",
    # burn_in
    "run_burn_in",
    "validate_iterations",
    # changes
    "change_set_from_paths",
    "detect_change_set",
    "read_changed_files",
    # selector
    "run_selective",
    "triggered_scopes",
    "unmatched_paths",
    # pipeline
    "default_stages",
    "run_pipeline",
    "select_stages",
]
