from __future__ import annotations

import asyncio
import shlex
import signal
import sys
import threading
from collections.abc import Coroutine
from typing import Any, List, NoReturn, TypeVar

import typer
from pydantic import ValidationError
from typer.main import get_command

from testgate.core.burn_in import run_burn_in
from testgate.core.changes import (
    change_set_from_paths,
    detect_change_set,
    read_changed_files,
)
from testgate.core.executor import SubprocessExecutor
from testgate.core.pipeline import default_stages, run_pipeline, select_stages
from testgate.core.selector import run_selective
from testgate.core.task_runners import create_task_runner
from testgate.errors import ConfigurationError
from testgate.loaders.scopes import load_scope_config
from testgate.models.config import Config, load_env
from testgate.models.run_params import (
    BurnInParams,
    LocalCiParams,
    RunParams,
    SelectiveParams,
)
from testgate.ui.console import ConsoleReporter
from testgate.utils.logging import configure_logging, get_logger
from testgate.utils.paths import resolve_project_root

logger = get_logger(__name__)

T = TypeVar("T")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INTERRUPTED = 130

cli = typer.Typer(add_completion=False, no_args_is_help=True)


@cli.callback()
def root() -> None:
	"""
	Burn-in loops, change-scoped test selection and a local CI mirror.
	"""
	return None


def _describe(exc: Exception) -> str:
	if isinstance(exc, ValidationError):
		return "; ".join(
		    f"{'.'.join(str(p) for p in err['loc']) or 'input'}: {err['msg']}"
		    for err in exc.errors())
	return str(exc)


def _config_error(exc: Exception) -> NoReturn:
	typer.echo(f"Configuration error: {_describe(exc)}", err=True)
	raise typer.Exit(EXIT_FAILED)


def _load_config(params: RunParams) -> Config:
	"""Build Config from the environment and apply CLI overrides."""
	load_env()
	config = Config()
	config.apply_overrides(params)
	configure_logging(config.log_level)
	return config


def _run_async(coro: Coroutine[Any, Any, T]) -> T:
	"""
	Run a coroutine to completion, converting interrupts to exit 130.

	SIGTERM is routed through KeyboardInterrupt so the running child is
	terminated the same way as on Ctrl-C.
	"""
	previous = None
	if threading.current_thread() is threading.main_thread():
		previous = signal.signal(signal.SIGTERM, signal.default_int_handler)
	try:
		return asyncio.run(coro)
	except KeyboardInterrupt:
		typer.echo("Interrupted", err=True)
		raise typer.Exit(EXIT_INTERRUPTED)
	except ConfigurationError as exc:
		_config_error(exc)
	finally:
		if previous is not None:
			signal.signal(signal.SIGTERM, previous)


def burn_in_impl(
    iterations: int | None = None,
    task: str | None = None,
    command: str | None = None,
    timeout: float | None = None,
    capture: bool | None = None,
    fail_fast: bool | None = None,
    package_manager: str | None = None,
    project_root: str | None = None,
) -> int:
	"""
	Run the burn-in harness and return the process exit code.

	Parameters:
		iterations: Override for the iteration count.
		task: Override for the script to repeat.
		command: Raw command line repeated instead of a script.
		timeout: Per-iteration timeout in seconds.
		capture: Capture iteration output.
		fail_fast: Stop at the first failing iteration.
		package_manager: Package manager override.
		project_root: Working directory override.
	"""
	try:
		params = BurnInParams(
		    iterations=iterations,
		    task=task,
		    command=command,
		    timeout=timeout,
		    capture=capture,
		    fail_fast=fail_fast,
		    package_manager=package_manager,
		    project_root=project_root,
		)
		config = _load_config(params)
		executor = SubprocessExecutor(
		    cwd=resolve_project_root(config.project_root))
		if params.command:
			argv = shlex.split(params.command)
			label = params.command
		else:
			runner = create_task_runner(config.package_manager, executor)
			argv = runner.command_for(config.burn_in)
			label = config.burn_in.label
	except ValueError as exc:
		_config_error(exc)

	result = _run_async(
	    run_burn_in(
	        argv,
	        config.burn_in_iterations,
	        executor,
	        timeout=config.iteration_timeout_seconds,
	        capture=config.capture_output,
	        fail_fast=config.burn_in_fail_fast,
	        reporter=ConsoleReporter(),
	        label=label,
	    ))
	return EXIT_OK if result.success else EXIT_FAILED


def selective_impl(
    base_ref: str | None = None,
    changed_files: list[str] | None = None,
    changed_files_from: str | None = None,
    rules_file: str | None = None,
    unmatched_policy: str | None = None,
    force_full: bool | None = None,
    timeout: float | None = None,
    capture: bool | None = None,
    package_manager: str | None = None,
    project_root: str | None = None,
) -> int:
	"""
	Run the change-scoped selector and return the process exit code.

	Explicit changed files (``changed_files`` and ``changed_files_from``)
	replace the git diff.
	"""
	try:
		explicit: list[str] | None = None
		if changed_files or changed_files_from:
			explicit = list(changed_files or [])
			if changed_files_from:
				explicit += read_changed_files(changed_files_from)
		params = SelectiveParams(
		    base_ref=base_ref,
		    changed_files=explicit,
		    rules_file=rules_file,
		    unmatched_policy=unmatched_policy,
		    force_full=force_full,
		    timeout=timeout,
		    capture=capture,
		    package_manager=package_manager,
		    project_root=project_root,
		)
		config = _load_config(params)
		executor = SubprocessExecutor(
		    cwd=resolve_project_root(config.project_root))
		runner = create_task_runner(config.package_manager, executor)
		scopes = load_scope_config(config.scope_rules_file)
	except ValueError as exc:
		_config_error(exc)

	reporter = ConsoleReporter()

	async def _select():
		if params.changed_files is not None:
			change_set = change_set_from_paths(params.changed_files)
		else:
			reporter.console.print("🔍 Detecting changed files...")
			change_set = await detect_change_set(executor, config.base_ref)
		return await run_selective(
		    change_set,
		    scopes,
		    runner,
		    policy=config.unmatched_policy,
		    force_full=config.force_full_run,
		    timeout=config.iteration_timeout_seconds,
		    capture=config.capture_output,
		    reporter=reporter,
		)

	result = _run_async(_select())
	return EXIT_OK if result.success else EXIT_FAILED


def local_ci_impl(
    skip: list[str] | None = None,
    burn_in_iterations: int | None = None,
    timeout: float | None = None,
    capture: bool | None = None,
    package_manager: str | None = None,
    project_root: str | None = None,
) -> int:
	"""Run the local CI stages and return the process exit code."""
	try:
		params = LocalCiParams(
		    skip=list(skip or []),
		    burn_in_iterations=burn_in_iterations,
		    timeout=timeout,
		    capture=capture,
		    package_manager=package_manager,
		    project_root=project_root,
		)
		config = _load_config(params)
		executor = SubprocessExecutor(
		    cwd=resolve_project_root(config.project_root))
		runner = create_task_runner(config.package_manager, executor)
		stages = default_stages(config.local_ci_burn_in_iterations)
		select_stages(stages, params.skip)
	except ValueError as exc:
		_config_error(exc)

	reporter = ConsoleReporter()
	reporter.console.print("🔍 Running CI pipeline locally...\n")
	result = _run_async(
	    run_pipeline(
	        stages,
	        runner,
	        config.burn_in,
	        skip=params.skip,
	        timeout=config.iteration_timeout_seconds,
	        capture=config.capture_output,
	        fail_fast=config.burn_in_fail_fast,
	        reporter=reporter,
	    ))
	return EXIT_OK if result.success else EXIT_FAILED


_TIMEOUT_HELP = "Per-command timeout in seconds"
_CAPTURE_HELP = "Capture command output and show it on failure"
_PM_HELP = "Package manager: npm, pnpm or yarn"
_ROOT_HELP = "Directory the commands run in"


@cli.command("burn-in")
def burn_in(
    iterations: int = typer.Option(None, "--iterations", "-n",
                                   help="Number of iterations"),
    task: str = typer.Option(None, "--task", help="Script to repeat"),
    command: str = typer.Option(
        None, "--command", help="Raw command line to repeat instead"),
    timeout: float = typer.Option(None, "--timeout", help=_TIMEOUT_HELP),
    capture: bool = typer.Option(None, "--capture/--no-capture",
                                 help=_CAPTURE_HELP),
    fail_fast: bool = typer.Option(
        None,
        "--fail-fast/--no-fail-fast",
        help="Stop at the first failing iteration",
    ),
    package_manager: str = typer.Option(None, "--package-manager",
                                        help=_PM_HELP),
    project_root: str = typer.Option(None, "--project-root",
                                     help=_ROOT_HELP),
) -> None:
	"""
	Run the end-to-end suite repeatedly to detect flaky tests.
	"""
	raise typer.Exit(
	    burn_in_impl(iterations, task, command, timeout, capture, fail_fast,
	                 package_manager, project_root))


@cli.command("selective")
def selective(
    base_ref: str = typer.Option(None, "--base-ref",
                                 help="Reference to diff against"),
    changed_file: List[str] = typer.Option(
        None, "--changed-file", help="Changed path (repeatable); skips git"),
    changed_files_from: str = typer.Option(
        None,
        "--changed-files-from",
        help="File with one changed path per line, '-' for stdin",
    ),
    rules: str = typer.Option(None, "--rules", help="Scope rules YAML file"),
    unmatched_policy: str = typer.Option(
        None,
        "--unmatched-policy",
        help="skip or run_all when changes match no scope",
    ),
    force_full: bool = typer.Option(None, "--force-full/--no-force-full",
                                    help="Run the full suite"),
    timeout: float = typer.Option(None, "--timeout", help=_TIMEOUT_HELP),
    capture: bool = typer.Option(None, "--capture/--no-capture",
                                 help=_CAPTURE_HELP),
    package_manager: str = typer.Option(None, "--package-manager",
                                        help=_PM_HELP),
    project_root: str = typer.Option(None, "--project-root",
                                     help=_ROOT_HELP),
) -> None:
	"""
	Run only the test suites affected by changed files.
	"""
	raise typer.Exit(
	    selective_impl(base_ref, changed_file, changed_files_from, rules,
	                   unmatched_policy, force_full, timeout, capture,
	                   package_manager, project_root))


@cli.command("local-ci")
def local_ci(
    skip: List[str] = typer.Option(None, "--skip",
                                   help="Stage to skip (repeatable)"),
    burn_in_iterations: int = typer.Option(
        None, "--burn-in-iterations", help="Iterations for the burn-in stage"),
    timeout: float = typer.Option(None, "--timeout", help=_TIMEOUT_HELP),
    capture: bool = typer.Option(None, "--capture/--no-capture",
                                 help=_CAPTURE_HELP),
    package_manager: str = typer.Option(None, "--package-manager",
                                        help=_PM_HELP),
    project_root: str = typer.Option(None, "--project-root",
                                     help=_ROOT_HELP),
) -> None:
	"""
	Mirror the CI pipeline locally: lint, unit, e2e, burn-in.
	"""
	raise typer.Exit(
	    local_ci_impl(skip, burn_in_iterations, timeout, capture,
	                  package_manager, project_root))


def entrypoint(argv=None, *, standalone_mode: bool = True):
	"""
	Typer entrypoint for the ``testgate`` command.

	Parameters:
		argv: Command-line arguments. Defaults to sys.argv[1:].
		standalone_mode: If True, Click handles exit codes.

	Returns:
		Result of the Click application main invocation.
	"""
	args = sys.argv[1:] if argv is None else list(argv)
	return get_command(cli).main(
	    args=args,
	    prog_name="testgate",
	    standalone_mode=standalone_mode,
	)


def _subcommand_entrypoint(name: str, argv, standalone_mode: bool):
	args = sys.argv[1:] if argv is None else list(argv)
	return get_command(cli).main(
	    args=[name, *args],
	    prog_name=f"run-{name}",
	    standalone_mode=standalone_mode,
	)


def burn_in_entrypoint(argv=None, *, standalone_mode: bool = True):
	"""``run-burn-in``: shortcut for ``testgate burn-in``."""
	return _subcommand_entrypoint("burn-in", argv, standalone_mode)


def selective_entrypoint(argv=None, *, standalone_mode: bool = True):
	"""``run-selective``: shortcut for ``testgate selective``."""
	return _subcommand_entrypoint("selective", argv, standalone_mode)


def local_ci_entrypoint(argv=None, *, standalone_mode: bool = True):
	"""``run-local-ci``: shortcut for ``testgate local-ci``."""
	return _subcommand_entrypoint("local-ci", argv, standalone_mode)


if __name__ == "__main__":
	entrypoint()
