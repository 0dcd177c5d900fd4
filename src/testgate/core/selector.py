"""
Change-scoped test selector.

Maps a ChangeSet onto declared scopes and runs each triggered scope's
task once, in declaration order. Scopes are independent, so a failing
scope does not stop the others.
"""

from __future__ import annotations

import shlex
from collections.abc import Sequence

from testgate.models.change_set import ChangeSet
from testgate.models.scope import ScopeConfig, ScopeRule, UnmatchedPolicy
from testgate.models.selection import (
    FallbackReason,
    ScopeRunResult,
    SelectionResult,
)
from testgate.utils.logging import get_logger
from testgate.utils.protocols import Reporter, TaskRunner

logger = get_logger(__name__)

_MAX_LISTED_PATHS = 10


def triggered_scopes(change_set: ChangeSet,
                     rules: Sequence[ScopeRule]) -> list[ScopeRule]:
	"""Return the rules matched by any changed path, in rule order.

	Each rule appears at most once however many paths match it.
	"""
	return [
	    rule for rule in rules
	    if any(rule.matches(path) for path in change_set.paths)
	]


def unmatched_paths(change_set: ChangeSet,
                    rules: Sequence[ScopeRule]) -> list[str]:
	"""Return changed paths that no rule matches, in reported order."""
	return [
	    path for path in change_set.paths
	    if not any(rule.matches(path) for rule in rules)
	]


def _format_paths(paths: Sequence[str]) -> str:
	shown = ", ".join(paths[:_MAX_LISTED_PATHS])
	extra = len(paths) - _MAX_LISTED_PATHS
	return f"{shown} (+{extra} more)" if extra > 0 else shown


async def _run_fallback(
    result: SelectionResult,
    reason: FallbackReason,
    scopes: ScopeConfig,
    runner: TaskRunner,
    timeout: float | None,
    capture: bool,
    reporter: Reporter | None,
) -> None:
	logger.info("running full suite (%s)", reason.value)
	if reporter:
		reporter.fallback_started(reason, scopes.full_suite.label)
	cmd = await runner.run(scopes.full_suite, timeout=timeout,
	                       capture=capture)
	result.fallback_reason = reason
	result.fallback_result = cmd
	if reporter:
		reporter.fallback_finished(cmd)


def _notice(result: SelectionResult, reporter: Reporter | None,
            message: str) -> None:
	logger.info(message)
	result.notices.append(message)
	if reporter:
		reporter.notice(message)


def _finish(result: SelectionResult,
            reporter: Reporter | None) -> SelectionResult:
	if reporter:
		reporter.selection_finished(result)
	return result


async def run_selective(
    change_set: ChangeSet,
    scopes: ScopeConfig,
    runner: TaskRunner,
    *,
    policy: UnmatchedPolicy = UnmatchedPolicy.SKIP,
    force_full: bool = False,
    timeout: float | None = None,
    capture: bool = False,
    reporter: Reporter | None = None,
) -> SelectionResult:
	"""
	Run the tasks of every scope touched by the change set.

	An empty or unavailable change set runs only the full-suite task.
	Changes that match no scope produce a notice and, under the default
	``skip`` policy, run nothing.

	Parameters:
		change_set: Changed paths.
		scopes: Ordered scope rules and the full-suite task.
		runner: Task runner for the workspace's package manager.
		policy: What to do when changes match no scope.
		force_full: Run the full suite regardless of the changes.
		timeout: Optional per-command timeout in seconds.
		capture: Capture command output.
		reporter: Optional progress reporter.

	Returns:
		SelectionResult whose ``success`` is the AND of every command
		that ran.
	"""
	result = SelectionResult(change_set=change_set)
	common = dict(scopes=scopes, runner=runner, timeout=timeout,
	              capture=capture, reporter=reporter)

	if force_full:
		await _run_fallback(result, FallbackReason.FORCED, **common)
		return _finish(result, reporter)

	if not change_set.available:
		_notice(result, reporter,
		        "Could not determine changed files, running full test suite")
		await _run_fallback(result, FallbackReason.VCS_UNAVAILABLE, **common)
		return _finish(result, reporter)

	if change_set.is_empty:
		_notice(result, reporter,
		        "No changed files detected, running full test suite")
		await _run_fallback(result, FallbackReason.NO_CHANGES, **common)
		return _finish(result, reporter)

	if reporter:
		reporter.changes_detected(change_set)

	triggered = triggered_scopes(change_set, scopes.scopes)
	result.unmatched_paths = unmatched_paths(change_set, scopes.scopes)
	logger.info("triggered scopes: %s",
	            ", ".join(r.name for r in triggered) or "none")

	for rule in triggered:
		if reporter:
			reporter.scope_started(rule, rule.task.label)
		cmd = await runner.run(rule.task, timeout=timeout, capture=capture)
		run = ScopeRunResult(scope=rule, result=cmd)
		result.scope_runs.append(run)
		if not run.success:
			logger.warning("scope %s failed (%s)", rule.name, cmd.status_text)
		if reporter:
			reporter.scope_finished(run)

	if not triggered:
		hint = shlex.join(runner.command_for(scopes.full_suite))
		_notice(
		    result, reporter,
		    "Changed files match no test scope: "
		    f"{_format_paths(result.unmatched_paths)}. "
		    f"Run the full suite with: {hint} (or --force-full)")
		if policy is UnmatchedPolicy.RUN_ALL:
			await _run_fallback(result, FallbackReason.UNMATCHED, **common)
	elif result.unmatched_paths:
		_notice(
		    result, reporter,
		    f"{len(result.unmatched_paths)} changed file(s) outside every "
		    f"test scope: {_format_paths(result.unmatched_paths)}")

	return _finish(result, reporter)


__all__ = ["run_selective", "triggered_scopes", "unmatched_paths"]
