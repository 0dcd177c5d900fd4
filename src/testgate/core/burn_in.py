"""
Repeated-run harness.

Runs one command up to N times, strictly one after another, to surface
flaky failures. Stops at the first failing iteration unless fail-fast is
disabled.
"""

from __future__ import annotations

import shlex
from collections.abc import Sequence

from testgate.errors import ConfigurationError
from testgate.models.aggregate import AggregateResult
from testgate.models.run_outcome import RunOutcome
from testgate.utils.logging import get_logger
from testgate.utils.protocols import CommandExecutor, Reporter

logger = get_logger(__name__)


def validate_iterations(iterations: object) -> int:
	"""
	Check an iteration count before anything runs.

	Parameters:
		iterations: Requested iteration count.

	Returns:
		The count, unchanged.

	Raises:
		ConfigurationError: If it is not a positive integer.
	"""
	if (isinstance(iterations, bool) or not isinstance(iterations, int)
	    or iterations < 1):
		raise ConfigurationError(
		    f"iteration count must be a positive integer, got {iterations!r}")
	return iterations


async def run_burn_in(
    argv: Sequence[str],
    iterations: int,
    executor: CommandExecutor,
    *,
    timeout: float | None = None,
    capture: bool = False,
    fail_fast: bool = True,
    reporter: Reporter | None = None,
    label: str | None = None,
) -> AggregateResult:
	"""
	Run a command repeatedly and aggregate the outcomes.

	Iterations are numbered from 1 and never overlap. A command that
	cannot be started counts as a failed iteration. Failed iterations
	are never retried.

	Parameters:
		argv: Command to repeat; opaque to the harness.
		iterations: Number of iterations requested.
		executor: Shared command-execution primitive.
		timeout: Optional per-iteration timeout in seconds.
		capture: Capture each iteration's output.
		fail_fast: Stop after the first failing iteration.
		reporter: Optional progress reporter.
		label: Display name for the command; defaults to the argv.

	Returns:
		AggregateResult for the iterations that ran.

	Raises:
		ConfigurationError: On a bad iteration count or empty command,
			before any process is started.
	"""
	validate_iterations(iterations)
	args = list(argv)
	if not args:
		raise ConfigurationError("burn-in command must not be empty")

	label = label or shlex.join(args)
	result = AggregateResult(requested=iterations)
	logger.info("burn-in start iterations=%d command=%s fail_fast=%s",
	            iterations, label, fail_fast)
	if reporter:
		reporter.burn_in_started(iterations, label)

	for i in range(1, iterations + 1):
		if reporter:
			reporter.iteration_started(i, iterations)
		cmd = await executor.run(args, timeout=timeout, capture=capture)
		outcome = RunOutcome.from_command(i, cmd)
		result.record(outcome)
		if reporter:
			reporter.iteration_finished(outcome, iterations)
		if outcome.passed:
			continue
		logger.warning("burn-in iteration %d/%d failed (%s)", i, iterations,
		               cmd.status_text)
		if fail_fast:
			result.stopped_early = i < iterations
			break

	logger.info("burn-in done %s verdict=%s", result.summary_line(),
	            result.verdict.value)
	if reporter:
		reporter.burn_in_finished(result)
	return result


__all__ = ["run_burn_in", "validate_iterations"]
