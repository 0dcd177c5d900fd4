"""
Shared command-execution primitive.

Runs one external command to completion and reports success iff it
exited with status zero. Launch failures and timeouts become failed
results; the output is never interpreted.
"""

from __future__ import annotations

import asyncio
import os
import shlex
import time
from collections.abc import Mapping, Sequence
from pathlib import Path

from testgate.errors import ConfigurationError
from testgate.models.command_result import CommandResult
from testgate.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_KILL_GRACE_SECONDS = 5.0


async def terminate_process(
    proc: asyncio.subprocess.Process,
    grace_seconds: float = DEFAULT_KILL_GRACE_SECONDS,
) -> None:
	"""Terminate a child process, killing it if it ignores SIGTERM.

	Parameters:
		proc: The running child process.
		grace_seconds: How long to wait after SIGTERM before SIGKILL.
	"""
	if proc.returncode is not None:
		return
	try:
		proc.terminate()
	except ProcessLookupError:
		return
	try:
		await asyncio.wait_for(proc.wait(), grace_seconds)
	except TimeoutError:
		logger.warning("pid %d ignored SIGTERM, killing", proc.pid)
		try:
			proc.kill()
		except ProcessLookupError:
			return
		await proc.wait()


class SubprocessExecutor:
	"""
	Runs commands as child processes, one at a time.

	The caller blocks (awaits) until the child exits. When the awaiting
	task is cancelled, for example by a user interrupt, the child is
	terminated before the cancellation propagates.
	"""

	def __init__(
	    self,
	    cwd: str | Path | None = None,
	    env: Mapping[str, str] | None = None,
	    kill_grace_seconds: float = DEFAULT_KILL_GRACE_SECONDS,
	) -> None:
		self.cwd = Path(cwd) if cwd is not None else None
		self.env = dict(env) if env is not None else None
		self.kill_grace_seconds = kill_grace_seconds

	def _child_env(self) -> dict[str, str] | None:
		if self.env is None:
			return None
		return {**os.environ, **self.env}

	async def run(
	    self,
	    argv: Sequence[str],
	    *,
	    timeout: float | None = None,
	    capture: bool = False,
	) -> CommandResult:
		"""
		Run argv to completion.

		Parameters:
			argv: Program and arguments; not passed through a shell.
			timeout: Seconds before the child is terminated and the run
				recorded as failed. None waits indefinitely.
			capture: Collect stdout and stderr separately instead of
				letting the child write to the terminal.

		Returns:
			CommandResult for the run.

		Raises:
			ConfigurationError: If argv is empty.
		"""
		args = tuple(str(a) for a in argv)
		if not args:
			raise ConfigurationError("command must not be empty")

		logger.info("running: %s", shlex.join(args))
		started = time.monotonic()
		pipe = asyncio.subprocess.PIPE if capture else None
		try:
			proc = await asyncio.create_subprocess_exec(
			    *args,
			    cwd=str(self.cwd) if self.cwd else None,
			    env=self._child_env(),
			    stdout=pipe,
			    stderr=pipe,
			)
		except OSError as exc:
			logger.warning("could not start %s: %s", args[0], exc)
			return CommandResult(
			    argv=args,
			    error=f"{type(exc).__name__}: {exc}",
			    duration_seconds=time.monotonic() - started,
			)

		try:
			stdout, stderr = await asyncio.wait_for(proc.communicate(),
			                                        timeout)
		except TimeoutError:
			logger.warning("%s timed out after %ss, terminating pid %d",
			               args[0], timeout, proc.pid)
			await terminate_process(proc, self.kill_grace_seconds)
			return CommandResult(
			    argv=args,
			    timed_out=True,
			    duration_seconds=time.monotonic() - started,
			)
		except asyncio.CancelledError:
			logger.info("interrupted, terminating pid %d", proc.pid)
			await terminate_process(proc, self.kill_grace_seconds)
			raise

		output = err_output = None
		if capture:
			output = (stdout or b"").decode(errors="replace")
			err_output = (stderr or b"").decode(errors="replace")
		duration = time.monotonic() - started
		logger.info("%s exited with %s in %.2fs", args[0], proc.returncode,
		            duration)
		return CommandResult(
		    argv=args,
		    returncode=proc.returncode,
		    output=output,
		    stderr=err_output,
		    duration_seconds=duration,
		)


__all__ = ["SubprocessExecutor", "terminate_process"]
