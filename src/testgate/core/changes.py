"""
Change detection.

Computes the ChangeSet from git, falling back to the previous commit
when the base reference cannot be resolved, and to "unavailable" when
there is no usable repository at all.
"""

from __future__ import annotations

import sys
from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from testgate.errors import ConfigurationError
from testgate.models.change_set import ChangeSet, ChangeSource
from testgate.utils.logging import get_logger
from testgate.utils.protocols import CommandExecutor

logger = get_logger(__name__)

FALLBACK_REF = "HEAD~1"


def diff_command(base_ref: str) -> list[str]:
	"""Return the git command listing files changed since base_ref."""
	return ["git", "diff", "--name-only", "-z", f"{base_ref}...HEAD"]


def fallback_diff_command() -> list[str]:
	"""Return the git command listing files changed by the last commit."""
	return ["git", "diff", "--name-only", "-z", FALLBACK_REF]


def parse_name_list(output: str | None) -> list[str]:
	"""Split NUL-terminated ``git diff -z --name-only`` output.

	With ``-z`` git prints paths verbatim, without C-style quoting of
	non-ASCII or special characters.
	"""
	return [p for p in (output or "").split("\0") if p]


async def detect_change_set(executor: CommandExecutor,
                            base_ref: str = "origin/main") -> ChangeSet:
	"""
	Compute the changed paths between base_ref and HEAD.

	Parameters:
		executor: Shared command-execution primitive.
		base_ref: Reference to diff against.

	Returns:
		ChangeSet from the first diff that succeeds, or an unavailable
		ChangeSet when neither does.
	"""
	primary = await executor.run(diff_command(base_ref), capture=True)
	if primary.success:
		changes = ChangeSet(paths=parse_name_list(primary.output),
		                    base_ref=base_ref, source=ChangeSource.DIFF)
		logger.info("%d changed files against %s", len(changes), base_ref)
		return changes

	logger.info("diff against %s failed (%s), trying %s", base_ref,
	            primary.status_text, FALLBACK_REF)
	fallback = await executor.run(fallback_diff_command(), capture=True)
	if fallback.success:
		changes = ChangeSet(paths=parse_name_list(fallback.output),
		                    base_ref=FALLBACK_REF,
		                    source=ChangeSource.FALLBACK_DIFF)
		logger.info("%d changed files against %s", len(changes),
		            FALLBACK_REF)
		return changes

	logger.warning("could not compute changed files (%s)",
	               fallback.status_text)
	return ChangeSet.unavailable()


def change_set_from_paths(paths: Iterable[str]) -> ChangeSet:
	"""Build a ChangeSet from paths supplied by the caller."""
	return ChangeSet(paths=list(paths), source=ChangeSource.EXPLICIT)


def read_changed_files(source: str | Path,
                       stdin: TextIO | None = None) -> list[str]:
	"""
	Read newline-delimited changed paths from a file or stdin.

	Parameters:
		source: File path, or ``-`` for stdin.
		stdin: Stream used for ``-``; defaults to sys.stdin.

	Returns:
		Raw path lines.

	Raises:
		ConfigurationError: If the file cannot be read.
	"""
	if str(source) == "-":
		return (stdin or sys.stdin).read().splitlines()
	try:
		return Path(source).read_text(encoding="utf-8").splitlines()
	except OSError as exc:
		raise ConfigurationError(
		    f"cannot read changed files from {source}: {exc}") from exc


__all__ = [
    "detect_change_set",
    "change_set_from_paths",
    "read_changed_files",
    "diff_command",
    "fallback_diff_command",
    "parse_name_list",
    "FALLBACK_REF",
]
