"""
Error types raised before any child process is started.

Execution failures (non-zero exits, missing binaries, timeouts) are never
raised; they are reported as failed CommandResult values.
"""

from __future__ import annotations


class ConfigurationError(ValueError):
	"""Invalid input detected before any command runs.

	Raised for bad iteration counts, empty commands, unknown package
	managers or stages, and malformed scope rule files.
	"""


__all__ = ["ConfigurationError"]
