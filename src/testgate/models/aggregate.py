"""
Aggregate burn-in result model.

Accumulates iteration outcomes for one harness invocation.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from .run_outcome import RunOutcome


class Verdict(str, Enum):
	"""
	Overall verdict of a burn-in run.

	ALL_PASSED: every requested iteration ran and passed.
	FLAKY_DETECTED: at least one iteration failed.
	"""

	ALL_PASSED = "all_passed"
	FLAKY_DETECTED = "flaky_detected"


class AggregateResult(BaseModel):
	"""Summary over all executed iterations.

	Built incrementally with ``record()``; ``passed + failed`` always
	equals the number of iterations actually executed, which is below
	``requested`` when the loop stopped at the first failure.
	"""

	requested: int = Field(ge=1)
	passed: int = 0
	failed: int = 0
	failed_iterations: list[int] = Field(default_factory=list)
	stopped_early: bool = False
	duration_seconds: float = 0.0

	@property
	def executed(self) -> int:
		return self.passed + self.failed

	@property
	def verdict(self) -> Verdict:
		if self.failed == 0 and self.executed == self.requested:
			return Verdict.ALL_PASSED
		return Verdict.FLAKY_DETECTED

	@property
	def success(self) -> bool:
		return self.verdict is Verdict.ALL_PASSED

	@property
	def first_failure(self) -> int | None:
		return self.failed_iterations[0] if self.failed_iterations else None

	def record(self, outcome: RunOutcome) -> None:
		"""Fold one iteration outcome into the tallies.

		Parameters:
			outcome: Outcome of the next iteration.

		Raises:
			ValueError: If the iteration is not the next one in sequence
				or exceeds the requested count.
		"""
		expected = self.executed + 1
		if outcome.iteration != expected:
			raise ValueError(f"expected iteration {expected}, "
			                 f"got {outcome.iteration}")
		if outcome.iteration > self.requested:
			raise ValueError(f"iteration {outcome.iteration} exceeds "
			                 f"requested {self.requested}")
		if outcome.passed:
			self.passed += 1
		else:
			self.failed += 1
			self.failed_iterations.append(outcome.iteration)
		self.duration_seconds += outcome.duration_seconds

	def summary_line(self) -> str:
		"""Return the ``P/N passed`` aggregate line."""
		return f"{self.passed}/{self.requested} passed"


__all__ = ["Verdict", "AggregateResult"]
