"""
Change set model.

The set of repo-relative paths that differ between two snapshots.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator

from testgate.utils.paths import normalize_repo_paths


class ChangeSource(str, Enum):
	"""Where the change set came from."""

	DIFF = "diff"
	FALLBACK_DIFF = "fallback_diff"
	EXPLICIT = "explicit"
	UNAVAILABLE = "unavailable"


class ChangeSet(BaseModel):
	"""Changed file paths, in the order they were reported.

	Order is irrelevant for classification but kept for display.
	"""

	model_config = ConfigDict(frozen=True)

	paths: tuple[str, ...] = ()
	base_ref: str | None = None
	source: ChangeSource = ChangeSource.EXPLICIT

	@field_validator("paths", mode="before")
	@classmethod
	def normalize_paths(cls, v: Iterable[str] | None) -> tuple[str, ...]:
		if v is None:
			return ()
		if isinstance(v, str):
			v = v.splitlines()
		return normalize_repo_paths(v)

	@property
	def available(self) -> bool:
		"""False when no version-control context could be resolved."""
		return self.source is not ChangeSource.UNAVAILABLE

	@property
	def is_empty(self) -> bool:
		return not self.paths

	@classmethod
	def unavailable(cls) -> "ChangeSet":
		return cls(source=ChangeSource.UNAVAILABLE)

	def __len__(self) -> int:
		return len(self.paths)


__all__ = ["ChangeSource", "ChangeSet"]
