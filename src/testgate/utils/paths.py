"""
Repository path utilities.

Normalizes paths reported by version control so scope matching works on
a single canonical form, and resolves the working directory for child
processes.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


def normalize_repo_path(path: str) -> str:
	"""Return a repo-relative POSIX form of a changed path.

	Strips surrounding whitespace and leading ``./``, and converts
	backslashes to forward slashes. Returns an empty string for blank
	input.

	Parameters:
		path: Raw path as reported by a diff or given by the caller.

	Returns:
		Normalized path string.
	"""
	p = path.strip().replace("\\", "/")
	while p.startswith("./"):
		p = p[2:]
	return p


def normalize_repo_paths(paths: Iterable[str]) -> tuple[str, ...]:
	"""Normalize paths, dropping blanks and later duplicates.

	Order of first occurrence is preserved for display.
	"""
	seen: dict[str, None] = {}
	for raw in paths:
		p = normalize_repo_path(raw)
		if p and p not in seen:
			seen[p] = None
	return tuple(seen)


def resolve_project_root(project_root: str | Path) -> Path:
	"""
	Resolve the directory child processes run in.

	Parameters:
		project_root: Configured project root.

	Returns:
		Absolute path to the project root.

	Raises:
		ValueError: If the path does not exist or is not a directory.
	"""
	root = Path(project_root).expanduser().resolve()
	if not root.is_dir():
		raise ValueError(f"project root {root} is not a directory")
	return root


__all__ = [
    "normalize_repo_path",
    "normalize_repo_paths",
    "resolve_project_root",
]
