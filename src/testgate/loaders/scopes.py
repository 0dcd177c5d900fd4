"""
Scope rules loader.

Reads scope rules and the full-suite task from a YAML file and validates
them with the ScopeConfig model.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from testgate.errors import ConfigurationError
from testgate.models.scope import DEFAULT_SCOPE_CONFIG, ScopeConfig


def parse_scope_config(text: str, source: str = "<string>") -> ScopeConfig:
	"""
	Parse YAML scope rules.

	Parameters:
		text: YAML document with ``full_suite`` and ``scopes`` keys.
		source: Name used in error messages.

	Returns:
		Validated ScopeConfig.

	Raises:
		ConfigurationError: If the YAML is malformed or fails validation.
	"""
	try:
		data: Any = yaml.safe_load(text)
	except yaml.YAMLError as exc:
		raise ConfigurationError(f"{source}: invalid YAML: {exc}") from exc
	if not isinstance(data, dict):
		raise ConfigurationError(f"{source}: expected a mapping at top level")
	try:
		return ScopeConfig.model_validate(data)
	except ValidationError as exc:
		raise ConfigurationError(f"{source}: {exc}") from exc


def load_scope_config(path: str | Path | None = None) -> ScopeConfig:
	"""
	Load scope rules from a YAML file, or the built-in rules.

	Parameters:
		path: Rules file; None selects the built-in rules.

	Returns:
		Validated ScopeConfig.

	Raises:
		ConfigurationError: If the file cannot be read or parsed.
	"""
	if path is None:
		return DEFAULT_SCOPE_CONFIG
	path = Path(path)
	try:
		raw = path.read_text(encoding="utf-8")
	except OSError as exc:
		raise ConfigurationError(
		    f"cannot read scope rules {path}: {exc}") from exc
	return parse_scope_config(raw, source=str(path))


__all__ = ["parse_scope_config", "load_scope_config"]
