"""File loading utilities.

Key modules:
    - scopes: Scope rule loading from YAML
"""

from .scopes import load_scope_config, parse_scope_config

__all__ = [
    "load_scope_config",
    "parse_scope_config",
]
