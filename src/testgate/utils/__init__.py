"""Shared utility functions.

This subpackage provides helpers used across the application with no
dependencies on other subpackages.

Key modules:
    - paths: Repository path normalization
    - logging: Logging configuration and credential masking
    - protocols: Protocol definitions for dependency injection
"""

from .paths import (
    normalize_repo_path,
    normalize_repo_paths,
    resolve_project_root,
)
from .logging import configure_logging, get_logger, mask_credentials
from .protocols import CommandExecutor, TaskRunner, Reporter

__all__ = [
    # paths
    "normalize_repo_path",
    "normalize_repo_paths",
    "resolve_project_root",
    # logging
    "configure_logging",
    "get_logger",
    "mask_credentials",
    # protocols
    "CommandExecutor",
    "TaskRunner",
    "Reporter",
]
