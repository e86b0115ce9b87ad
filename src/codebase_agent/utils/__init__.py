"""Utility modules for Codebase Agent."""

from codebase_agent.utils.debug import DebugLogger
from codebase_agent.utils.progress import (
    create_progress_bar,
    log_error,
    log_info,
    log_success,
    log_warning,
    update_progress,
)

__all__ = [
    "DebugLogger",
    "create_progress_bar",
    "update_progress",
    "log_info",
    "log_warning",
    "log_error",
    "log_success",
]
