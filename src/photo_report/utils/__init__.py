"""Shared utilities (logging setup for the CLI and worker processes)."""

from .logging_utils import (
    configure_logging,
    configure_worker_logging,
    start_log_listener,
    stop_log_listener,
)

__all__ = [
    "configure_logging",
    "configure_worker_logging",
    "start_log_listener",
    "stop_log_listener",
]
