"""
Utility helpers used by the import tool.

This subpackage exposes the error taxonomy, structured logging, the
deterministic ID helper and configuration loading.
"""

from .errors import (
    EVENTS,
    EntryBuildError,
    MigrationError,
    RemoteError,
    RemoteFatalError,
    RemoteNotFound,
    RemoteTransientError,
    UnsupportedTypeError,
    log_message,
    report_error,
    report_ok,
)
from .ids import derive_id

__all__ = [
    "EVENTS",
    "EntryBuildError",
    "MigrationError",
    "RemoteError",
    "RemoteFatalError",
    "RemoteNotFound",
    "RemoteTransientError",
    "UnsupportedTypeError",
    "derive_id",
    "log_message",
    "report_error",
    "report_ok",
]
