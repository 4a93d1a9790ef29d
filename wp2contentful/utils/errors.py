"""
Error types and structured logging helpers for the import.

The :mod:`wp2contentful.utils.errors` module defines the exceptions raised
across the pipeline and centralizes the writing of log entries for both
failed and successful operations.  Each entry is appended to a JSON Lines
file under ``reports/migration`` so that the information can be reviewed or
parsed after a run.

Three public logging functions are provided:

``log_message``
    Print a ``[LEVEL] message`` line and append it to ``migration.log``.

``report_error``
    Record an error that occurred for an item.  An optional exception can be
    supplied and will be serialized to the log.

``report_ok``
    Record a successful step for an item.  Additional key/value information
    can be attached to the entry via the ``extra`` parameter.

The ``EVENTS`` dictionary maps error or event codes to human readable
messages.  Codes not present in the dictionary fall back to the code itself.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

# Mapping of event codes used throughout the import to descriptive messages.
# The keys include both error and success codes as the same lookup is used by
# :func:`report_error` and :func:`report_ok`.
EVENTS: Dict[str, str] = {
    "ASSET_FOUND": "Asset already exists in Contentful",
    "ASSET_CREATED": "Asset created and processed",
    "ENTRY_FOUND": "Entry already exists in Contentful",
    "ENTRY_CREATED": "Entry created and published",
    "ENTRY_BUILD": "Failed to create entry",
    "ENTRY_SKIPPED": "Entry skipped (missing slug)",
}

_REPORT_DIR = os.path.join("reports", "migration")


class MigrationError(Exception):
    """Base class for every error raised by the importer."""


class UnsupportedTypeError(MigrationError):
    """Raised when a post type has no registered formatter."""

    def __init__(self, post_type: str) -> None:
        super().__init__(f"Unknown formatter type {post_type}")
        self.post_type = post_type


class RemoteError(MigrationError):
    """
    A failed call to the Contentful Management API.

    ``status_code`` is ``None`` when the request never produced a response
    (connection errors, timeouts).  ``retry_after`` carries the server's
    back-off hint in seconds when one was sent.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        retry_after: Optional[float] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.retry_after = retry_after


class RemoteNotFound(RemoteError):
    """The requested asset or entry does not exist (HTTP 404)."""


class RemoteTransientError(RemoteError):
    """Rate limiting, server or network errors worth retrying."""


class RemoteFatalError(RemoteError):
    """Any other remote failure; never retried."""


class EntryBuildError(MigrationError):
    """Failure while building or creating a single entry."""

    def __init__(self, title: Optional[str], payload: Optional[Dict[str, Any]], cause: Exception) -> None:
        super().__init__(f"Error creating {title}: {cause}")
        self.title = title
        self.payload = payload
        self.cause = cause


def _write_jsonl(path: str, data: Dict[str, Any]) -> None:
    """Append ``data`` as a JSON object followed by a newline to ``path``."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, default=str)
        f.write("\n")


def log_message(message: str, level: str = "INFO") -> None:
    """Print ``message`` and append it to the run log."""
    print(f"[{level}] {message}")
    os.makedirs(_REPORT_DIR, exist_ok=True)
    with open(os.path.join(_REPORT_DIR, "migration.log"), "a", encoding="utf-8") as f:
        f.write(f"{level}: {message}\n")


def report_error(
    code: str,
    item: Dict[str, Any],
    exc: Optional[Exception] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """Log an error event for ``item``.

    Parameters
    ----------
    code:
        A key identifying the type of error.  If ``code`` is present in
        :data:`EVENTS` its value will be used as the message.
    item:
        A dictionary describing the item.  Only the ``slug`` and ``title``
        keys are referenced if present.
    exc:
        Optional exception instance that triggered the error.  The string
        representation of the exception will be included in the log entry.
    extra:
        Optional dictionary of additional fields, e.g. the attempted payload.
    """
    message = EVENTS.get(code, code)
    entry: Dict[str, Any] = {
        "code": code,
        "message": message,
        "slug": item.get("slug"),
        "title": item.get("title"),
    }
    if exc is not None:
        entry["error"] = str(exc)
    if extra:
        entry.update(extra)
    print(f"[ERROR] {message} - {item.get('title') or item.get('slug') or ''}")
    _write_jsonl(os.path.join(_REPORT_DIR, "errors.jsonl"), entry)


def report_ok(code: str, item: Dict[str, Any], extra: Optional[Dict[str, Any]] = None) -> None:
    """Log a successful event for ``item``.

    Parameters
    ----------
    code:
        A key identifying the type of event.
    item:
        A dictionary describing the item.
    extra:
        Optional dictionary of additional fields to merge into the log entry.
    """
    message = EVENTS.get(code, code)
    entry: Dict[str, Any] = {
        "code": code,
        "message": message,
        "slug": item.get("slug"),
        "title": item.get("title"),
    }
    if extra:
        entry.update(extra)
    print(f"[OK] {message} - {item.get('title') or item.get('slug') or ''}")
    _write_jsonl(os.path.join(_REPORT_DIR, "success.jsonl"), entry)
