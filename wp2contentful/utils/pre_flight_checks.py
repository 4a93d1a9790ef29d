from __future__ import annotations

from typing import Any, Dict

from .errors import MigrationError, log_message


class PreFlightCheckError(MigrationError):
    """Custom exception for pre-flight check failures."""
    pass


def run_contentful_pre_flight_checks(config: Dict[str, Any]) -> None:
    """
    Verifies that the configuration is complete before any remote call.

    Args:
        config: The configuration dictionary built by
            :func:`wp2contentful.utils.config.load_config`.

    Raises:
        PreFlightCheckError: If any check fails.
    """
    log_message("Running pre-flight checks...")

    contentful = config.get("contentful", {})
    migration = config.get("migration", {})

    if not contentful.get("access_token"):
        raise PreFlightCheckError(
            "Contentful management token not found (CONTENTFUL_CONTENT_MANAGEMENT_TOKEN)."
        )
    if not contentful.get("space_id"):
        raise PreFlightCheckError("Contentful space ID not found (CONTENTFUL_SPACE_ID).")
    if not contentful.get("environment_id"):
        raise PreFlightCheckError("Contentful environment ID not found (CONTENTFUL_ENVIRONMENT_ID).")

    if int(migration.get("max_concurrent", 1)) < 1:
        raise PreFlightCheckError("migration.max_concurrent must be at least 1.")
    if float(migration.get("min_interval", 0)) < 0:
        raise PreFlightCheckError("migration.min_interval cannot be negative.")
    if int(migration.get("max_attempts", 1)) < 1:
        raise PreFlightCheckError("migration.max_attempts must be at least 1.")

    log_message("Pre-flight checks passed successfully.")
