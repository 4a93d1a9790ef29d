from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

CONFIG_FILE = "config/migration_config.json"

# Post types present in a typical export that have no Contentful counterpart.
SKIP_CONTENT_TYPES = ["acf", "nav_menu_item", "wpcf7_contact_form"]


def load_config(config: Optional[Dict[str, Any]] = None, *, config_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Build the importer configuration.

    Values are read from ``config_file`` when it exists, otherwise from the
    ``config`` dictionary.  Missing keys are filled from environment
    variables or defaults so that the rest of the tool can index the
    configuration without ``KeyError``.
    """
    if config_file and os.path.exists(config_file):
        with open(config_file, "r", encoding="utf-8") as f:
            config = json.load(f)
    elif config is None:
        config = {}

    config.setdefault("contentful", {})
    config["contentful"].setdefault("access_token", os.getenv("CONTENTFUL_CONTENT_MANAGEMENT_TOKEN", ""))
    config["contentful"].setdefault("space_id", os.getenv("CONTENTFUL_SPACE_ID", ""))
    config["contentful"].setdefault("environment_id", os.getenv("CONTENTFUL_ENVIRONMENT_ID", "master"))
    config["contentful"].setdefault("base_url", "https://api.contentful.com")
    config["contentful"].setdefault("locale", "en-US")
    config["contentful"].setdefault("timeout", 30)

    config.setdefault("migration", {})
    config["migration"].setdefault("data_file", "data.json")
    config["migration"].setdefault("skip_content_types", list(SKIP_CONTENT_TYPES))
    config["migration"].setdefault("min_interval", 0.1)
    config["migration"].setdefault("max_concurrent", 1)
    config["migration"].setdefault("max_attempts", 5)
    config["migration"].setdefault("base_delay", 0.7)

    return config
