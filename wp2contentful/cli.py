"""
Command line entry point for the WordPress to Contentful import.
"""

import asyncio
import json
import sys

from .extractors.wordpress_extractor import load_export
from .migration_tool import ContentfulImportTool
from .utils.config import CONFIG_FILE
from .utils.pre_flight_checks import PreFlightCheckError, run_contentful_pre_flight_checks


def main() -> int:
    """
    Main function to run the WordPress to Contentful import.
    """
    tool = ContentfulImportTool(config_file=CONFIG_FILE)
    tool.log_message("Starting WordPress to Contentful import.")

    try:
        run_contentful_pre_flight_checks(tool.config)
    except PreFlightCheckError as e:
        tool.log_message(str(e), level="ERROR")
        return 1

    data_file = tool.config["migration"]["data_file"]
    try:
        data = load_export(data_file)
    except (OSError, ValueError) as e:
        tool.log_message(f"Could not read export {data_file}: {e}", level="ERROR")
        return 1

    try:
        ctx = asyncio.run(tool.run(data))
    except Exception as e:
        print(repr(e), file=sys.stderr)
        return 1

    print(json.dumps([result.entry for result in ctx.pages], indent=2, ensure_ascii=False))
    return 0
