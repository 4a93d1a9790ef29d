"""
Parsers and converters used by the import pipeline.

This subpackage exposes the item formatters from
:mod:`wp2contentful.parsers.formatters` and ``html_to_rich_text`` from
:mod:`wp2contentful.parsers.rich_text`.
"""

from .formatters import format_content, get_formatter, normalize_key, normalize_value
from .rich_text import html_to_rich_text

__all__ = ["format_content", "get_formatter", "html_to_rich_text", "normalize_key", "normalize_value"]
