"""
Formatting of raw export items into :class:`FormattedContentItem` records.

Every field name is normalized (``wp:post_type`` → ``postType``) and every
value unwrapped from its CDATA/text node.  The ``content:encoded`` and
``excerpt:encoded`` bodies are additionally converted to Contentful rich
text; the conversion runs in a worker thread so that several items can be
formatted concurrently.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..models.content import FormattedContentItem
from ..utils.errors import UnsupportedTypeError
from .rich_text import html_to_rich_text

__all__ = [
    "format_content",
    "get_formatter",
    "normalize_key",
    "normalize_value",
]

Formatter = Callable[[Dict[str, Any]], Awaitable[FormattedContentItem]]

_MORE_MARKER = re.compile(r"<!--more-->\s*")
_SEPARATOR = re.compile(r"[:_](\w)")


def normalize_key(key: str) -> str:
    """Strip the ``wp:`` namespace and camel-case the rest of ``key``."""
    key = re.sub(r"^wp:", "", key)
    return _SEPARATOR.sub(lambda m: m.group(1).upper(), key)


def normalize_value(value: Any) -> Any:
    """Unwrap CDATA/text nodes and clean up string values.

    Empty structured values (``{}`` or ``[]``) collapse to ``None``.
    """
    if isinstance(value, dict):
        if "_cdata" in value:
            value = value["_cdata"]
        elif "_text" in value:
            value = value["_text"]
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return _MORE_MARKER.sub("", value).replace("\r\n", "\n")
    if isinstance(value, (dict, list)) and not value:
        return None
    return value


def _normalize_post_meta(raw: Any) -> Dict[str, Optional[str]]:
    if raw is None:
        return {}
    entries = raw if isinstance(raw, list) else [raw]
    meta: Dict[str, Optional[str]] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        key = normalize_value(entry.get("wp:meta_key"))
        if not isinstance(key, str):
            continue
        value = normalize_value(entry.get("wp:meta_value"))
        meta[key] = value if value is None or isinstance(value, str) else str(value)
    return meta


def _category_slug(raw: Any) -> Optional[str]:
    # Posts list their categories as <category domain="category" nicename="...">
    for category in raw if isinstance(raw, list) else [raw]:
        if not isinstance(category, dict):
            continue
        attributes = category.get("_attributes") or {}
        if attributes.get("domain", "category") == "category" and attributes.get("nicename"):
            return attributes["nicename"]
    return None


def base_formatter(content_type: str) -> Formatter:
    async def formatter(item: Dict[str, Any]) -> FormattedContentItem:
        fields: Dict[str, Any] = {}
        for key, value in item.items():
            if key == "wp:postmeta":
                fields["postmeta"] = _normalize_post_meta(value)
            else:
                fields[normalize_key(key)] = normalize_value(value)
        fields["contentType"] = content_type

        fields["contentRichText"] = await asyncio.to_thread(html_to_rich_text, fields.get("contentEncoded"))
        fields["excerptRichText"] = await asyncio.to_thread(html_to_rich_text, fields.get("excerptEncoded"))
        fields["categorySlug"] = _category_slug(item.get("category"))
        return FormattedContentItem.model_validate(fields)

    return formatter


format_furniture = base_formatter("furniture")
format_page = base_formatter("page")
format_attachment = base_formatter("attachment")

_FORMATTERS: Dict[str, Formatter] = {
    "furniture": format_furniture,
    "page": format_page,
    "attachment": format_attachment,
}


def get_formatter(post_type: Optional[str]) -> Formatter:
    """Return the formatter for ``post_type`` or raise :class:`UnsupportedTypeError`."""
    try:
        return _FORMATTERS[post_type]
    except KeyError:
        raise UnsupportedTypeError(post_type) from None


async def format_content(content_raw: Dict[str, List[Dict[str, Any]]]) -> Dict[str, List[FormattedContentItem]]:
    """Format every classified item, concurrently within each post type."""
    content: Dict[str, List[FormattedContentItem]] = {}
    for post_type, items in content_raw.items():
        formatter = get_formatter(post_type)
        content[post_type] = list(await asyncio.gather(*(formatter(item) for item in items)))
    return content
