from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional

from ..utils.config import SKIP_CONTENT_TYPES


def _as_list(value: Any) -> List[Any]:
    """The XML→JSON mirror collapses single-element lists into the element."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _text(value: Any) -> Optional[str]:
    """Unwrap a ``{"_cdata": ...}`` / ``{"_text": ...}`` node to its string."""
    if isinstance(value, dict):
        if "_cdata" in value:
            return value["_cdata"]
        if "_text" in value:
            return str(value["_text"])
        return None
    if value is None:
        return None
    return str(value)


def load_export(file_path: str) -> Dict[str, Any]:
    """Loads the JSON mirror of a WordPress XML export.

    Args:
        file_path (str): Path to the JSON document.

    Returns:
        dict: The export document, ``{"rss": {"channel": {...}}}``.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the document does not contain an RSS channel.
    """
    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict) or "channel" not in (data.get("rss") or {}):
        raise ValueError(f"{file_path} is not a WordPress export (missing rss.channel)")
    return data


def split_data_by_post_type(
    data: Dict[str, Any], skip: Iterable[str] = SKIP_CONTENT_TYPES
) -> Dict[str, List[Dict[str, Any]]]:
    """Groups the exported items by their ``wp:post_type``.

    Items whose post type is listed in ``skip`` are dropped.  The order of
    items inside each group follows the export.

    Args:
        data (dict): The export document.
        skip (Iterable[str]): Post types to discard.

    Returns:
        dict: Post type → list of raw items.
    """
    skipped = set(skip)
    content: Dict[str, List[Dict[str, Any]]] = {}
    for item in _as_list(data["rss"]["channel"].get("item")):
        post_type = _text(item.get("wp:post_type"))
        if post_type in skipped:
            continue
        content.setdefault(post_type, []).append(item)
    return content


def extract_categories(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Returns the channel level category definitions.

    Each definition is a dictionary with ``title``, ``slug`` and
    ``category_id`` keys.
    """
    categories = []
    for category in _as_list(data["rss"]["channel"].get("wp:category")):
        categories.append({
            "title": _text(category.get("wp:cat_name")) or "",
            "slug": _text(category.get("wp:category_nicename")) or "",
            "category_id": _text(category.get("wp:term_id")),
        })
    return categories
