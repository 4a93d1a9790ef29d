"""
Entry builders for categories, furniture and pages.

Categories are created from the channel level category list.  Furniture and
pages are built from formatted posts; they link to the assets uploaded for
them and, for furniture, to their category.  A failure on one furniture or
page entry is reported and returned as a failed :class:`EntryResult`
without stopping its siblings.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from ..extractors.wordpress_extractor import extract_categories
from ..models.content import AssetRecord, EntryResult, FormattedContentItem
from ..utils.errors import EntryBuildError, MigrationError, log_message, report_error, report_ok
from ..utils.ids import derive_id
from .contentful_migrator import (
    DEFAULT_RETRY,
    RateLimiter,
    RetryPolicy,
    asset_links,
    format_entry_fields,
    get_or_create_entry,
    link,
)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def parse_price(value: Optional[str]) -> Optional[float]:
    """Parse a post-meta price; blank means no price, garbage raises ``ValueError``."""
    if value is None or not str(value).strip():
        return None
    return float(str(value).strip())


def parse_sold(value: Optional[str]) -> bool:
    return str(value or "").strip().lower() in _TRUE_VALUES


def category_links(categories: List[Dict[str, Any]], slug: Optional[str], locale: str = "en-US") -> Optional[List[Dict[str, Any]]]:
    """Link to the created category whose slug matches ``slug``, if any."""
    if not slug:
        return None
    for category in categories:
        if ((category.get("fields") or {}).get("slug") or {}).get(locale) == slug:
            return [link("Entry", category["sys"]["id"])]
    return None


async def create_categories(
    environment: Any,
    limiter: RateLimiter,
    data: Dict[str, Any],
    *,
    locale: str = "en-US",
    retry: RetryPolicy = DEFAULT_RETRY,
) -> List[Dict[str, Any]]:
    """Get or create a ``category`` entry per exported category."""
    categories = []
    for category in extract_categories(data):
        if not category["slug"]:
            report_ok("ENTRY_SKIPPED", category, {"content_type": "category"})
            continue
        categories.append(category)

    return list(await asyncio.gather(*(
        get_or_create_entry(
            environment,
            limiter,
            "category",
            derive_id(category["slug"]),
            {"fields": format_entry_fields({"title": category["title"], "slug": category["slug"]}, locale)},
            retry=retry,
            item=category,
        )
        for category in categories
    )))


async def _build_entry(
    environment: Any,
    limiter: RateLimiter,
    content_type_id: str,
    post: FormattedContentItem,
    build_fields: Callable[[], Dict[str, Any]],
    *,
    locale: str,
    retry: RetryPolicy,
) -> EntryResult:
    item = {"title": post.title, "slug": post.post_name}
    entry_id = None
    entry_data = None
    try:
        if not post.guid:
            raise MigrationError("post has no guid")
        entry_id = derive_id(post.guid)
        entry_data = {"fields": format_entry_fields(build_fields(), locale)}
        entry = await get_or_create_entry(
            environment, limiter, content_type_id, entry_id, entry_data, retry=retry, item=item
        )
    except Exception as e:
        error = EntryBuildError(post.title, entry_data, e)
        report_error("ENTRY_BUILD", item, e, {"content_type": content_type_id, "payload": entry_data})
        log_message(f"Error creating {post.title}: {e}", level="ERROR")
        return EntryResult(title=post.title, entry_id=entry_id, error=error)
    return EntryResult(title=post.title, entry_id=entry_id, entry=entry)


def _with_slug(posts: Optional[List[FormattedContentItem]], content_type_id: str) -> List[FormattedContentItem]:
    kept = []
    for post in posts or []:
        if not post.post_name:
            report_ok("ENTRY_SKIPPED", {"title": post.title, "slug": post.post_name}, {"content_type": content_type_id})
            continue
        kept.append(post)
    return kept


async def create_furniture(
    environment: Any,
    limiter: RateLimiter,
    furniture: Optional[List[FormattedContentItem]],
    assets: List[AssetRecord],
    categories: List[Dict[str, Any]],
    *,
    locale: str = "en-US",
    retry: RetryPolicy = DEFAULT_RETRY,
) -> List[EntryResult]:
    """Get or create a ``furniture`` entry per furniture post with a slug."""

    def fields_for(post: FormattedContentItem) -> Callable[[], Dict[str, Any]]:
        def build() -> Dict[str, Any]:
            meta = post.postmeta
            return {
                "title": post.title,
                "slug": post.post_name,
                "body": post.content_rich_text,
                "images": asset_links(assets, post.post_id),
                "price": parse_price(meta.get("price")),
                "dimensions": meta.get("dimensions"),
                "sold": parse_sold(meta.get("sold")),
                "categories": category_links(categories, post.category_slug, locale),
            }
        return build

    return list(await asyncio.gather(*(
        _build_entry(environment, limiter, "furniture", post, fields_for(post), locale=locale, retry=retry)
        for post in _with_slug(furniture, "furniture")
    )))


async def create_pages(
    environment: Any,
    limiter: RateLimiter,
    pages: Optional[List[FormattedContentItem]],
    assets: List[AssetRecord],
    *,
    locale: str = "en-US",
    retry: RetryPolicy = DEFAULT_RETRY,
) -> List[EntryResult]:
    """Get or create a ``page`` entry per page with a slug."""

    def fields_for(post: FormattedContentItem) -> Callable[[], Dict[str, Any]]:
        def build() -> Dict[str, Any]:
            images = asset_links(assets, post.post_id)
            return {
                "title": post.title,
                "slug": post.post_name,
                "body": post.content_rich_text,
                "featuredImage": images[0] if images else None,
            }
        return build

    return list(await asyncio.gather(*(
        _build_entry(environment, limiter, "page", post, fields_for(post), locale=locale, retry=retry)
        for post in _with_slug(pages, "page")
    )))
