"""
Contentful API migrators and helpers.

This subpackage provides the Content Management API client, the shared
rate limiter and retry wrapper, the get-or-create primitive, the asset
uploader and the category, furniture and page entry builders.
"""

from .assets import upload_attachments
from .contentful_migrator import (
    ContentfulClient,
    RateLimiter,
    RetryPolicy,
    create_with_retries,
    format_entry_fields,
    get_or_create_entry,
    with_retries,
)
from .entries import create_categories, create_furniture, create_pages

__all__ = [
    "ContentfulClient",
    "RateLimiter",
    "RetryPolicy",
    "create_categories",
    "create_furniture",
    "create_pages",
    "create_with_retries",
    "format_entry_fields",
    "get_or_create_entry",
    "upload_attachments",
    "with_retries",
]
