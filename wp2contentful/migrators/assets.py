"""
Upload of WordPress attachments as Contentful assets.

Each attachment maps to the asset whose ID is the full SHA-256 of its GUID.
Missing assets are created from the attachment URL, processed for every
locale and polled until Contentful has stored the file.
"""

from __future__ import annotations

import asyncio
import functools
import mimetypes
import os
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from ..models.content import AssetRecord, FormattedContentItem
from ..utils.errors import MigrationError, RemoteNotFound, RemoteTransientError, report_ok
from ..utils.ids import derive_id
from .contentful_migrator import DEFAULT_RETRY, RateLimiter, RetryPolicy, create_with_retries, with_retries

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(url: str) -> str:
    content_type, _ = mimetypes.guess_type(urlparse(url).path)
    return content_type or DEFAULT_CONTENT_TYPE


def guess_extension(content_type: str, url: str) -> str:
    extension = mimetypes.guess_extension(content_type) if content_type != DEFAULT_CONTENT_TYPE else None
    if not extension:
        extension = os.path.splitext(urlparse(url).path)[1]
    return extension or ""


def asset_payload(attachment: FormattedContentItem, locale: str = "en-US") -> Dict[str, Any]:
    """Build the creation payload for ``attachment``."""
    url = attachment.attachment_url
    if not url:
        raise MigrationError(f"Attachment {attachment.post_name or attachment.guid} has no attachment_url")
    content_type = guess_content_type(url)
    # attachments without a slug are named after the uploaded file
    name = attachment.post_name or os.path.splitext(os.path.basename(urlparse(url).path))[0] or "asset"
    return {
        "fields": {
            "title": {locale: attachment.title or name},
            "file": {
                locale: {
                    "contentType": content_type,
                    "fileName": f"{name}{guess_extension(content_type, url)}",
                    "upload": url,
                }
            },
        }
    }


def _is_processed(asset: Dict[str, Any]) -> bool:
    files = (asset.get("fields") or {}).get("file") or {}
    return bool(files) and all(f.get("url") for f in files.values())


async def _wait_until_processed(environment: Any, limiter: RateLimiter, asset_id: str) -> Dict[str, Any]:
    asset = await limiter.schedule(environment.get_asset, asset_id)
    if not _is_processed(asset):
        raise RemoteTransientError(f"Asset {asset_id} is still processing")
    return asset


async def upload_attachment(
    environment: Any,
    limiter: RateLimiter,
    attachment: FormattedContentItem,
    *,
    locale: str = "en-US",
    retry: RetryPolicy = DEFAULT_RETRY,
) -> AssetRecord:
    key = attachment.guid or attachment.attachment_url
    if not key:
        raise MigrationError(f"Attachment {attachment.post_name} has neither guid nor attachment_url")
    asset_id = derive_id(key, length=None)
    item = {"title": attachment.title, "slug": attachment.post_name}

    # check if the asset already exists in the space
    try:
        asset = await limiter.schedule(environment.get_asset, asset_id)
    except RemoteNotFound:
        asset = None
    if asset is not None:
        report_ok("ASSET_FOUND", item, {"asset_id": asset_id})
        return AssetRecord(attachment=attachment, asset=asset)

    data = asset_payload(attachment, locale)
    asset = await create_with_retries(
        limiter,
        functools.partial(environment.create_asset_with_id, asset_id, data),
        functools.partial(environment.get_asset, asset_id),
        retry=retry,
    )
    if _is_processed(asset):
        report_ok("ASSET_FOUND", item, {"asset_id": asset_id})
        return AssetRecord(attachment=attachment, asset=asset)

    # one gated request per locale file
    for file_locale in (asset.get("fields") or {}).get("file") or {}:
        await with_retries(
            functools.partial(limiter.schedule, environment.process_asset_file, asset, file_locale),
            policy=retry,
        )
    asset = await with_retries(lambda: _wait_until_processed(environment, limiter, asset_id), policy=retry)
    report_ok("ASSET_CREATED", item, {"asset_id": asset_id, "url": attachment.attachment_url})
    return AssetRecord(attachment=attachment, asset=asset)


async def upload_attachments(
    environment: Any,
    limiter: RateLimiter,
    attachments: Optional[List[FormattedContentItem]],
    *,
    locale: str = "en-US",
    retry: RetryPolicy = DEFAULT_RETRY,
) -> List[AssetRecord]:
    """
    Ensure an asset exists for every attachment.

    The returned records keep the source attachment next to its asset so
    that later stages can resolve the assets belonging to a post.  Any
    failure aborts the upload.
    """
    return list(await asyncio.gather(*(
        upload_attachment(environment, limiter, attachment, locale=locale, retry=retry)
        for attachment in attachments or []
    )))
