"""
High-level orchestration of the WordPress → Contentful import.

This module defines a :class:`ContentfulImportTool` class that ties
together the extractors, parsers and migrators into a complete pipeline.
The stages run strictly in order, each one reading what the previous ones
stored on a shared :class:`PipelineContext`:

1. split the exported items by post type,
2. format them (field normalization, HTML to rich text),
3. resolve the Contentful space and environment,
4. upload attachments as assets,
5. create categories,
6. create furniture entries (linking assets and categories),
7. create pages (linking assets).

Nothing that links to an asset or a category runs before the stage that
creates it.  A stage failure aborts the run; failures of single furniture
or page entries are contained by the entry builders.

Configuration is supplied via a JSON file path or directly as a
dictionary, see :func:`wp2contentful.utils.config.load_config`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from .extractors.wordpress_extractor import split_data_by_post_type
from .migrators.assets import upload_attachments
from .migrators.contentful_migrator import ContentfulClient, RateLimiter, RetryPolicy
from .migrators.entries import create_categories, create_furniture, create_pages
from .models.content import AssetRecord, EntryResult, FormattedContentItem
from .parsers.formatters import format_content
from .utils.config import load_config
from .utils.errors import log_message


@dataclass
class PipelineContext:
    """State shared by the pipeline stages, written by one stage at a time."""

    data: Dict[str, Any]
    content_raw: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    content: Dict[str, List[FormattedContentItem]] = field(default_factory=dict)
    space: Any = None
    environment: Any = None
    assets: List[AssetRecord] = field(default_factory=list)
    categories: List[Dict[str, Any]] = field(default_factory=list)
    furniture: List[EntryResult] = field(default_factory=list)
    pages: List[EntryResult] = field(default_factory=list)


Stage = Callable[[PipelineContext], Awaitable[None]]


class ContentfulImportTool:
    """
    Encapsulates the configuration, the Contentful client and the shared
    rate limiter, and runs the import stages in dependency order.

    ``client`` and ``limiter`` may be injected, e.g. with fakes in tests.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        *,
        config_file: Optional[str] = None,
        client: Any = None,
        limiter: Optional[RateLimiter] = None,
    ) -> None:
        self.config = load_config(config, config_file=config_file)
        contentful = self.config["contentful"]
        migration = self.config["migration"]

        self.locale: str = contentful["locale"]
        self.client = client or ContentfulClient(
            contentful["access_token"],
            base_url=contentful["base_url"],
            timeout=contentful["timeout"],
        )
        self.limiter = limiter or RateLimiter(
            min_interval=migration["min_interval"],
            max_concurrent=migration["max_concurrent"],
        )
        self.retry = RetryPolicy(
            max_attempts=int(migration["max_attempts"]),
            base_delay=float(migration["base_delay"]),
        )

    def log_message(self, message: str, level: str = "INFO") -> None:
        log_message(message, level)

    def stages(self) -> List[Tuple[str, Stage]]:
        return [
            ("Split data by post type", self.split_by_post_type),
            ("Format post data", self.format_posts),
            ("Get Contentful space", self.get_space),
            ("Upload attachments as Contentful assets", self.upload_assets),
            ("Create categories", self.create_categories),
            ("Create furniture posts", self.create_furniture),
            ("Create pages", self.create_pages),
        ]

    async def run(self, data: Dict[str, Any]) -> PipelineContext:
        """
        Run every stage against the export ``data``.

        :return: The final context, with created assets and entries.
        :raises Exception: the first stage failure, unchanged.
        """
        ctx = PipelineContext(data=data)
        for title, stage in self.stages():
            self.log_message(title)
            try:
                await stage(ctx)
            except Exception as e:
                self.log_message(f"Stage '{title}' failed: {e}", level="ERROR")
                raise
        self.log_message(
            f"Import finished: {len(ctx.assets)} assets, {len(ctx.categories)} categories, "
            f"{sum(r.ok for r in ctx.furniture)}/{len(ctx.furniture)} furniture, "
            f"{sum(r.ok for r in ctx.pages)}/{len(ctx.pages)} pages"
        )
        return ctx

    async def split_by_post_type(self, ctx: PipelineContext) -> None:
        ctx.content_raw = split_data_by_post_type(ctx.data, self.config["migration"]["skip_content_types"])

    async def format_posts(self, ctx: PipelineContext) -> None:
        ctx.content = await format_content(ctx.content_raw)

    async def get_space(self, ctx: PipelineContext) -> None:
        contentful = self.config["contentful"]
        ctx.space = await self.limiter.schedule(self.client.get_space, contentful["space_id"])
        ctx.environment = await self.limiter.schedule(ctx.space.get_environment, contentful["environment_id"])

    async def upload_assets(self, ctx: PipelineContext) -> None:
        ctx.assets = await upload_attachments(
            ctx.environment,
            self.limiter,
            ctx.content.get("attachment"),
            locale=self.locale,
            retry=self.retry,
        )

    async def create_categories(self, ctx: PipelineContext) -> None:
        ctx.categories = await create_categories(
            ctx.environment, self.limiter, ctx.data, locale=self.locale, retry=self.retry
        )

    async def create_furniture(self, ctx: PipelineContext) -> None:
        ctx.furniture = await create_furniture(
            ctx.environment,
            self.limiter,
            ctx.content.get("furniture"),
            ctx.assets,
            ctx.categories,
            locale=self.locale,
            retry=self.retry,
        )

    async def create_pages(self, ctx: PipelineContext) -> None:
        ctx.pages = await create_pages(
            ctx.environment,
            self.limiter,
            ctx.content.get("page"),
            ctx.assets,
            locale=self.locale,
            retry=self.retry,
        )
