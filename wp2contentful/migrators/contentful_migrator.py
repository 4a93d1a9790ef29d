"""
Contentful Management API helpers for the WordPress → Contentful import.

This module implements low-level interactions with the Contentful
Management API (CMA).  :class:`ContentfulClient` resolves a space and an
environment; :class:`Environment` exposes the asset and entry calls the
import needs.  Every call made by the pipeline goes through a
:class:`RateLimiter` which allows a bounded number of in-flight requests
and enforces a minimum spacing between dispatches, keeping the import under
the CMA request quota.  A retry wrapper absorbs transient failures (429,
5xx, network errors) during creation, publishing and asset processing.

Failures are translated into the importer's taxonomy so callers can tell a
missing object (:class:`RemoteNotFound`) from a transient
(:class:`RemoteTransientError`) or fatal (:class:`RemoteFatalError`) one.

Usage example::

    client = ContentfulClient(token)
    limiter = RateLimiter(min_interval=0.1)
    space = await limiter.schedule(client.get_space, space_id)
    environment = await limiter.schedule(space.get_environment, "master")
    entry = await get_or_create_entry(
        environment, limiter, "category", derive_id("chairs"),
        {"fields": format_entry_fields({"title": "Chairs", "slug": "chairs"})},
    )
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import json
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

import requests

from ..utils.errors import (
    RemoteFatalError,
    RemoteNotFound,
    RemoteTransientError,
    log_message,
    report_ok,
)

CMA_CONTENT_TYPE = "application/vnd.contentful.management.v1+json"
TRANSIENT_STATUSES = (429, 500, 502, 503, 504)

###############################################################################
# Rate limiting and retry utilities
###############################################################################

class RateLimiter:
    """
    Gateway for every remote call.  At most ``max_concurrent`` calls are in
    flight and successive dispatches are spaced by at least
    ``min_interval`` seconds.  Blocking callables run in a worker thread so
    the event loop keeps formatting other items meanwhile.
    """

    def __init__(
        self,
        min_interval: float = 0.1,
        max_concurrent: int = 1,
        *,
        time_fn: Callable[[], float] = time.monotonic,
        sleep_fn: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.min_interval = max(0.0, float(min_interval))
        self.max_concurrent = max(1, int(max_concurrent))
        self._time_fn = time_fn
        self._sleep_fn = sleep_fn
        self._semaphore = asyncio.Semaphore(self.max_concurrent)
        self._dispatch_lock = asyncio.Lock()
        self._last: Optional[float] = None

    async def wait(self) -> None:
        async with self._dispatch_lock:
            if self._last is not None:
                dt = self._time_fn() - self._last
                if dt < self.min_interval:
                    await self._sleep_fn(self.min_interval - dt)
            self._last = self._time_fn()

    async def schedule(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        async with self._semaphore:
            await self.wait()
            if inspect.iscoroutinefunction(fn):
                return await fn(*args, **kwargs)
            return await asyncio.to_thread(fn, *args, **kwargs)


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 5
    base_delay: float = 0.7
    max_delay: float = 30.0


DEFAULT_RETRY = RetryPolicy()


async def with_retries(
    fn: Callable[[], Awaitable[Any]],
    *,
    policy: RetryPolicy = DEFAULT_RETRY,
    sleep_fn: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Any:
    """
    Await ``fn()``, retrying on :class:`RemoteTransientError`.  Backoff is
    exponential unless the server sent a reset hint.  Any other error is
    raised immediately; the last transient error is raised once
    ``policy.max_attempts`` is reached.

    :param fn: A zero-argument callable returning an awaitable.
    :param policy: Attempt cap and backoff delays.
    :return: The result of the first successful attempt.
    """
    attempt = 0
    while True:
        try:
            return await fn()
        except RemoteTransientError as e:
            if attempt >= policy.max_attempts - 1:
                raise
            if e.retry_after is not None:
                wait = e.retry_after
            else:
                wait = policy.base_delay * (2 ** attempt)
            log_message(f"Transient error ({e}); retrying in {wait:.1f}s", level="WARNING")
            await sleep_fn(min(wait, policy.max_delay))
            attempt += 1


###############################################################################
# CMA client
###############################################################################

def _retry_after(resp: requests.Response) -> Optional[float]:
    value = resp.headers.get("X-Contentful-RateLimit-Reset") or resp.headers.get("Retry-After")
    try:
        return float(value) if value is not None else None
    except ValueError:
        return None


class ContentfulClient:
    """
    Minimal synchronous CMA client on top of :class:`requests.Session`.

    :param access_token: A Content Management API token.
    :param base_url: CMA base URL.
    :param timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        access_token: str,
        *,
        base_url: str = "https://api.contentful.com",
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {access_token}",
            "Content-Type": CMA_CONTENT_TYPE,
        })

    def request(
        self,
        method: str,
        path: str,
        *,
        body: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Perform one CMA request and return the decoded JSON body.

        :raises RemoteNotFound: on 404.
        :raises RemoteTransientError: on 429, 5xx, connection errors and timeouts.
        :raises RemoteFatalError: on any other error status.
        """
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(
                method,
                url,
                headers=headers,
                data=json.dumps(body) if body is not None else None,
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code
            message = f"{method} {path} failed with {status}: {e.response.text}"
            if status == 404:
                raise RemoteNotFound(message, status_code=status) from e
            if status in TRANSIENT_STATUSES:
                raise RemoteTransientError(message, status_code=status, retry_after=_retry_after(e.response)) from e
            raise RemoteFatalError(message, status_code=status) from e
        except (requests.ConnectionError, requests.Timeout) as e:
            raise RemoteTransientError(f"{method} {path} failed: {e}") from e
        if resp.status_code == 204 or not resp.content:
            return None
        return resp.json()

    def get_space(self, space_id: str) -> "Space":
        return Space(self, self.request("GET", f"/spaces/{space_id}"))


class Space:
    def __init__(self, client: ContentfulClient, data: Dict[str, Any]) -> None:
        self.client = client
        self.data = data

    @property
    def id(self) -> str:
        return self.data["sys"]["id"]

    def get_environment(self, environment_id: str) -> "Environment":
        data = self.client.request("GET", f"/spaces/{self.id}/environments/{environment_id}")
        return Environment(self.client, self.id, data)


class Environment:
    """Asset and entry calls scoped to one space environment."""

    def __init__(self, client: ContentfulClient, space_id: str, data: Dict[str, Any]) -> None:
        self.client = client
        self.space_id = space_id
        self.data = data

    @property
    def id(self) -> str:
        return self.data["sys"]["id"]

    @property
    def _base(self) -> str:
        return f"/spaces/{self.space_id}/environments/{self.id}"

    def get_asset(self, asset_id: str) -> Dict[str, Any]:
        return self.client.request("GET", f"{self._base}/assets/{asset_id}")

    def create_asset_with_id(self, asset_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.request("PUT", f"{self._base}/assets/{asset_id}", body=data)

    def process_asset_file(self, asset: Dict[str, Any], locale: str) -> None:
        """Trigger processing of the ``locale`` file of ``asset``.  One request per call."""
        self.client.request(
            "PUT",
            f"{self._base}/assets/{asset['sys']['id']}/files/{locale}/process",
            headers={"X-Contentful-Version": str(asset["sys"]["version"])},
        )

    def get_entry(self, entry_id: str) -> Dict[str, Any]:
        return self.client.request("GET", f"{self._base}/entries/{entry_id}")

    def create_entry_with_id(self, content_type_id: str, entry_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.request(
            "PUT",
            f"{self._base}/entries/{entry_id}",
            body=data,
            headers={"X-Contentful-Content-Type": content_type_id},
        )

    def publish_entry(self, entry: Dict[str, Any]) -> Dict[str, Any]:
        return self.client.request(
            "PUT",
            f"{self._base}/entries/{entry['sys']['id']}/published",
            headers={"X-Contentful-Version": str(entry["sys"]["version"])},
        )


###############################################################################
# Payload helpers
###############################################################################

def format_entry_fields(fields: Dict[str, Any], locale: str = "en-US") -> Dict[str, Any]:
    """Wrap each field value in its locale; fields set to ``None`` are left out."""
    return {key: {locale: value} for key, value in fields.items() if value is not None}


def link(link_type: str, target_id: str) -> Dict[str, Any]:
    return {"sys": {"type": "Link", "linkType": link_type, "id": target_id}}


def asset_links(assets: List[Any], post_id: Optional[str]) -> List[Dict[str, Any]]:
    """Links to every asset whose attachment belongs to ``post_id``."""
    if post_id is None:
        return []
    return [
        link("Asset", record.asset_id)
        for record in assets
        if record.attachment.post_parent == post_id
    ]


###############################################################################
# Get-or-create
###############################################################################

async def create_with_retries(
    limiter: RateLimiter,
    create: Callable[[], Dict[str, Any]],
    lookup: Callable[[], Dict[str, Any]],
    *,
    retry: RetryPolicy = DEFAULT_RETRY,
) -> Dict[str, Any]:
    """
    Run ``create`` through the limiter, retrying transient failures.

    A create whose response was lost (timeout, dropped connection) may
    still have been committed; the next ``PUT`` then fails with 409
    VersionMismatch.  On a retry that conflict means the object exists, so
    it is fetched with ``lookup`` instead of failing.
    """
    attempts = 0

    async def attempt() -> Dict[str, Any]:
        nonlocal attempts
        attempts += 1
        try:
            return await limiter.schedule(create)
        except RemoteFatalError as e:
            if e.status_code != 409 or attempts == 1:
                raise
            log_message(f"Create conflicted after a failed attempt ({e}); fetching existing object", level="WARNING")
            return await limiter.schedule(lookup)

    return await with_retries(attempt, policy=retry)


async def get_or_create_entry(
    environment: Any,
    limiter: RateLimiter,
    content_type_id: str,
    entry_id: str,
    entry_data: Dict[str, Any],
    *,
    retry: RetryPolicy = DEFAULT_RETRY,
    item: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Return the entry ``entry_id``, creating and publishing it when missing.

    Only a 404 on the lookup leads to creation; every other lookup failure
    is raised unchanged.  Creation and publishing are retried on transient
    errors.

    :param environment: Environment exposing ``get_entry``,
        ``create_entry_with_id`` and ``publish_entry``.
    :param limiter: The shared rate limiter.
    :param content_type_id: Contentful content type of the entry.
    :param entry_id: Deterministic entry ID.
    :param entry_data: Payload used when the entry has to be created.
    :param item: Optional context for the success report.
    :return: The existing or newly published entry.
    """
    item = item or {"slug": entry_id}
    try:
        entry = await limiter.schedule(environment.get_entry, entry_id)
    except RemoteNotFound:
        entry = None
    if entry is not None:
        report_ok("ENTRY_FOUND", item, {"content_type": content_type_id, "entry_id": entry_id})
        return entry

    entry = await create_with_retries(
        limiter,
        functools.partial(environment.create_entry_with_id, content_type_id, entry_id, entry_data),
        functools.partial(environment.get_entry, entry_id),
        retry=retry,
    )
    entry = await with_retries(lambda: limiter.schedule(environment.publish_entry, entry), policy=retry)
    report_ok("ENTRY_CREATED", item, {"content_type": content_type_id, "entry_id": entry_id})
    return entry
