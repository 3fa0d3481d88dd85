from __future__ import annotations

import asyncio
from typing import List

import httpx
from loguru import logger

from .config import (
    HTTP_CONNECT_TIMEOUT,
    HTTP_MAX_REDIRECTS,
    HTTP_MAX_BYTES,
    HTTP_USER_AGENT,
)
from .errors import FetchStatusError, FetchTimeoutError, FetchTooLargeError
from .pipeline_types import TextFetcher


def http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        headers={"User-Agent": HTTP_USER_AGENT},
        follow_redirects=True,
        timeout=httpx.Timeout(None, connect=HTTP_CONNECT_TIMEOUT),
        max_redirects=HTTP_MAX_REDIRECTS,
    )


async def fetch_text(client: httpx.AsyncClient, url: str, *, timeout: float) -> str:
    """
    Fetch a source map body directly, outside any page.

    Used when resolving recorded scripts, where there is no page to run the
    fetch in. Mirrors the in-page contract:
      - non-2xx -> FetchStatusError
      - timeout -> FetchTimeoutError
      - size cap -> FetchTooLargeError
    Anything else httpx raises propagates to the caller.

    ``timeout`` bounds the whole request, body included; httpx's own timeouts
    only bound each read, which a trickling server never trips. The body is
    streamed so the size cap stops the download instead of checking it after.
    """
    chunks: List[bytes] = []
    size = 0
    try:
        async with asyncio.timeout(timeout):
            async with client.stream(
                "GET", url, timeout=httpx.Timeout(timeout, connect=min(timeout, HTTP_CONNECT_TIMEOUT))
            ) as r:
                if not r.is_success:
                    logger.warning("Source map fetch: HTTP {} for {}", r.status_code, url)
                    raise FetchStatusError(r.status_code, url)

                async for chunk in r.aiter_bytes():
                    size += len(chunk)
                    if size > HTTP_MAX_BYTES:
                        logger.warning("Source map fetch aborted: over {} bytes for {}", HTTP_MAX_BYTES, url)
                        raise FetchTooLargeError(url, size, HTTP_MAX_BYTES)
                    chunks.append(chunk)
                encoding = r.encoding or "utf-8"
    except (httpx.TimeoutException, TimeoutError):
        logger.warning("Source map fetch timeout for {}", url)
        raise FetchTimeoutError(url, timeout)

    return b"".join(chunks).decode(encoding, errors="replace")


def http_fetcher(client: httpx.AsyncClient) -> TextFetcher:
    """Bind :func:`fetch_text` to a client so it fits the TextFetcher shape."""

    async def fetch(url: str, *, timeout: float) -> str:
        return await fetch_text(client, url, timeout=timeout)

    return fetch
