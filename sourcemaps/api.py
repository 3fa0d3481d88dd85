from __future__ import annotations

"""
FastAPI application for resolving recorded scripts' source maps.

- POST /resolve takes Debugger.scriptParsed payloads captured elsewhere and
  fetches their maps directly (no page involved)
- one outcome per script that declared a map, in request order
- broken maps come back as failure entries, never as an HTTP error
- the server fetches caller-supplied URLs, so requests (redirects included)
  to localhost and non-public IP literals are refused unless
  RESOLVE_ALLOW_PRIVATE_HOSTS=1; hostnames that resolve to private addresses
  are not checked, so deploy behind an egress policy if that matters
"""

from typing import List

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from . import config
from .aggregate import resolve_all
from .config import HealthResponse, ResolveRequest, ResolveResponse
from .errors import BlockedHostError
from .http_fetch import http_client, http_fetcher
from .pipeline_types import ScriptParsedEvent
from .utils.urls import is_private_host


app = FastAPI()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


async def refuse_private_hosts(request: httpx.Request) -> None:
    # httpx runs request hooks before every send, redirect hops included.
    if is_private_host(request.url.host):
        logger.warning("Blocked source map fetch to {}", request.url)
        raise BlockedHostError(str(request.url), request.url.host)


async def run_resolution(events: List[ScriptParsedEvent]) -> ResolveResponse:
    async with http_client() as client:
        if not config.RESOLVE_ALLOW_PRIVATE_HOSTS:
            client.event_hooks["request"].append(refuse_private_hosts)
        outcomes = await resolve_all(events, http_fetcher(client))
    return ResolveResponse(source_maps=outcomes)


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse(status="healthy")


@app.post("/resolve", response_model=ResolveResponse)
async def resolve(req: ResolveRequest) -> ResolveResponse:
    events = [
        ScriptParsedEvent(url=s.url, source_map_url=s.source_map_url or None)
        for s in req.scripts
    ]
    events = [e for e in events if e.has_source_map]
    logger.info("Resolve request: {} scripts, {} declaring a map", len(req.scripts), len(events))
    return await run_resolution(events)
