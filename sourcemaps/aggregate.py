from __future__ import annotations

import asyncio
from typing import List, Optional, Sequence, cast

from loguru import logger

from .config import SourceMapFailure, SourceMapOutcome
from .fetcher import resolve_event
from .pipeline_types import ScriptParsedEvent, TextFetcher


async def resolve_all(
    events: Sequence[ScriptParsedEvent],
    fetch_text: TextFetcher,
) -> List[SourceMapOutcome]:
    """
    Resolve every buffered event concurrently, one outcome per event.

    Each task owns one slot of the output list, so the result order is the
    input order no matter which fetch finishes first. Tasks never raise
    (failures come back as outcomes), so the task group never cancels a
    sibling. There is no batch-wide deadline; each remote fetch carries its
    own timeout and inline maps are decoded without one.
    """
    pending = [e for e in events if e.has_source_map]
    if len(pending) != len(events):
        logger.warning("Skipping {} scripts without a source map reference", len(events) - len(pending))
    if not pending:
        return []

    slots: List[Optional[SourceMapOutcome]] = [None] * len(pending)

    async def run(index: int, event: ScriptParsedEvent) -> None:
        slots[index] = await resolve_event(event, fetch_text)

    async with asyncio.TaskGroup() as tg:
        for index, event in enumerate(pending):
            tg.create_task(run(index, event))

    # The group only exits once every run() has filled its slot.
    results = cast(List[SourceMapOutcome], slots)

    failed = sum(1 for r in results if isinstance(r, SourceMapFailure))
    logger.info("Resolved {} source maps ({} failed)", len(results), failed)
    return results
