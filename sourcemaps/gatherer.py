from __future__ import annotations

"""
Capture-then-resolve lifecycle for one page load.

    IDLE --before_pass--> CAPTURING --after_pass--> CAPTURED -> RESOLVING -> DONE

``after_pass`` hands back the result collection exactly once. A gatherer is
good for a single capture window; build a fresh one for the next load.
"""

from typing import Awaitable, Callable, List, Optional

from loguru import logger

from .aggregate import resolve_all
from .collector import SourceMapCollector
from .config import SourceMapOutcome
from .driver import Driver, page_fetcher
from .errors import CaptureStateError
from .pipeline_types import CaptureState, TextFetcher


class SourceMapsGatherer:
    def __init__(self, driver: Driver, fetch_text: Optional[TextFetcher] = None) -> None:
        self._collector = SourceMapCollector(driver)
        self._fetch_text = fetch_text or page_fetcher(driver)
        self._state = CaptureState.IDLE

    @property
    def state(self) -> CaptureState:
        return self._state

    async def before_pass(self) -> None:
        if self._state is not CaptureState.IDLE:
            raise CaptureStateError(f"before_pass called in state {self._state.value}")
        await self._collector.open()
        self._state = CaptureState.CAPTURING

    async def after_pass(self) -> List[SourceMapOutcome]:
        if self._state is not CaptureState.CAPTURING:
            raise CaptureStateError(f"after_pass called in state {self._state.value}")
        # A failed Debugger.disable still ends the window; it is not reopened.
        self._state = CaptureState.CAPTURED
        events = await self._collector.close()

        self._state = CaptureState.RESOLVING
        results = await resolve_all(events, self._fetch_text)
        self._state = CaptureState.DONE
        return results

    async def cancel(self) -> None:
        """Close an open capture window without resolving anything."""
        if self._state is not CaptureState.CAPTURING:
            raise CaptureStateError(f"cancel called in state {self._state.value}")
        self._state = CaptureState.DONE
        await self._collector.close()


async def gather_source_maps(
    driver: Driver,
    load: Callable[[], Awaitable[object]],
    fetch_text: Optional[TextFetcher] = None,
) -> List[SourceMapOutcome]:
    """Open a capture window around ``load()`` and resolve what it saw."""
    gatherer = SourceMapsGatherer(driver, fetch_text)
    await gatherer.before_pass()
    try:
        await load()
    except Exception:
        logger.warning("Page load failed; closing capture window without resolving")
        await gatherer.cancel()
        raise
    return await gatherer.after_pass()
