from __future__ import annotations

from typing import Any, Dict, List

from loguru import logger

from .config import DEBUGGER_DISABLE, DEBUGGER_ENABLE, SCRIPT_PARSED_EVENT
from .driver import Driver
from .errors import CaptureStateError
from .pipeline_types import CaptureState, ScriptParsedEvent


class SourceMapCollector:
    """
    Records ``Debugger.scriptParsed`` notifications that declare a source map.

    Between :meth:`open` and :meth:`close` every notification is inspected
    and the ones carrying a ``sourceMapURL`` are buffered in arrival order.
    Nothing is fetched here; resolution starts once the window is closed.
    """

    def __init__(self, driver: Driver) -> None:
        self._driver = driver
        self._events: List[ScriptParsedEvent] = []
        self._state = CaptureState.IDLE

        def on_script_parsed(params: Dict[str, Any]) -> None:
            event = ScriptParsedEvent.from_params(params)
            if event.has_source_map:
                self._events.append(event)

        self._on_script_parsed = on_script_parsed

    @property
    def state(self) -> CaptureState:
        return self._state

    async def open(self) -> None:
        if self._state is not CaptureState.IDLE:
            raise CaptureStateError(f"Cannot open capture window in state {self._state.value}")

        self._driver.on(SCRIPT_PARSED_EVENT, self._on_script_parsed)
        try:
            await self._driver.send_command(DEBUGGER_ENABLE)
        except Exception:
            self._driver.off(SCRIPT_PARSED_EVENT, self._on_script_parsed)
            raise
        self._state = CaptureState.CAPTURING
        logger.info("Source map capture window opened")

    async def close(self) -> List[ScriptParsedEvent]:
        if self._state is not CaptureState.CAPTURING:
            raise CaptureStateError(f"Cannot close capture window in state {self._state.value}")

        self._driver.off(SCRIPT_PARSED_EVENT, self._on_script_parsed)
        self._state = CaptureState.CAPTURED
        await self._driver.send_command(DEBUGGER_DISABLE)

        events, self._events = self._events, []
        logger.info("Source map capture window closed with {} scripts declaring a map", len(events))
        return events
