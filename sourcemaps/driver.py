from __future__ import annotations

"""
The slice of a DevTools driver the gatherer depends on.

The driver itself (websocket transport, command ids, session routing) lives
outside this package. Anything that provides the four methods of
:class:`Driver` can be handed to the collector and the gatherer; the tests
use an in-memory fake.

Drivers are expected to raise :class:`~sourcemaps.errors.DriverError` when a
command fails, :class:`~sourcemaps.errors.ProtocolTimeoutError` when
``evaluate_async`` runs past its timeout, and
:class:`~sourcemaps.errors.PageEvaluationError` (carrying the page's error
text) when the evaluated expression throws.
"""

import json
from typing import Any, Callable, Dict, Optional, Protocol

from .errors import PageEvaluationError
from .pipeline_types import TextFetcher

EventCallback = Callable[[Dict[str, Any]], None]


class Driver(Protocol):
    def on(self, event_name: str, callback: EventCallback) -> None: ...

    def off(self, event_name: str, callback: EventCallback) -> None: ...

    async def send_command(
        self, method: str, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]: ...

    async def evaluate_async(self, expression: str, *, timeout: float) -> Any: ...


# Runs inside the page. The body is returned as text on purpose: parsing it
# there would only re-serialise a possibly huge map over the protocol.
FETCH_SOURCE_MAP_JS = """async function fetchSourceMap(url) {
  const response = await fetch(url);
  if (response.ok) {
    return response.text();
  } else {
    throw new Error(`Received status code ${response.status} for ${url}`);
  }
}"""


def fetch_source_map_expression(url: str) -> str:
    return f"({FETCH_SOURCE_MAP_JS})({json.dumps(url)})"


def page_fetcher(driver: Driver) -> TextFetcher:
    """Build a text fetcher that performs the request from inside the page."""

    async def fetch_text(url: str, *, timeout: float) -> str:
        body = await driver.evaluate_async(fetch_source_map_expression(url), timeout=timeout)
        if not isinstance(body, str):
            raise PageEvaluationError(
                f"Expected text from in-page fetch of {url}, got {type(body).__name__}"
            )
        return body

    return fetch_text
