import asyncio
import json
from typing import Any, Callable, Dict, List, Optional

import pytest

from sourcemaps.driver import FETCH_SOURCE_MAP_JS
from sourcemaps.errors import DriverError, PageEvaluationError, ProtocolTimeoutError


class FakeDriver:
    """
    In-memory stand-in for a DevTools driver.

    ``pages`` maps URL -> body text, an int status code, or an Exception to
    raise. ``delays`` maps URL -> seconds to sleep before answering; a delay
    past the caller's timeout raises ProtocolTimeoutError like a real driver.
    """

    def __init__(self, pages=None, delays=None, fail_commands=()):
        self.pages: Dict[str, Any] = dict(pages or {})
        self.delays: Dict[str, float] = dict(delays or {})
        self.fail_commands = set(fail_commands)
        self.listeners: Dict[str, List[Callable]] = {}
        self.commands: List[str] = []
        self.timeouts: List[float] = []

    def on(self, event_name, callback):
        self.listeners.setdefault(event_name, []).append(callback)

    def off(self, event_name, callback):
        self.listeners.get(event_name, []).remove(callback)

    def emit(self, event_name, params):
        for cb in list(self.listeners.get(event_name, [])):
            cb(params)

    async def send_command(self, method, params: Optional[dict] = None):
        self.commands.append(method)
        if method in self.fail_commands:
            raise DriverError(f"{method} failed")
        return {}

    async def evaluate_async(self, expression, *, timeout):
        assert expression.startswith(f"({FETCH_SOURCE_MAP_JS})(")
        url = json.loads(expression[len(FETCH_SOURCE_MAP_JS) + 3 : -1])
        self.timeouts.append(timeout)

        delay = self.delays.get(url, 0.0)
        if delay > timeout:
            await asyncio.sleep(timeout)
            raise ProtocolTimeoutError("Runtime.evaluate", timeout)
        if delay:
            await asyncio.sleep(delay)

        page = self.pages.get(url, 404)
        if isinstance(page, Exception):
            raise page
        if isinstance(page, int):
            raise PageEvaluationError(f"Error: Received status code {page} for {url}")
        return page


@pytest.fixture
def driver():
    return FakeDriver()


@pytest.fixture
def make_driver():
    """Factory for drivers preloaded with pages, delays or failing commands."""
    return FakeDriver
