import asyncio

import pytest

from sourcemaps.collector import SourceMapCollector
from sourcemaps.config import SCRIPT_PARSED_EVENT
from sourcemaps.errors import CaptureStateError, DriverError
from sourcemaps.pipeline_types import CaptureState, ScriptParsedEvent


def test_only_scripts_with_a_source_map_are_buffered(driver):
    collector = SourceMapCollector(driver)

    async def scenario():
        await collector.open()
        driver.emit(SCRIPT_PARSED_EVENT, {"url": "https://x/a.js", "sourceMapURL": "a.js.map"})
        driver.emit(SCRIPT_PARSED_EVENT, {"url": "https://x/inline.js", "sourceMapURL": ""})
        driver.emit(SCRIPT_PARSED_EVENT, {"url": "https://x/nomap.js"})
        driver.emit(SCRIPT_PARSED_EVENT, {"url": "https://x/c.js", "sourceMapURL": "c.js.map"})
        return await collector.close()

    events = asyncio.run(scenario())
    assert events == [
        ScriptParsedEvent("https://x/a.js", "a.js.map"),
        ScriptParsedEvent("https://x/c.js", "c.js.map"),
    ]


def test_open_and_close_toggle_the_debugger_and_listener(driver):
    collector = SourceMapCollector(driver)

    async def scenario():
        await collector.open()
        assert len(driver.listeners[SCRIPT_PARSED_EVENT]) == 1
        assert collector.state is CaptureState.CAPTURING
        await collector.close()

    asyncio.run(scenario())
    assert driver.commands == ["Debugger.enable", "Debugger.disable"]
    assert driver.listeners[SCRIPT_PARSED_EVENT] == []
    assert collector.state is CaptureState.CAPTURED


def test_events_after_close_are_ignored(driver):
    collector = SourceMapCollector(driver)

    async def scenario():
        await collector.open()
        events = await collector.close()
        driver.emit(SCRIPT_PARSED_EVENT, {"url": "https://x/late.js", "sourceMapURL": "late.map"})
        return events

    assert asyncio.run(scenario()) == []


def test_close_without_open_fails_fast(driver):
    collector = SourceMapCollector(driver)
    with pytest.raises(CaptureStateError):
        asyncio.run(collector.close())
    assert driver.commands == []


def test_open_twice_is_rejected(driver):
    collector = SourceMapCollector(driver)

    async def scenario():
        await collector.open()
        await collector.open()

    with pytest.raises(CaptureStateError):
        asyncio.run(scenario())


def test_enable_failure_propagates_and_removes_listener(make_driver):
    driver = make_driver(fail_commands={"Debugger.enable"})
    collector = SourceMapCollector(driver)
    with pytest.raises(DriverError):
        asyncio.run(collector.open())
    assert driver.listeners[SCRIPT_PARSED_EVENT] == []
    assert collector.state is CaptureState.IDLE


def test_disable_failure_propagates(make_driver):
    driver = make_driver(fail_commands={"Debugger.disable"})
    collector = SourceMapCollector(driver)

    async def scenario():
        await collector.open()
        await collector.close()

    with pytest.raises(DriverError):
        asyncio.run(scenario())
    assert driver.listeners[SCRIPT_PARSED_EVENT] == []
