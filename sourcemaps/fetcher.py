from __future__ import annotations

"""
Turn one script's source map reference into a map or a failure.

Two kinds of reference reach this module:

* data URIs, where the map is inlined in the reference itself and is
  decoded locally, and
* everything else, which is resolved against the script URL and retrieved
  through a :class:`~sourcemaps.pipeline_types.TextFetcher` (in-page fetch
  for a live page, httpx when resolving a recording).

:func:`resolve_event` never raises for a broken map. Every decode, fetch or
parse error is folded into a :class:`~sourcemaps.config.SourceMapFailure` so
one bad script cannot take the rest of the batch down with it.
"""

import base64
import json
from typing import Any, Callable, Dict
from urllib.parse import unquote_to_bytes

from loguru import logger

from . import config
from .config import SourceMapFailure, SourceMapOutcome, SourceMapSuccess
from .errors import InvalidSourceMapError
from .pipeline_types import ScriptParsedEvent, TextFetcher
from .utils.urls import elide_data_uri, is_data_uri, resolve_url

_URLSAFE_TO_STANDARD = str.maketrans("-_", "+/")


def _describe(err: BaseException) -> str:
    return f"{type(err).__name__}: {err}"


def _as_source_map(text: str) -> Dict[str, Any]:
    parsed = json.loads(text)
    if not isinstance(parsed, dict):
        raise InvalidSourceMapError(
            f"Source map must be a JSON object, got {type(parsed).__name__}"
        )
    return parsed


def _decode_base64(payload: str) -> bytes:
    # Accept what browsers accept: whitespace, url-safe alphabet, no padding.
    # Anything outside the alphabet still fails the strict decode.
    cleaned = "".join(payload.split()).translate(_URLSAFE_TO_STANDARD)
    cleaned += "=" * (-len(cleaned) % 4)
    return base64.b64decode(cleaned, validate=True)


def parse_source_map_from_data_url(data_url: str) -> Dict[str, Any]:
    """
    Decode an inline ``data:`` source map.

    Bundlers nearly always emit ``data:application/json;base64,<payload>``;
    the rare non-base64 form is percent-decoded instead.
    """
    meta, sep, payload = data_url.partition(",")
    if not sep:
        raise InvalidSourceMapError("Data URI has no payload")
    if meta.lower().endswith(";base64"):
        raw = _decode_base64(payload)
    else:
        raw = unquote_to_bytes(payload)
    return _as_source_map(raw.decode("utf-8"))


async def fetch_source_map(fetch_text: TextFetcher, url: str) -> Dict[str, Any]:
    text = await fetch_text(url, timeout=config.SOURCE_MAP_FETCH_TIMEOUT_S)
    return _as_source_map(text)


async def resolve_event(
    event: ScriptParsedEvent,
    fetch_text: TextFetcher,
    resolver: Callable[[str, str], str] = resolve_url,
) -> SourceMapOutcome:
    reference = event.source_map_url or ""
    inline = is_data_uri(reference)
    # The reference is whatever the magic comment / header said; not yet
    # resolved against the script URL.
    source_map_url = reference if inline else resolver(reference, event.url)

    logger.debug("Resolving source map for {}: {}", event.url, elide_data_uri(source_map_url))
    try:
        if inline:
            source_map = parse_source_map_from_data_url(source_map_url)
        else:
            source_map = await fetch_source_map(fetch_text, source_map_url)
    except Exception as e:
        message = _describe(e)
        logger.error("Source map failed for {}: {}", event.url, message)
        return SourceMapFailure(
            script_url=event.url,
            source_map_url=None if inline else source_map_url,
            error_message=message,
        )

    return SourceMapSuccess(
        script_url=event.url,
        source_map_url=None if inline else source_map_url,
        map=source_map,
    )
