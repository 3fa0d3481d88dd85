"""Typed containers shared across pipeline modules."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Awaitable, Mapping, Optional, Protocol


@dataclass(frozen=True)
class ScriptParsedEvent:
    """The two fields of a ``Debugger.scriptParsed`` notification we keep."""

    url: str
    source_map_url: Optional[str] = None

    @property
    def has_source_map(self) -> bool:
        return bool(self.source_map_url)

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "ScriptParsedEvent":
        # The protocol sends "" rather than omitting the field.
        return cls(
            url=str(params.get("url") or ""),
            source_map_url=params.get("sourceMapURL") or None,
        )


class CaptureState(enum.Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    CAPTURED = "captured"
    RESOLVING = "resolving"
    DONE = "done"


class TextFetcher(Protocol):
    """Retrieves a URL's body as text within ``timeout`` seconds."""

    def __call__(self, url: str, *, timeout: float) -> Awaitable[str]: ...
