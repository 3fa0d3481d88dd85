from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------
# Paths
# ---------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[1]

LOG_DIR = PROJECT_ROOT / "logs"


# ---------------------------
# DevTools protocol names
# ---------------------------

SCRIPT_PARSED_EVENT = "Debugger.scriptParsed"
DEBUGGER_ENABLE = "Debugger.enable"
DEBUGGER_DISABLE = "Debugger.disable"


# ---------------------------
# Source map resolution
# ---------------------------

# Per-map budget for the in-page fetch. One hung script must not starve the batch.
DEFAULT_SOURCE_MAP_FETCH_TIMEOUT_S = 1.5
SOURCE_MAP_FETCH_TIMEOUT_S = float(
    os.getenv("SOURCE_MAP_FETCH_TIMEOUT", str(DEFAULT_SOURCE_MAP_FETCH_TIMEOUT_S))
)

DATA_URI_PREFIX = "data:"
DATA_URI_ELIDE_LENGTH = 100  # chars of a data URI kept in log lines


# ---------------------------
# Offline fetch / HTTP hardening
# ---------------------------

HTTP_CONNECT_TIMEOUT = 3.0
HTTP_MAX_REDIRECTS = 5
HTTP_MAX_BYTES = 50_000_000  # bundles with inlined sourcesContent get big

HTTP_USER_AGENT = (
    "sourcemaps-gatherer/1.0 (+https://example.com; contact=tooling@placeholder.com)"
)

# The HTTP API fetches whatever URLs a caller posts. Loopback, private and
# link-local targets are refused unless this is switched on (local setups).
RESOLVE_ALLOW_PRIVATE_HOSTS = os.getenv("RESOLVE_ALLOW_PRIVATE_HOSTS", "0") == "1"


# ---------------------------
# Pydantic models shared around the app
# ---------------------------

class SourceMapSuccess(BaseModel):
    """
    A source map that was located, retrieved and decoded.

    ``source_map_url`` is None when the map was inlined as a data URI.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    script_url: str
    source_map_url: Optional[str] = None
    map: Dict[str, Any]


class SourceMapFailure(BaseModel):
    """
    A script whose declared source map could not be turned into a map.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    script_url: str
    source_map_url: Optional[str] = None
    error_message: str


SourceMapOutcome = Annotated[
    Union[SourceMapSuccess, SourceMapFailure], Field(discriminator="kind")
]


class ScriptRecord(BaseModel):
    """
    One recorded ``Debugger.scriptParsed`` payload, as posted to /resolve.
    Only the two fields the pipeline reads are modelled.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    url: str = ""
    source_map_url: Optional[str] = Field(default=None, alias="sourceMapURL")


class ResolveRequest(BaseModel):
    """
    Request body for POST /resolve.
    """

    scripts: List[ScriptRecord] = Field(..., min_length=1)


class ResolveResponse(BaseModel):
    """
    Response body for POST /resolve.
    """

    source_maps: List[SourceMapOutcome]


class HealthResponse(BaseModel):
    """
    Response body for GET /health.
    """

    status: str
