import pytest
from pydantic import TypeAdapter, ValidationError

from sourcemaps.config import (
    HealthResponse,
    ResolveRequest,
    SourceMapFailure,
    SourceMapOutcome,
    SourceMapSuccess,
)


def test_outcomes_are_tagged_and_frozen():
    ok = SourceMapSuccess(script_url="https://x/a.js", map={"version": 3})
    bad = SourceMapFailure(script_url="https://x/b.js", source_map_url="https://x/b.map", error_message="boom")
    assert ok.kind == "success"
    assert ok.source_map_url is None
    assert bad.kind == "failure"
    with pytest.raises(ValidationError):
        ok.script_url = "other"


def test_outcome_union_dispatches_on_kind():
    adapter = TypeAdapter(SourceMapOutcome)
    out = adapter.validate_python(
        {"kind": "failure", "script_url": "https://x/a.js", "error_message": "nope"}
    )
    assert isinstance(out, SourceMapFailure)
    out = adapter.validate_python({"kind": "success", "script_url": "https://x/a.js", "map": {}})
    assert isinstance(out, SourceMapSuccess)


def test_resolve_request_reads_protocol_field_names():
    req = ResolveRequest.model_validate(
        {"scripts": [{"url": "https://x/a.js", "sourceMapURL": "a.map", "scriptId": "42"}]}
    )
    assert req.scripts[0].source_map_url == "a.map"


def test_health_response():
    health = HealthResponse(status="healthy")
    assert health.status == "healthy"
