# sourcemaps/replay.py
from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List

from loguru import logger
from pydantic import TypeAdapter

from . import config
from .aggregate import resolve_all
from .config import SourceMapOutcome, SourceMapSuccess
from .http_fetch import http_client, http_fetcher
from .pipeline_types import ScriptParsedEvent

_OUTCOMES = TypeAdapter(List[SourceMapOutcome])

# ---------- IO helpers ----------

def read_script_events(path: Path) -> List[ScriptParsedEvent]:
    """
    Load recorded ``Debugger.scriptParsed`` params.

    Accepts a JSON array or JSON lines. Each record is either the bare params
    object or a full protocol message ``{"method": ..., "params": {...}}``.
    Scripts without a source map reference are dropped here, exactly as the
    live collector drops them.
    """
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    text = path.read_text(encoding="utf-8").strip()
    if not text:
        return []
    if text.startswith("["):
        records: List[Dict[str, Any]] = json.loads(text)
    else:
        records = [json.loads(line) for line in text.splitlines() if line.strip()]

    events: List[ScriptParsedEvent] = []
    for rec in records:
        if "params" in rec:
            if rec.get("method") not in (None, config.SCRIPT_PARSED_EVENT):
                continue
            rec = rec["params"]
        event = ScriptParsedEvent.from_params(rec)
        if event.has_source_map:
            events.append(event)
    logger.info("Loaded {} scripts declaring a source map from {}", len(events), path)
    return events


def write_outcomes(outcomes: List[SourceMapOutcome], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(_OUTCOMES.dump_json(outcomes, indent=2))

# ---------- resolution ----------

async def resolve_recorded(events: List[ScriptParsedEvent]) -> List[SourceMapOutcome]:
    async with http_client() as client:
        return await resolve_all(events, http_fetcher(client))

# ---------- CLI ----------

def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Resolve source maps for recorded script-parsed events")
    ap.add_argument("--events", type=Path, required=True,
                    help="JSON array or JSON-lines file of Debugger.scriptParsed params")
    ap.add_argument("--out", type=Path, default=None,
                    help="Where to write the outcomes as JSON (default: stdout)")
    ap.add_argument("--timeout", type=float, default=None,
                    help="Per-map fetch timeout in seconds")
    ap.add_argument("--log-file", action="store_true",
                    help=f"Also log to {config.LOG_DIR / 'replay.log'}")
    args = ap.parse_args(argv)

    if args.timeout is not None:
        config.SOURCE_MAP_FETCH_TIMEOUT_S = args.timeout
    if args.log_file:
        config.LOG_DIR.mkdir(exist_ok=True)
        logger.add(config.LOG_DIR / "replay.log", rotation="10 MB")

    events = read_script_events(args.events)
    outcomes = asyncio.run(resolve_recorded(events))

    if args.out is not None:
        write_outcomes(outcomes, args.out)
        logger.info("Wrote {} outcomes to {}", len(outcomes), args.out)
    else:
        print(_OUTCOMES.dump_json(outcomes, indent=2).decode("utf-8"))

    ok = sum(1 for o in outcomes if isinstance(o, SourceMapSuccess))
    logger.info("Resolved {}/{} source maps", ok, len(outcomes))
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
