#!/usr/bin/env python3
"""Run one registry proximity search and print the resulting markers.

Usage
-----
Set environment variables and run::

    export SCOUR_CREDENTIAL="agent-code"
    export SCOUR_BASE_URL="https://registry.example/api"
    python scripts/search_nearby.py 43.615 -116.2023 --radius "1 mi"

Options::

    --radius LABEL      Search radius, e.g. ".5 mi" or "2" (default: .5 mi)
    --state XX          Jurisdiction code (default: configured fallback)
    --zip CODE          Postal code sent with the search
    --json              Output machine-readable JSON
    --verbose, -v       Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

import aiohttp  # noqa: E402

from pyscour import Coordinate, ProximitySearchService, ScourConfig, ScourError, SearchPhase  # noqa: E402
from pyscour._constants import DEFAULT_SEARCH_RADIUS, parse_radius_label  # noqa: E402
from pyscour._transport import JsonTransport  # noqa: E402


async def main() -> int:
    parser = argparse.ArgumentParser(description="Search the registry around a coordinate.")
    parser.add_argument("latitude", type=float)
    parser.add_argument("longitude", type=float)
    parser.add_argument("--radius", type=parse_radius_label, default=DEFAULT_SEARCH_RADIUS, help="Radius in miles")
    parser.add_argument("--state", help="Two-letter jurisdiction code")
    parser.add_argument("--zip", dest="postal_code", help="Postal code")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = ScourConfig.from_env()
    reference = Coordinate.of(args.latitude, args.longitude)

    async with aiohttp.ClientSession() as session:
        service = ProximitySearchService(config, JsonTransport(session, timeout=config.request_timeout))
        snapshot = await service.search(reference, args.radius, args.state, args.postal_code)

    if args.json_mode:
        print(json.dumps(snapshot.model_dump(mode="json"), indent=2, ensure_ascii=False))
        return 0 if snapshot.phase == SearchPhase.POPULATED else 1

    try:
        snapshot.raise_for_failure()
    except ScourError as exc:
        print(f"{snapshot.message or exc}", file=sys.stderr)
        return 1

    markers = sorted(snapshot.markers, key=lambda m: m.distance_from(reference))
    print(f"{len(markers)} registrant location(s) within {args.radius:g} mi")
    for marker in markers:
        flag = " [absconder]" if marker.absconder else ""
        print(f"  {marker.distance_text(reference):>8}  {marker.display_name}{flag}")
        print(f"            {marker.full_address or marker.short_address}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
