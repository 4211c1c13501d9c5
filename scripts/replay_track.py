#!/usr/bin/env python3
"""Replay a recorded drive through the speed trap detector.

Feeds every sample of a track file to :class:`ProximityDetector` in order
and prints what the detector published (or why the sample was dropped).

Usage
-----
::

    python scripts/replay_track.py track.json

The track file is a JSON list of samples::

    [
      {"lat": 25.0418, "lon": 121.5436, "heading": 270, "speed": 16.7, "street": "忠孝東路四段"},
      ...
    ]

``heading`` is degrees (negative or missing means unknown), ``speed`` is m/s.

Options::

    --alert-distance M   Alert distance in meters (default: from env or 500)
    --infinite           Enable infinite proximity
    --nearest N          Also print the N nearest traps for the last sample
    --json               Print one JSON object per sample
    --verbose / -v       Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyspeedtrap import DetectorConfig, DetectorState, DrivingContext, ProximityDetector  # noqa: E402

_NO_RAW = {"closest_trap": {"trap": {"raw"}}}


def _load_track(path: Path) -> list[DrivingContext]:
    samples: list[Any] = json.loads(path.read_text("utf-8"))
    track: list[DrivingContext] = []
    for sample in samples:
        track.append(
            DrivingContext.from_sample(
                sample["lat"],
                sample["lon"],
                heading_deg=sample.get("heading", -1.0),
                speed_mps=sample.get("speed", 0.0),
                street_name=sample.get("street", ""),
            )
        )
    return track


def _describe(state: DetectorState) -> str:
    match = state.closest_trap
    if match is None:
        return "no trap"
    trap = match.trap
    parts = [
        f"{int(match.distance_m)}m",
        f"score {match.score}",
        trap.address or "(no address)",
        trap.speed_limit_display or "limit unknown",
    ]
    if state.is_within_range:
        parts.append("IN RANGE")
    if state.is_speeding:
        parts.append(f"SPEEDING +{state.speeding_amount_kph:.0f} km/h")
    return " | ".join(parts)


async def main() -> None:
    parser = argparse.ArgumentParser(description="Replay a recorded track through the speed trap detector.")
    parser.add_argument("track", type=Path, help="JSON file with the recorded samples")
    parser.add_argument("--alert-distance", type=float, help="Alert distance in meters")
    parser.add_argument("--infinite", action="store_true", help="Enable infinite proximity")
    parser.add_argument("--nearest", type=int, default=0, help="Print the N nearest traps for the last sample")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.alert_distance is not None:
        overrides["alert_distance_m"] = args.alert_distance
    if args.infinite:
        overrides["infinite_proximity"] = True

    detector = ProximityDetector(config=DetectorConfig.from_env(**overrides))
    track = _load_track(args.track)

    for index, context in enumerate(track):
        outcome = await detector.async_evaluate(context)
        if args.json_mode:
            state = detector.state.model_dump(mode="json", exclude=_NO_RAW)
            print(json.dumps({"sample": index, "outcome": outcome.value, "state": state}, ensure_ascii=False))
        else:
            print(f"#{index:<4} {outcome.value:<12} {_describe(detector.state)}")

    if args.nearest > 0 and track:
        print()
        print(f"Nearest {args.nearest} traps to the last sample:")
        for nearby in await detector.async_rank_nearest(track[-1], args.nearest):
            print(f"  {int(nearby.distance_m):>6}m  {nearby.trap.address or '(no address)'}  ({nearby.trap.source})")


if __name__ == "__main__":
    asyncio.run(main())
