"""Replay a recorded track through the proximity engine and report transitions."""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from poi_proximity.feeds import iter_ticks
from poi_proximity.models import Place, TrackPoint
from poi_proximity.proximity import ProximityConfig, ProximityEngine
from poi_proximity.timeutils import format_hhmmss, format_local


@dataclass(frozen=True, slots=True)
class TransitionRecord:
    """A transition observed at a given tick."""

    tick_ms: int
    previous: str | None
    current: str | None
    latitude: float
    longitude: float
    distance_m: float | None


@dataclass(frozen=True, slots=True)
class PlaceDwell:
    """Total time a place stayed active."""

    name: str
    activations: int
    total_seconds: float

    @property
    def total_hhmmss(self) -> str:
        return format_hhmmss(self.total_seconds)


@dataclass(frozen=True, slots=True)
class ReplayResult:
    ticks: int
    start_ms: int | None
    end_ms: int | None
    transitions: list[TransitionRecord]

    def dwell(self) -> list[PlaceDwell]:
        if self.end_ms is None:
            return []
        return dwell_by_place(self.transitions, self.end_ms)


def replay_track(
    points: Sequence[TrackPoint],
    places: Iterable[Place],
    config: ProximityConfig | None = None,
    tick_seconds: float | None = None,
) -> ReplayResult:
    """Feed a track through a fresh engine, one evaluation per tick.

    Args:
        points: Track points (can be unsorted).
        places: Candidate places in priority order.
        config: Engine configuration (default threshold).
        tick_seconds: Resampling cadence, or None for one tick per sample.

    Returns:
        ReplayResult with every transition in tick order.
    """

    engine = ProximityEngine(config)
    candidates = list(places)
    records: list[TransitionRecord] = []
    ticks = 0
    start_ms: int | None = None
    end_ms: int | None = None

    for tick in iter_ticks(points, tick_seconds):
        ticks += 1
        if start_ms is None:
            start_ms = tick.tick_ms
        end_ms = tick.tick_ms
        res = engine.evaluate(tick.point.coordinate, candidates)
        if res.transition is None:
            continue
        prev = res.transition.previous
        cur = res.transition.current
        records.append(
            TransitionRecord(
                tick_ms=tick.tick_ms,
                previous=None if prev is None else prev.name,
                current=None if cur is None else cur.name,
                latitude=tick.point.latitude,
                longitude=tick.point.longitude,
                distance_m=res.distance_m,
            )
        )

    return ReplayResult(ticks=ticks, start_ms=start_ms, end_ms=end_ms, transitions=records)


def dwell_by_place(records: Sequence[TransitionRecord], end_ms: int) -> list[PlaceDwell]:
    """Sum active time per place.

    A place is active from the transition that selected it until the next
    transition, or until end_ms for the last one. Output keeps first-seen order.
    """

    totals: dict[str, float] = {}
    counts: dict[str, int] = {}
    ordered = sorted(records, key=lambda r: r.tick_ms)
    for i, rec in enumerate(ordered):
        if rec.current is None:
            continue
        stop_ms = ordered[i + 1].tick_ms if i + 1 < len(ordered) else end_ms
        totals[rec.current] = totals.get(rec.current, 0.0) + max(0.0, (stop_ms - rec.tick_ms) / 1000.0)
        counts[rec.current] = counts.get(rec.current, 0) + 1
    return [PlaceDwell(name=n, activations=counts[n], total_seconds=totals[n]) for n in totals]


def write_transitions_csv(records: Sequence[TransitionRecord], out_path: str | Path, tz_name: str) -> None:
    """Write transitions to CSV."""

    p = Path(out_path)
    with p.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(
            f,
            fieldnames=[
                "time_local",
                "epoch_ms",
                "previous",
                "current",
                "latitude",
                "longitude",
                "distance_m",
            ],
        )
        w.writeheader()
        for r in records:
            w.writerow(
                {
                    "time_local": format_local(r.tick_ms, tz_name),
                    "epoch_ms": r.tick_ms,
                    "previous": r.previous or "",
                    "current": r.current or "",
                    "latitude": r.latitude,
                    "longitude": r.longitude,
                    "distance_m": "" if r.distance_m is None else f"{r.distance_m:.3f}",
                }
            )
