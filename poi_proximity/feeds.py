"""Position feeds: a settable simulated observer and track resampling."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Sequence

from poi_proximity.models import Coordinate, Place, TrackPoint


class SimulatedPositionSource:
    """Observer position that is set by hand instead of read from a sensor."""

    def __init__(self, start: Coordinate) -> None:
        self._position = start

    @property
    def position(self) -> Coordinate:
        return self._position

    def update(self, lat: float, lon: float) -> Coordinate:
        """Move the observer. Raises InvalidCoordinate on bad input."""

        self._position = Coordinate(lat, lon)
        return self._position

    def navigate_to(self, place: Place) -> Coordinate:
        """Jump the observer onto a place.

        Raises:
            ValueError: If the place has no coordinate yet.
        """

        if place.coordinate is None:
            raise ValueError(f"地点 {place.name!r} 尚无坐标，无法导航")
        self._position = place.coordinate
        return self._position


@dataclass(frozen=True, slots=True)
class Tick:
    """One evaluation slot: the tick time and the freshest sample at that time."""

    tick_ms: int
    point: TrackPoint

    @property
    def age_seconds(self) -> float:
        return (self.tick_ms - self.point.geo_time_ms) / 1000.0


def iter_ticks(points: Sequence[TrackPoint], tick_seconds: float | None = None) -> Iterator[Tick]:
    """Turn a recorded track into a tick stream.

    With tick_seconds=None every sample is one tick. Otherwise ticks fire every
    tick_seconds from the first sample to the last, each carrying the most recent
    sample at or before the tick time. Samples are not checked for staleness; a
    long gap simply repeats the last known position.

    Args:
        points: Track points (can be unsorted).
        tick_seconds: Fixed cadence in seconds, or None.

    Raises:
        ValueError: If tick_seconds is not positive.
    """

    if not points:
        return
    pts = sorted(points, key=lambda p: p.geo_time_ms)

    if tick_seconds is None:
        for p in pts:
            yield Tick(tick_ms=p.geo_time_ms, point=p)
        return

    if not (math.isfinite(tick_seconds) and tick_seconds > 0.0):
        raise ValueError(f"tick_seconds 必须为正数：{tick_seconds!r}")
    step_ms = max(1, int(round(tick_seconds * 1000.0)))

    i = 0
    t = pts[0].geo_time_ms
    end = pts[-1].geo_time_ms
    while t <= end:
        while i + 1 < len(pts) and pts[i + 1].geo_time_ms <= t:
            i += 1
        yield Tick(tick_ms=t, point=pts[i])
        t += step_ms
