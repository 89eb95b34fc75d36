"""Tests for position feeds and track replay."""

import csv

import pytest

from poi_proximity.feeds import SimulatedPositionSource, iter_ticks
from poi_proximity.geo import InvalidCoordinate
from poi_proximity.models import Coordinate, Place, TrackPoint
from poi_proximity.proximity import ProximityConfig
from poi_proximity.replay import TransitionRecord, dwell_by_place, replay_track, write_transitions_csv

T0 = 1_700_000_000_000
MUSEUM = Place("museum", coordinate=Coordinate(37.9755, 23.7348))
CHURCH = Place("church", coordinate=Coordinate(37.9760, 23.7348))
NOWHERE = Coordinate(37.9800, 23.7400)


def _pt(seconds: float, coord: Coordinate) -> TrackPoint:
    return TrackPoint(geo_time_ms=T0 + int(seconds * 1000), latitude=coord.latitude, longitude=coord.longitude)


class TestIterTicks:
    def test_one_tick_per_sample_sorted(self):
        pts = [_pt(5, NOWHERE), _pt(0, NOWHERE), _pt(2, NOWHERE)]
        ticks = list(iter_ticks(pts))
        assert [t.tick_ms - T0 for t in ticks] == [0, 2000, 5000]
        assert all(t.age_seconds == 0.0 for t in ticks)

    def test_fixed_cadence_repeats_last_known_sample(self):
        a = _pt(0, MUSEUM.coordinate)
        b = _pt(2.5, NOWHERE)
        ticks = list(iter_ticks([b, a], tick_seconds=1.0))
        assert [t.tick_ms - T0 for t in ticks] == [0, 1000, 2000]
        assert [t.point for t in ticks] == [a, a, a]
        assert ticks[2].age_seconds == 2.0

    def test_fixed_cadence_lands_on_sample(self):
        a = _pt(0, MUSEUM.coordinate)
        b = _pt(2, NOWHERE)
        ticks = list(iter_ticks([a, b], tick_seconds=1.0))
        assert [t.point for t in ticks] == [a, a, b]

    def test_empty(self):
        assert list(iter_ticks([], tick_seconds=1.0)) == []

    def test_rejects_bad_cadence(self):
        with pytest.raises(ValueError):
            list(iter_ticks([_pt(0, NOWHERE)], tick_seconds=0.0))


class TestSimulatedPositionSource:
    def test_update_and_navigate(self):
        source = SimulatedPositionSource(NOWHERE)
        assert source.position == NOWHERE
        assert source.update(1.0, 2.0) == Coordinate(1.0, 2.0)
        assert source.navigate_to(MUSEUM) == MUSEUM.coordinate
        assert source.position == MUSEUM.coordinate

    def test_navigate_to_unresolved_raises(self):
        source = SimulatedPositionSource(NOWHERE)
        with pytest.raises(ValueError):
            source.navigate_to(Place("unknown", address="Somewhere"))
        assert source.position == NOWHERE

    def test_update_rejects_invalid(self):
        with pytest.raises(InvalidCoordinate):
            SimulatedPositionSource(NOWHERE).update(float("nan"), 0.0)


class TestReplay:
    def _walk(self):
        return [
            _pt(0, NOWHERE),
            _pt(10, MUSEUM.coordinate),
            _pt(20, MUSEUM.coordinate),
            _pt(30, CHURCH.coordinate),
            _pt(60, NOWHERE),
            _pt(70, NOWHERE),
        ]

    def test_transitions_and_dwell(self):
        result = replay_track(self._walk(), [MUSEUM, CHURCH])

        assert result.ticks == 6
        assert [(r.tick_ms - T0, r.previous, r.current) for r in result.transitions] == [
            (10_000, None, "museum"),
            (30_000, "museum", "church"),
            (60_000, "church", None),
        ]
        assert result.transitions[-1].distance_m is None

        dwell = {d.name: d for d in result.dwell()}
        assert dwell["museum"].total_seconds == 20.0
        assert dwell["church"].total_seconds == 30.0
        assert dwell["church"].total_hhmmss == "00:00:30"

    def test_threshold_from_config(self):
        result = replay_track(self._walk(), [MUSEUM], ProximityConfig(default_threshold_m=1_000.0))
        # NOWHERE is ~680 m from the museum: active from the first sample, never cleared
        assert [r.current for r in result.transitions] == ["museum"]
        assert result.dwell()[0].total_seconds == 70.0

    def test_fixed_tick_cadence(self):
        result = replay_track(self._walk(), [MUSEUM, CHURCH], tick_seconds=5.0)
        assert result.ticks == 15
        assert [r.tick_ms - T0 for r in result.transitions] == [10_000, 30_000, 60_000]

    def test_empty_track(self):
        result = replay_track([], [MUSEUM])
        assert result.ticks == 0
        assert result.transitions == []
        assert result.dwell() == []


class TestDwellAndExport:
    def test_dwell_counts_reactivations(self):
        records = [
            TransitionRecord(T0, None, "a", 0.0, 0.0, 1.0),
            TransitionRecord(T0 + 5_000, "a", None, 0.0, 0.0, None),
            TransitionRecord(T0 + 9_000, None, "a", 0.0, 0.0, 2.0),
        ]
        [a] = dwell_by_place(records, T0 + 10_000)
        assert a.activations == 2
        assert a.total_seconds == 6.0

    def test_write_transitions_csv(self, tmp_path):
        records = [
            TransitionRecord(T0, None, "museum", 37.9755, 23.7348, 1.23456),
            TransitionRecord(T0 + 1000, "museum", None, 37.98, 23.74, None),
        ]
        out = tmp_path / "transitions.csv"
        write_transitions_csv(records, out, "UTC")

        with out.open(encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))
        assert rows[0]["time_local"] == "2023-11-14 22:13:20+00:00"
        assert rows[0]["current"] == "museum"
        assert rows[0]["distance_m"] == "1.235"
        assert rows[1]["previous"] == "museum"
        assert rows[1]["current"] == ""
        assert rows[1]["distance_m"] == ""
