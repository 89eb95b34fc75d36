"""Tests for PlaceCatalog and the Place record."""

import pytest

from poi_proximity.catalog import PlaceCatalog
from poi_proximity.models import Coordinate, Place


def _catalog() -> PlaceCatalog:
    return PlaceCatalog(
        [
            Place("Acropolis", coordinate=Coordinate(37.9715, 23.7257)),
            Place("Agora", address="Adrianou 24, Athens"),
            Place("Stoa", address=""),
            Place("Parliament", coordinate=Coordinate(37.9753, 23.7361), radius_m=25.0),
        ]
    )


class TestPlaceCatalog:
    def test_keeps_insertion_order(self):
        assert [p.name for p in _catalog()] == ["Acropolis", "Agora", "Stoa", "Parliament"]

    def test_add_rejects_duplicate_name(self):
        catalog = _catalog()
        with pytest.raises(ValueError):
            catalog.add(Place("Agora"))
        assert len(catalog) == 4

    def test_remove(self):
        catalog = _catalog()
        assert catalog.remove("Stoa") is True
        assert catalog.remove("Stoa") is False
        assert "Stoa" not in catalog
        assert [p.name for p in catalog] == ["Acropolis", "Agora", "Parliament"]

    def test_get_by_name(self):
        catalog = _catalog()
        assert catalog.get_by_name("Parliament").radius_m == 25.0
        assert catalog.get_by_name("Nope") is None

    def test_unresolved_needs_an_address(self):
        assert [p.name for p in _catalog().unresolved()] == ["Agora"]

    def test_update_coordinate_keeps_position(self):
        catalog = _catalog()
        updated = catalog.update_coordinate("Agora", Coordinate(37.9747, 23.7223))
        assert updated.is_resolved
        assert updated.address == "Adrianou 24, Athens"
        assert [p.name for p in catalog][1] == "Agora"
        assert catalog.get_by_name("Agora") is updated
        assert catalog.unresolved() == []

    def test_update_unknown_raises(self):
        with pytest.raises(KeyError):
            _catalog().update_coordinate("Nope", None)

    def test_iteration_is_a_snapshot(self):
        catalog = _catalog()
        seen = []
        for place in catalog:
            seen.append(place.name)
            catalog.remove(place.name)
        assert seen == ["Acropolis", "Agora", "Stoa", "Parliament"]
        assert len(catalog) == 0


class TestPlace:
    def test_unresolved_by_default(self):
        place = Place("x")
        assert place.coordinate is None
        assert not place.is_resolved

    def test_rejects_empty_name(self):
        with pytest.raises(ValueError):
            Place("")

    @pytest.mark.parametrize("radius", [-1.0, float("nan"), float("inf")])
    def test_rejects_bad_radius(self, radius):
        with pytest.raises(ValueError):
            Place("x", radius_m=radius)

    def test_with_coordinate_returns_copy(self):
        place = Place("x", description="d")
        moved = place.with_coordinate(Coordinate(1.0, 2.0))
        assert place.coordinate is None
        assert moved.coordinate == Coordinate(1.0, 2.0)
        assert moved.description == "d"
