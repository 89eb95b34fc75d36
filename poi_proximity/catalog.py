"""Ordered, mutable collection of places."""

from __future__ import annotations

from typing import Iterable, Iterator

from poi_proximity.models import Coordinate, Place


class PlaceCatalog:
    """Places keyed by name, kept in insertion order.

    Order matters: the proximity scan is first-match, so earlier places win
    when several are in range. The engine only reads the catalog; coordinates
    filled in later (e.g. by a geocoder) are seen on the next evaluation.
    """

    def __init__(self, places: Iterable[Place] = ()) -> None:
        self._places: list[Place] = []
        for place in places:
            self.add(place)

    def __iter__(self) -> Iterator[Place]:
        # Snapshot so callers may mutate the catalog while iterating.
        return iter(list(self._places))

    def __len__(self) -> int:
        return len(self._places)

    def __contains__(self, name: object) -> bool:
        return self._index(name) is not None

    def _index(self, name: object) -> int | None:
        for i, place in enumerate(self._places):
            if place.name == name:
                return i
        return None

    def add(self, place: Place) -> None:
        """Append a place. Raises ValueError if the name is taken."""

        if self._index(place.name) is not None:
            raise ValueError(f"地点名称重复：{place.name!r}")
        self._places.append(place)

    def remove(self, name: str) -> bool:
        """Remove a place by name. Returns False if it was not present."""

        i = self._index(name)
        if i is None:
            return False
        del self._places[i]
        return True

    def get_by_name(self, name: str) -> Place | None:
        i = self._index(name)
        return None if i is None else self._places[i]

    def update_coordinate(self, name: str, coordinate: Coordinate | None) -> Place:
        """Replace a place's coordinate, keeping its position in the order.

        Raises:
            KeyError: If no place has this name.
        """

        i = self._index(name)
        if i is None:
            raise KeyError(name)
        updated = self._places[i].with_coordinate(coordinate)
        self._places[i] = updated
        return updated

    def unresolved(self) -> list[Place]:
        """Places without a coordinate that have an address to geocode."""

        return [p for p in self._places if p.coordinate is None and p.address.strip()]

