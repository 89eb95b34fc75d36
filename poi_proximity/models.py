"""Data models for coordinates, places and recorded track points."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Final

from poi_proximity.geo import validate_coordinate


DEFAULT_THRESHOLD_M: Final[float] = 10.0
DEFAULT_TZ: Final[str] = "UTC"


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A WGS84 position in decimal degrees.

    Raises:
        InvalidCoordinate: On construction with NaN or out-of-range values.
    """

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        validate_coordinate(self.latitude, self.longitude)

    @classmethod
    def parse(cls, text: str) -> Coordinate:
        """Parse "lat,lon" text, e.g. "51.5007,-0.1246"."""

        try:
            lat_s, lon_s = text.split(",", 1)
            lat = float(lat_s.strip())
            lon = float(lon_s.strip())
        except ValueError as exc:
            raise ValueError(f"无法解析坐标：{text!r}，格式应为 'lat,lon'") from exc
        return cls(lat, lon)

    def __str__(self) -> str:
        return f"{self.latitude:.7f},{self.longitude:.7f}"


@dataclass(frozen=True, slots=True)
class Place:
    """A named point of interest.

    Attributes:
        name: Unique name, used as identity.
        coordinate: Resolved position, or None while unresolved (e.g. only an
            address is known and has not been geocoded yet).
        radius_m: Activation radius override in meters. None means the
            engine's default threshold applies.
        description: Free text shown by the host application.
        address: Postal address used by an external geocoder.
        height_m: Height above ellipsoid for content anchoring.
        icon: Media reference (path or asset id).
        video: Media reference (path or asset id).
    """

    name: str
    coordinate: Coordinate | None = None
    radius_m: float | None = None
    description: str = ""
    address: str = ""
    height_m: float = 0.0
    icon: str = ""
    video: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("地点名称不能为空")
        if self.radius_m is not None and not (math.isfinite(self.radius_m) and self.radius_m >= 0.0):
            raise ValueError(f"radius_m 必须是非负数：{self.radius_m!r}")

    @property
    def is_resolved(self) -> bool:
        return self.coordinate is not None

    def with_coordinate(self, coordinate: Coordinate | None) -> Place:
        """Return a copy carrying a new coordinate."""

        return replace(self, coordinate=coordinate)


@dataclass(frozen=True, slots=True)
class TrackPoint:
    """A single recorded location sample.

    Attributes:
        geo_time_ms: Unix epoch milliseconds.
        latitude: Latitude in decimal degrees.
        longitude: Longitude in decimal degrees.
        altitude_m: Altitude in meters. May be 0.0 depending on device/app.
        speed_mps: Speed in meters/second. Some rows may use -1.0 as sentinel.
        horizontal_accuracy_m: Horizontal accuracy in meters. Some rows use -1.0.
        location_type: App-specific integer describing the positioning source.
    """

    geo_time_ms: int
    latitude: float
    longitude: float
    altitude_m: float = 0.0
    speed_mps: float = 0.0
    horizontal_accuracy_m: float = -1.0
    location_type: int = 0

    @property
    def coordinate(self) -> Coordinate:
        return Coordinate(self.latitude, self.longitude)
