"""CSV input/output for place catalogs and recorded tracks."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from poi_proximity.catalog import PlaceCatalog
from poi_proximity.geo import InvalidCoordinate, validate_coordinate
from poi_proximity.models import Coordinate, Place, TrackPoint

logger = logging.getLogger(__name__)

PLACE_FIELDS: tuple[str, ...] = (
    "name",
    "description",
    "address",
    "latitude",
    "longitude",
    "height_m",
    "radius_m",
    "icon",
    "video",
)


@dataclass(frozen=True, slots=True)
class CsvSummary:
    """Quick summary of CSV parsing."""

    rows_total: int
    rows_parsed: int
    rows_skipped: int
    fieldnames: Sequence[str]


def _parse_int(value: str) -> int:
    return int(value.strip())


def _parse_float(value: str) -> float:
    return float(value.strip())


def _optional_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    return _parse_float(value)


def _place_from_row(row: dict[str, str]) -> Place:
    lat = _optional_float(row.get("latitude"))
    lon = _optional_float(row.get("longitude"))
    if (lat is None) != (lon is None):
        raise ValueError("latitude 与 longitude 必须同时填写或同时留空")
    coordinate = None if lat is None or lon is None else Coordinate(lat, lon)
    return Place(
        name=row["name"].strip(),
        coordinate=coordinate,
        radius_m=_optional_float(row.get("radius_m")),
        description=row.get("description", "") or "",
        address=row.get("address", "") or "",
        height_m=_optional_float(row.get("height_m")) or 0.0,
        icon=row.get("icon", "") or "",
        video=row.get("video", "") or "",
    )


def load_places(csv_path: str | Path) -> tuple[PlaceCatalog, CsvSummary]:
    """Load a place catalog.

    Blank latitude/longitude cells mean "unresolved". Rows with malformed
    numbers, invalid coordinates or duplicate names are skipped.

    Args:
        csv_path: Path to the places CSV.

    Returns:
        (catalog, summary)

    Raises:
        KeyError: If the "name" column is missing.
    """

    p = Path(csv_path)
    rows_total = 0
    catalog = PlaceCatalog()
    fieldnames: Sequence[str] = ()

    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        fieldnames = reader.fieldnames or ()
        if "name" not in fieldnames:
            raise KeyError(f"地点CSV缺少必要字段 'name'。实际字段：{list(fieldnames)}")
        for row in reader:
            rows_total += 1
            try:
                catalog.add(_place_from_row(row))
            except (InvalidCoordinate, ValueError, TypeError, AttributeError) as exc:
                logger.warning("地点CSV第 %s 行解析失败已跳过：%s", rows_total, exc)
                continue

    summary = CsvSummary(
        rows_total=rows_total,
        rows_parsed=len(catalog),
        rows_skipped=rows_total - len(catalog),
        fieldnames=fieldnames,
    )
    if summary.rows_skipped > 0:
        logger.warning("地点CSV中有 %s 行解析失败已跳过", summary.rows_skipped)
    return catalog, summary


def _fmt_optional(value: float | None) -> str:
    return "" if value is None else repr(value)


def write_places(places: Iterable[Place], out_path: str | Path) -> None:
    """Write places using the same columns load_places() reads."""

    p = Path(out_path)
    with p.open("w", encoding="utf-8", newline="") as f:
        w = csv.DictWriter(f, fieldnames=list(PLACE_FIELDS))
        w.writeheader()
        for place in places:
            coord = place.coordinate
            w.writerow(
                {
                    "name": place.name,
                    "description": place.description,
                    "address": place.address,
                    "latitude": "" if coord is None else repr(coord.latitude),
                    "longitude": "" if coord is None else repr(coord.longitude),
                    "height_m": repr(place.height_m),
                    "radius_m": _fmt_optional(place.radius_m),
                    "icon": place.icon,
                    "video": place.video,
                }
            )


def load_track_points(csv_path: str | Path) -> tuple[list[TrackPoint], CsvSummary]:
    """Load all points of a recorded track into memory.

    Args:
        csv_path: Path to the exported CSV.

    Returns:
        (points, summary)

    Notes:
        The export uses these columns:
          - geoTime: epoch milliseconds
          - latitude/longitude: decimal degrees
          - altitude/speed/horizontalAccuracy/locationType (optional)
    """

    p = Path(csv_path)
    rows_total = 0
    parsed: list[TrackPoint] = []
    fieldnames: Sequence[str] = ()

    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        fieldnames = reader.fieldnames or ()
        for row in reader:
            rows_total += 1
            try:
                point = TrackPoint(
                    geo_time_ms=_parse_int(row["geoTime"]),
                    latitude=_parse_float(row["latitude"]),
                    longitude=_parse_float(row["longitude"]),
                    altitude_m=_parse_float(row.get("altitude", "0") or "0"),
                    speed_mps=_parse_float(row.get("speed", "0") or "0"),
                    horizontal_accuracy_m=_parse_float(row.get("horizontalAccuracy", "-1") or "-1"),
                    location_type=_parse_int(row.get("locationType", "0") or "0"),
                )
                validate_coordinate(point.latitude, point.longitude)
            except (KeyError, ValueError, TypeError, AttributeError):
                continue
            parsed.append(point)

    summary = CsvSummary(
        rows_total=rows_total,
        rows_parsed=len(parsed),
        rows_skipped=rows_total - len(parsed),
        fieldnames=fieldnames,
    )
    if summary.rows_skipped > 0:
        logger.warning("轨迹CSV中有 %s 行解析失败已跳过", summary.rows_skipped)
    return parsed, summary
