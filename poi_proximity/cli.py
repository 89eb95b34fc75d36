"""Command-line interface for poi_proximity.

Run:
    python -m poi_proximity check --places places.csv --lat 37.9715 --lon 23.7257
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict

from poi_proximity.csv_io import load_places, load_track_points
from poi_proximity.geo import distance
from poi_proximity.models import DEFAULT_THRESHOLD_M, DEFAULT_TZ, Coordinate, Place
from poi_proximity.proximity import ProximityConfig, ProximityEngine
from poi_proximity.replay import replay_track, write_transitions_csv


def _place_dict(place: Place) -> dict[str, object]:
    coord = place.coordinate
    return {
        "name": place.name,
        "latitude": None if coord is None else coord.latitude,
        "longitude": None if coord is None else coord.longitude,
        "radius_m": place.radius_m,
        "address": place.address,
        "description": place.description,
    }


def _cmd_distance(args: argparse.Namespace) -> int:
    a = Coordinate.parse(args.from_)
    b = Coordinate.parse(args.to)
    print(f"{distance(a, b):.3f}")
    return 0


def _cmd_places(args: argparse.Namespace) -> int:
    catalog, summary = load_places(args.places)
    unresolved = catalog.unresolved()

    print("### 行数")
    print(f"total_rows={summary.rows_total}, parsed={summary.rows_parsed}, skipped={summary.rows_skipped}")
    print()

    print("### 地点（按匹配优先级）")
    for i, place in enumerate(catalog, start=1):
        where = str(place.coordinate) if place.coordinate is not None else "未解析"
        radius = "默认" if place.radius_m is None else f"{place.radius_m:g}m"
        print(f"{i:3d}. {place.name}  [{where}]  radius={radius}")
    print()

    print("### 待地理编码（无坐标但有地址）")
    print(", ".join(p.name for p in unresolved) if unresolved else "无")

    if args.json:
        payload = asdict(summary) | {
            "fieldnames": list(summary.fieldnames),
            "places": [_place_dict(p) for p in catalog],
            "unresolved": [p.name for p in unresolved],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    catalog, _ = load_places(args.places)
    engine = ProximityEngine(ProximityConfig(default_threshold_m=args.threshold))
    position = Coordinate(args.lat, args.lon)
    res = engine.evaluate(position, catalog)

    if args.json:
        payload = {
            "position": {"latitude": position.latitude, "longitude": position.longitude},
            "active": None if res.active is None else _place_dict(res.active),
            "distance_m": res.distance_m,
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    elif res.active is None:
        print("附近没有地点")
    else:
        print(f"附近地点：{res.active.name}（{res.distance_m:.1f}m）")
    return 0


def _cmd_replay(args: argparse.Namespace) -> int:
    catalog, _ = load_places(args.places)
    points, _ = load_track_points(args.csv)
    if args.range_start is not None or args.range_end is not None:
        from poi_proximity.timeutils import parse_local_ms

        if args.range_start:
            start_ms = parse_local_ms(args.range_start, args.tz)
            points = [p for p in points if p.geo_time_ms >= start_ms]
        if args.range_end:
            end_ms = parse_local_ms(args.range_end, args.tz)
            points = [p for p in points if p.geo_time_ms <= end_ms]

    cfg = ProximityConfig(default_threshold_m=args.threshold)
    result = replay_track(points, catalog, cfg, tick_seconds=args.tick_seconds)
    write_transitions_csv(result.transitions, args.out, args.tz)

    print(f"ticks={result.ticks}, transitions={len(result.transitions)}")
    for d in result.dwell():
        print(f"{d.name}: activations={d.activations}, total={d.total_hhmmss}（{d.total_seconds:.1f}s）")
    print(f"已导出：{args.out}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""

    p = argparse.ArgumentParser(prog="poi_proximity")
    p.add_argument("--log-level", type=str, default="WARNING", help="日志级别（DEBUG/INFO/WARNING）")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_dist = sub.add_parser("distance", help="计算两点间的大圆距离（米）")
    p_dist.add_argument("--from", dest="from_", type=str, required=True, help="起点 'lat,lon'")
    p_dist.add_argument("--to", type=str, required=True, help="终点 'lat,lon'")
    p_dist.set_defaults(func=_cmd_distance)

    p_pl = sub.add_parser("places", help="查看地点清单（顺序/坐标/半径/未解析地点）")
    p_pl.add_argument("--places", type=str, default="places.csv", help="地点CSV路径")
    p_pl.add_argument("--json", action="store_true", help="额外输出JSON（便于后处理）")
    p_pl.set_defaults(func=_cmd_places)

    p_chk = sub.add_parser("check", help="给定当前位置，判断附近的地点")
    p_chk.add_argument("--places", type=str, default="places.csv", help="地点CSV路径")
    p_chk.add_argument("--lat", type=float, required=True, help="当前纬度")
    p_chk.add_argument("--lon", type=float, required=True, help="当前经度")
    p_chk.add_argument(
        "--threshold",
        type=float,
        default=DEFAULT_THRESHOLD_M,
        help="默认触发距离（米）；地点自带 radius_m 时以地点为准",
    )
    p_chk.add_argument("--json", action="store_true", help="以JSON输出")
    p_chk.set_defaults(func=_cmd_check)

    p_rp = sub.add_parser("replay", help="用轨迹CSV回放，导出地点切换记录 transitions.csv")
    p_rp.add_argument("--places", type=str, default="places.csv", help="地点CSV路径")
    p_rp.add_argument("--csv", type=str, default="Path.csv", help="轨迹CSV路径")
    p_rp.add_argument("--out", type=str, default="transitions.csv", help="输出CSV路径")
    p_rp.add_argument("--threshold", type=float, default=DEFAULT_THRESHOLD_M, help="默认触发距离（米）")
    p_rp.add_argument(
        "--tick-seconds",
        type=float,
        default=None,
        help="按固定间隔（秒）重采样评估，例如 1.0；不填则每个采样点评估一次",
    )
    p_rp.add_argument("--tz", type=str, default=DEFAULT_TZ, help="时区（IANA）")
    p_rp.add_argument("--range-start", type=str, default=None, help="仅回放该时间之后的数据")
    p_rp.add_argument("--range-end", type=str, default=None, help="仅回放该时间之前的数据")
    p_rp.set_defaults(func=_cmd_replay)

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""

    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.WARNING))
    try:
        return int(args.func(args))
    except (ValueError, KeyError, OSError) as exc:
        print(f"错误：{exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
