from __future__ import annotations

from pathlib import Path

import streamlit as st

from poi_proximity.catalog import PlaceCatalog
from poi_proximity.csv_io import load_places, load_track_points
from poi_proximity.feeds import SimulatedPositionSource
from poi_proximity.models import DEFAULT_THRESHOLD_M, DEFAULT_TZ
from poi_proximity.proximity import ProximityConfig, ProximityEngine
from poi_proximity.replay import ReplayResult, replay_track
from poi_proximity.timeutils import format_local


@st.cache_data(show_spinner=False)
def _load_catalog(places_csv: str, mtime: float) -> PlaceCatalog:
    _ = mtime  # part of cache key so updated files reload automatically
    catalog, _ = load_places(places_csv)
    return catalog


def _replay(places_csv: str, track_csv: str, threshold_m: float, tick_seconds: float | None) -> ReplayResult:
    catalog, _ = load_places(places_csv)
    points, _ = load_track_points(track_csv)
    cfg = ProximityConfig(default_threshold_m=threshold_m)
    return replay_track(points, catalog, cfg, tick_seconds=tick_seconds)


def main() -> None:
    st.set_page_config(page_title="地点邻近：轨迹回放", layout="wide")
    st.title("地点邻近：按地点列表回放轨迹")

    with st.sidebar:
        st.subheader("数据与时区")
        tz_name = st.text_input("时区（IANA）", value=DEFAULT_TZ)
        places_csv = st.text_input("places.csv 路径", value="places.csv")
        track_csv = st.text_input("轨迹 CSV 路径", value="Path.csv")

        st.subheader("邻近判定")
        threshold_m = st.number_input("默认阈值 threshold（米）", value=DEFAULT_THRESHOLD_M, min_value=0.0, step=1.0)
        use_ticks = st.checkbox("按固定间隔重采样", value=False)
        tick_seconds = st.number_input("间隔 tick（秒）", value=1.0, min_value=0.1, step=0.5) if use_ticks else None

    p = Path(places_csv)
    if not p.exists():
        st.error(f"找不到文件：{places_csv!r}")
        return

    try:
        catalog = _load_catalog(places_csv, p.stat().st_mtime)
    except (KeyError, OSError) as exc:
        st.exception(exc)
        return

    st.subheader("地点列表")
    st.dataframe(
        [
            {
                "order": i,
                "name": pl.name,
                "latitude": None if pl.coordinate is None else pl.coordinate.latitude,
                "longitude": None if pl.coordinate is None else pl.coordinate.longitude,
                "radius_m": pl.radius_m if pl.radius_m is not None else threshold_m,
                "resolved": pl.is_resolved,
            }
            for i, pl in enumerate(catalog, start=1)
        ],
        use_container_width=True,
    )

    st.subheader("跳转到地点")
    resolved = [pl for pl in catalog if pl.is_resolved]
    if resolved:
        choice = st.selectbox("地点", [pl.name for pl in resolved])
        target = catalog.get_by_name(choice)
        if target is not None and st.button("在该处检查邻近"):
            source = SimulatedPositionSource(resolved[0].coordinate)
            source.navigate_to(target)
            res = ProximityEngine(ProximityConfig(default_threshold_m=threshold_m)).evaluate(source.position, catalog)
            if res.active is None:
                st.info("附近没有地点")
            else:
                # 先匹配：重叠时可能命中更靠前的地点
                st.success(f"附近地点：{res.active.name}（{res.distance_m:.1f}m）")
    else:
        st.caption("暂无已解析坐标的地点。")

    st.subheader("回放")
    if st.button("回放轨迹", type="primary"):
        if not Path(track_csv).exists():
            st.error(f"找不到文件：{track_csv!r}")
            return
        with st.spinner("正在回放 ..."):
            result = _replay(places_csv, track_csv, float(threshold_m), tick_seconds)

        c1, c2, c3 = st.columns(3)
        c1.metric("tick 数", str(result.ticks))
        c2.metric("切换次数", str(len(result.transitions)))
        c3.metric("到访地点数", str(len(result.dwell())))

        st.dataframe(
            [
                {"place": d.name, "activations": d.activations, "hhmmss": d.total_hhmmss}
                for d in result.dwell()
            ],
            use_container_width=True,
        )
        st.dataframe(
            [
                {
                    "time": format_local(r.tick_ms, tz_name),
                    "previous": r.previous or "",
                    "current": r.current or "（离开）",
                    "distance_m": None if r.distance_m is None else round(r.distance_m, 1),
                }
                for r in result.transitions
            ],
            use_container_width=True,
            height=420,
        )


if __name__ == "__main__":
    main()
