"""Local-time conversion for tick timestamps and CLI range bounds."""

from __future__ import annotations

from datetime import datetime

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def _zone(tz_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"无效时区：{tz_name!r}，例如 UTC 或 Asia/Shanghai") from exc


def format_local(epoch_ms: int, tz_name: str) -> str:
    """Render epoch milliseconds as "YYYY-MM-DD HH:MM:SS[.ffffff]+HH:MM" in tz_name."""

    return datetime.fromtimestamp(epoch_ms / 1000.0, tz=_zone(tz_name)).isoformat(sep=" ")


def parse_local_ms(text: str, tz_name: str) -> int:
    """Parse a user-entered time to epoch milliseconds.

    Accepts "YYYY-MM-DD HH:MM:SS" or the "T"-separated form, with or without
    an explicit offset. Naive input is read as local time in tz_name.

    Raises:
        ValueError: If the text or the timezone name is invalid.
    """

    zone = _zone(tz_name)
    try:
        moment = datetime.fromisoformat(text.strip().replace("T", " "))
    except ValueError as exc:
        raise ValueError(f"无法解析时间：{text!r}，建议格式：2025-06-01 09:30:00") from exc
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=zone)
    return int(round(moment.timestamp() * 1000))


def format_hhmmss(seconds: float) -> str:
    s = int(round(max(0.0, seconds)))
    return f"{s // 3600:02d}:{s % 3600 // 60:02d}:{s % 60:02d}"
