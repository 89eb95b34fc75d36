"""Tests for local-time conversion helpers."""

import pytest

from poi_proximity.timeutils import format_hhmmss, format_local, parse_local_ms

# 2023-11-14 22:13:20 UTC
EPOCH_MS = 1_700_000_000_000


class TestFormatLocal:
    def test_utc(self):
        assert format_local(EPOCH_MS, "UTC") == "2023-11-14 22:13:20+00:00"

    def test_named_zone(self):
        assert format_local(EPOCH_MS, "Asia/Shanghai") == "2023-11-15 06:13:20+08:00"

    def test_keeps_milliseconds(self):
        assert format_local(EPOCH_MS + 250, "UTC") == "2023-11-14 22:13:20.250000+00:00"

    def test_invalid_zone(self):
        with pytest.raises(ValueError, match="无效时区"):
            format_local(EPOCH_MS, "Mars/Olympus_Mons")


class TestParseLocalMs:
    def test_naive_text_uses_zone(self):
        assert parse_local_ms("2023-11-15 06:13:20", "Asia/Shanghai") == EPOCH_MS
        assert parse_local_ms("2023-11-14T22:13:20", "UTC") == EPOCH_MS

    def test_explicit_offset_wins(self):
        assert parse_local_ms("2023-11-15 00:13:20+02:00", "Asia/Shanghai") == EPOCH_MS

    def test_round_trips_format_local(self):
        text = format_local(EPOCH_MS, "Europe/Athens")
        assert parse_local_ms(text, "UTC") == EPOCH_MS

    @pytest.mark.parametrize("text", ["", "yesterday", "2023-13-01 00:00:00"])
    def test_rejects_garbage(self, text):
        with pytest.raises(ValueError, match="无法解析时间"):
            parse_local_ms(text, "UTC")


class TestFormatHhmmss:
    @pytest.mark.parametrize(
        "seconds, expected",
        [(0, "00:00:00"), (59.6, "00:01:00"), (3661, "01:01:01"), (-5, "00:00:00"), (90000, "25:00:00")],
    )
    def test_values(self, seconds, expected):
        assert format_hhmmss(seconds) == expected
