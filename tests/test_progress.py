import math

import pytest

from nanoffmpeg.progress import ProgressParser, format_duration, format_size


def test_parse_progress_line():
    parser = ProgressParser(120.0)
    line = "frame= 4521 fps=54.2 q=28.0 Lsize=  148736kB time=00:01:03.51 bitrate=8241.2kbits/s speed=2.31x"
    p = parser.parse(line)
    assert p is not None
    assert p.frame == 4521
    assert math.isclose(p.fps, 54.2, abs_tol=0.1)
    assert math.isclose(p.quality, 28.0)
    assert p.size == 148736 * 1024
    assert math.isclose(p.time, 63.51, abs_tol=0.1)
    assert math.isclose(p.bitrate, 8241.2, abs_tol=1)
    assert math.isclose(p.speed, 2.31, abs_tol=0.01)
    assert math.isclose(p.percent, 52.925, abs_tol=1)
    assert p.eta > 0
    assert p.elapsed >= 0


@pytest.mark.parametrize(
    "line",
    [
        "ffmpeg version 8.1 built with gcc 14",
        "Input #0, matroska,webm, from 'input.mkv':",
        "  Duration: 00:02:00.00, start: 0.000000",
        "Stream mapping:",
        "",
    ],
)
def test_non_progress_lines_return_none(line):
    assert ProgressParser(60.0).parse(line) is None


def test_eta_smoothing():
    parser = ProgressParser(100.0)
    lines = [
        "frame=100 fps=30.0 q=28.0 size=1000kB time=00:00:10.00 bitrate=800kbits/s speed=1.0x",
        "frame=200 fps=30.0 q=28.0 size=2000kB time=00:00:20.00 bitrate=800kbits/s speed=1.5x",
        "frame=300 fps=30.0 q=28.0 size=3000kB time=00:00:30.00 bitrate=800kbits/s speed=2.0x",
    ]
    etas = [parser.parse(line).eta for line in lines]
    assert 20 <= etas[-1] <= 60
    # The rolling average keeps the estimate above the latest raw value (35s).
    assert etas[-1] > 35


def test_percent_capped_at_hundred():
    p = ProgressParser(10.0).parse("frame=10 time=00:00:20.00 speed=1.0x")
    assert p.percent == 100.0


def test_no_duration_gives_no_percent_or_eta():
    p = ProgressParser(0.0).parse("size=  512kB time=00:00:05.00 speed=1.0x")
    assert p.size == 512 * 1024
    assert p.percent == 0.0
    assert p.eta == 0.0


def test_format_duration_zero():
    assert format_duration(0) == "00:00:00"


def test_format_duration_hours_minutes_seconds():
    assert format_duration(3725.9) == "01:02:05"


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 B"),
        (1024, "1.0 KB"),
        (1048576, "1.0 MB"),
        (1073741824, "1.0 GB"),
        (1536 * 1024, "1.5 MB"),
    ],
)
def test_format_size(size, expected):
    assert format_size(size) == expected


def test_format_size_stops_at_gigabytes():
    assert format_size(1024 ** 4) == "1024.0 GB"