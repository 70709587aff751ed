"""Parsing of ffmpeg progress lines from stderr."""

from __future__ import annotations

import re
import time
from collections import deque
from dataclasses import dataclass

_FRAME_RE = re.compile(r"frame=\s*(\d+)", re.ASCII)
_FPS_RE = re.compile(r"fps=\s*([\d.]+)", re.ASCII)
_QUALITY_RE = re.compile(r"q=\s*([\d.-]+)", re.ASCII)
_SIZE_RE = re.compile(r"(?:L?size|Lsize)=\s*(\d+)\s*kB", re.ASCII)
_TIME_RE = re.compile(r"time=\s*(\d+):(\d+):(\d+)\.(\d+)", re.ASCII)
_BITRATE_RE = re.compile(r"bitrate=\s*([\d.]+)\s*kbits/s", re.ASCII)
_SPEED_RE = re.compile(r"speed=\s*([\d.]+)x", re.ASCII)

_ETA_HISTORY = 5


@dataclass
class Progress:
    """One progress update. Times are in seconds, ``size`` in bytes,
    ``bitrate`` in kbit/s and ``speed`` as a multiple of real time."""

    frame: int = 0
    fps: float = 0.0
    quality: float = 0.0
    size: int = 0
    time: float = 0.0
    bitrate: float = 0.0
    speed: float = 0.0
    percent: float = 0.0
    eta: float = 0.0
    elapsed: float = 0.0
    pass_number: int = 0
    total_passes: int = 0


def _to_float(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        return 0.0


class ProgressParser:
    """Turns ffmpeg stderr lines into :class:`Progress` values.

    The ETA is a rolling average over the last few estimates so it does
    not jump around.
    """

    def __init__(self, total_duration: float) -> None:
        self.total_duration = total_duration
        self.start_time = time.monotonic()
        self._eta_history: deque[float] = deque(maxlen=_ETA_HISTORY)

    def parse(self, line: str) -> Progress | None:
        """Return the progress in ``line``, or None if it is not a progress line."""
        if "frame=" not in line and "size=" not in line:
            return None

        p = Progress(elapsed=time.monotonic() - self.start_time)

        if m := _FRAME_RE.search(line):
            p.frame = int(m[1])
        if m := _FPS_RE.search(line):
            p.fps = _to_float(m[1])
        if m := _QUALITY_RE.search(line):
            p.quality = _to_float(m[1])
        if m := _SIZE_RE.search(line):
            p.size = int(m[1]) * 1024
        if m := _TIME_RE.search(line):
            hours, mins, secs, hundredths = (int(g) for g in m.groups())
            p.time = hours * 3600 + mins * 60 + secs + hundredths / 100
        if m := _BITRATE_RE.search(line):
            p.bitrate = _to_float(m[1])
        if m := _SPEED_RE.search(line):
            p.speed = _to_float(m[1])

        if self.total_duration > 0 and p.time > 0:
            p.percent = min(p.time / self.total_duration * 100, 100.0)

        if p.speed > 0 and self.total_duration > 0:
            remaining = self.total_duration - p.time
            self._eta_history.append(remaining / p.speed)
            p.eta = sum(self._eta_history) / len(self._eta_history)

        return p


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // b
    return -q if a < 0 else q


def format_duration(seconds: float) -> str:
    """Format a number of seconds as ``HH:MM:SS``."""
    ns = int(seconds * 1_000_000_000)
    total_seconds = _trunc_div(ns, 1_000_000_000)
    total_minutes = _trunc_div(total_seconds, 60)
    hours = _trunc_div(total_minutes, 60)
    minutes = total_minutes - 60 * _trunc_div(total_minutes, 60)
    secs = total_seconds - 60 * _trunc_div(total_seconds, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_size(num_bytes: int) -> str:
    """Format a byte count in human units, up to GB."""
    size = float(num_bytes)
    units = ("B", "KB", "MB", "GB")
    i = 0
    while size >= 1024 and i < len(units) - 1:
        size /= 1024
        i += 1
    if i == 0:
        return f"{size:.0f} {units[i]}"
    return f"{size:.1f} {units[i]}"