"""Reading media metadata with ffprobe."""

from __future__ import annotations

import json
import math
import re
import subprocess
from dataclasses import dataclass, field
from typing import Any

_INT_RE = re.compile(r"[+-]?[0-9]+")

_NS_PER_SECOND = 1_000_000_000
_NS_PER_MINUTE = 60 * _NS_PER_SECOND
_NS_PER_HOUR = 60 * _NS_PER_MINUTE


class ProbeError(Exception):
    """Raised when ffprobe cannot be run or its output cannot be read."""


@dataclass
class ProbeFormat:
    """Container-level metadata."""

    filename: str = ""
    format_name: str = ""
    format_long: str = ""
    duration: float = 0.0
    size: int = 0
    bit_rate: int = 0


@dataclass
class ProbeStream:
    """Per-stream metadata."""

    index: int = 0
    codec_name: str = ""
    codec_long: str = ""
    codec_type: str = ""
    width: int = 0
    height: int = 0
    pix_fmt: str = ""
    r_frame_rate: str = ""
    avg_fps: str = ""
    sample_rate: str = ""
    channels: int = 0
    channel_layout: str = ""
    bit_rate: str = ""
    duration: str = ""
    tags: dict[str, str] = field(default_factory=dict)


@dataclass
class ProbeResult:
    """Parsed ffprobe output."""

    format: ProbeFormat = field(default_factory=ProbeFormat)
    streams: list[ProbeStream] = field(default_factory=list)

    def video_stream(self) -> ProbeStream | None:
        """Return the first video stream, if any."""
        return next((s for s in self.streams if s.codec_type == "video"), None)

    def audio_stream(self) -> ProbeStream | None:
        """Return the first audio stream, if any."""
        return next((s for s in self.streams if s.codec_type == "audio"), None)

    def subtitle_streams(self) -> list[ProbeStream]:
        """Return every subtitle stream in order."""
        return [s for s in self.streams if s.codec_type == "subtitle"]

    def duration_string(self) -> str:
        """Return the duration as e.g. ``1m30s`` or ``2h05m10s``."""
        ns = int(self.format.duration * _NS_PER_SECOND)
        hours = _trunc_div(ns, _NS_PER_HOUR)
        minutes = _trunc_mod(_trunc_div(ns, _NS_PER_MINUTE), 60)
        seconds = _trunc_mod(_trunc_div(ns, _NS_PER_SECOND), 60)
        if hours > 0:
            return f"{hours}h{minutes:02d}m{seconds:02d}s"
        return f"{minutes}m{seconds:02d}s"

    def size_string(self) -> str:
        """Return the file size in human units."""
        size = float(self.format.size)
        units = ("B", "KB", "MB", "GB", "TB")
        i = 0
        while size >= 1024 and i < len(units) - 1:
            size /= 1024
            i += 1
        if i == 0:
            return f"{size:.0f} {units[i]}"
        return f"{size:.1f} {units[i]}"

    def status_line(self) -> str:
        """Return a one-line summary for a status bar."""
        parts = [self.format.filename]

        video = self.video_stream()
        if video is not None:
            info = f"{video.codec_name} {video.width}x{video.height}"
            fps = parse_fps(video.r_frame_rate)
            if fps > 0:
                info += f" {fps:.3g}fps"
            parts.append(info)

        audio = self.audio_stream()
        if audio is not None:
            info = f"{audio.codec_name} {audio.channel_layout}"
            if audio.sample_rate:
                rate = _parse_int(audio.sample_rate)
                if rate > 0:
                    info += f" {rate // 1000}kHz"
            parts.append(info)

        parts.append(self.duration_string())
        parts.append(self.size_string())
        return " | ".join(parts)


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // b
    return -q if a < 0 else q


def _trunc_mod(a: int, b: int) -> int:
    return a - b * _trunc_div(a, b)


def _parse_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INT_RE.fullmatch(value):
        return int(value)
    return 0


def _parse_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str) and value == value.strip() and "_" not in value:
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _number(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


def _stream_from_dict(raw: dict[str, Any]) -> ProbeStream:
    tags = raw.get("tags") or {}
    return ProbeStream(
        index=_number(raw.get("index")),
        codec_name=_text(raw.get("codec_name")),
        codec_long=_text(raw.get("codec_long_name")),
        codec_type=_text(raw.get("codec_type")),
        width=_number(raw.get("width")),
        height=_number(raw.get("height")),
        pix_fmt=_text(raw.get("pix_fmt")),
        r_frame_rate=_text(raw.get("r_frame_rate")),
        avg_fps=_text(raw.get("avg_frame_rate")),
        sample_rate=_text(raw.get("sample_rate")),
        channels=_number(raw.get("channels")),
        channel_layout=_text(raw.get("channel_layout")),
        bit_rate=_text(raw.get("bit_rate")),
        duration=_text(raw.get("duration")),
        tags={str(k): str(v) for k, v in tags.items()} if isinstance(tags, dict) else {},
    )


def parse_probe_output(data: str | bytes) -> ProbeResult:
    """Parse the JSON printed by ``ffprobe -print_format json``."""
    try:
        raw = json.loads(data)
    except ValueError as exc:
        raise ProbeError(f"failed to parse ffprobe output: {exc}") from exc
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ProbeError("failed to parse ffprobe output: expected a JSON object")

    fmt = raw.get("format") or {}
    streams = raw.get("streams") or []
    if not isinstance(fmt, dict) or not isinstance(streams, list):
        raise ProbeError("failed to parse ffprobe output: unexpected structure")

    return ProbeResult(
        format=ProbeFormat(
            filename=_text(fmt.get("filename")),
            format_name=_text(fmt.get("format_name")),
            format_long=_text(fmt.get("format_long_name")),
            duration=_parse_float(fmt.get("duration", "")),
            size=_parse_int(fmt.get("size", "")),
            bit_rate=_parse_int(fmt.get("bit_rate", "")),
        ),
        streams=[_stream_from_dict(s) for s in streams if isinstance(s, dict)],
    )


def probe(ffprobe_path: str, file_path: str) -> ProbeResult:
    """Run ffprobe on ``file_path`` and return the parsed metadata."""
    try:
        completed = subprocess.run(
            [
                ffprobe_path,
                "-v", "quiet",
                "-print_format", "json",
                "-show_format",
                "-show_streams",
                file_path,
            ],
            capture_output=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        raise ProbeError(f"ffprobe failed: {exc}") from exc
    return parse_probe_output(completed.stdout)


def parse_fps(rational: str) -> float:
    """Convert a rational frame rate such as ``30000/1001`` to a float.

    Returns 0 for anything that is not a valid ``num/den`` with a non-zero
    denominator.
    """
    parts = rational.split("/")
    if len(parts) != 2:
        return 0.0
    num = _parse_float(parts[0])
    den = _parse_float(parts[1])
    if den == 0:
        return 0.0
    result = num / den
    return 0.0 if math.isnan(result) else result