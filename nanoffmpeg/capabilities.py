"""Discovery and caching of what the installed ffmpeg supports."""

from __future__ import annotations

import contextlib
import json
import re
import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from nanoffmpeg.detect import FFmpegInfo

_CODEC_RE = re.compile(r"^\s*([D.])([E.])([VASDT])([I.])([L.])([S.])\s+(\S+)\s+", re.ASCII)
_FORMAT_RE = re.compile(r"^\s*([D ])([E ])[\s.]+(\S+)\s+", re.ASCII)
_FILTER_RE = re.compile(r"^\s*[T.][S.][C.]\s+(\S+)\s+", re.ASCII)

_CODEC_TYPES = {"V": "video", "A": "audio", "S": "subtitle", "D": "data"}
_HWACCEL_HEADER = "Hardware acceleration methods:"


@dataclass
class Codec:
    """A codec known to ffmpeg."""

    name: str
    decoding: bool = False
    encoding: bool = False
    type: str = "unknown"
    lossy: bool = False
    lossless: bool = False


@dataclass
class Format:
    """A container format known to ffmpeg."""

    name: str
    demux: bool = False
    mux: bool = False


@dataclass
class Capabilities:
    """Everything the installed ffmpeg reported it can do."""

    codecs: list[Codec] = field(default_factory=list)
    formats: list[Format] = field(default_factory=list)
    filters: list[str] = field(default_factory=list)
    hwaccels: list[str] = field(default_factory=list)
    version: str = ""

    def has_encoder(self, name: str) -> bool:
        """Whether a codec called ``name`` can encode."""
        return any(c.name == name and c.encoding for c in self.codecs)

    def has_filter(self, name: str) -> bool:
        return name in self.filters

    def has_hwaccel(self, name: str) -> bool:
        return name in self.hwaccels

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form used by the on-disk cache."""
        return {
            "codecs": [
                {
                    "name": c.name,
                    "decoding": c.decoding,
                    "encoding": c.encoding,
                    "type": c.type,
                    "lossy": c.lossy,
                    "lossless": c.lossless,
                }
                for c in self.codecs
            ],
            "formats": [{"name": f.name, "demux": f.demux, "mux": f.mux} for f in self.formats],
            "filters": list(self.filters),
            "hwaccels": list(self.hwaccels),
            "version": self.version,
        }


def _entries(data: dict[str, Any], key: str) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"capabilities field {key!r} must be a list")
    return value


def _objects(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    items = _entries(data, key)
    if not all(isinstance(item, dict) for item in items):
        raise ValueError(f"capabilities field {key!r} must hold objects")
    return items


def _strings(data: dict[str, Any], key: str) -> list[str]:
    items = _entries(data, key)
    if not all(isinstance(item, str) for item in items):
        raise ValueError(f"capabilities field {key!r} must hold strings")
    return list(items)


def capabilities_from_dict(data: Any) -> Capabilities:
    """Rebuild :class:`Capabilities` from the form written by ``to_dict``."""
    if not isinstance(data, dict):
        raise ValueError("capabilities data must be a JSON object")
    return Capabilities(
        codecs=[
            Codec(
                name=str(c.get("name", "")),
                decoding=bool(c.get("decoding", False)),
                encoding=bool(c.get("encoding", False)),
                type=str(c.get("type", "")),
                lossy=bool(c.get("lossy", False)),
                lossless=bool(c.get("lossless", False)),
            )
            for c in _objects(data, "codecs")
        ],
        formats=[
            Format(
                name=str(f.get("name", "")),
                demux=bool(f.get("demux", False)),
                mux=bool(f.get("mux", False)),
            )
            for f in _objects(data, "formats")
        ],
        filters=_strings(data, "filters"),
        hwaccels=_strings(data, "hwaccels"),
        version=str(data.get("version") or ""),
    )


def _query(ffmpeg_path: str, flag: str) -> list[str]:
    """Run ``ffmpeg <flag> -hide_banner`` and return its stdout lines."""
    completed = subprocess.run(
        [ffmpeg_path, flag, "-hide_banner"],
        capture_output=True,
        check=True,
    )
    return completed.stdout.decode("utf-8", "replace").split("\n")


def parse_codecs(ffmpeg_path: str) -> list[Codec]:
    """List the codecs reported by ``ffmpeg -codecs``."""
    codecs = []
    for line in _query(ffmpeg_path, "-codecs"):
        m = _CODEC_RE.match(line)
        if m is None:
            continue
        codecs.append(
            Codec(
                name=m[7],
                decoding=m[1] == "D",
                encoding=m[2] == "E",
                type=_CODEC_TYPES.get(m[3], "unknown"),
                lossy=m[5] == "L",
                lossless=m[6] == "S",
            )
        )
    return codecs


def parse_formats(ffmpeg_path: str) -> list[Format]:
    """List the container formats reported by ``ffmpeg -formats``."""
    formats = []
    in_list = False
    for line in _query(ffmpeg_path, "-formats"):
        if "---" in line:
            in_list = True
            continue
        if not in_list:
            continue
        m = _FORMAT_RE.match(line)
        if m is not None:
            formats.append(Format(name=m[3], demux=m[1] == "D", mux=m[2] == "E"))
    return formats


def parse_filters(ffmpeg_path: str) -> list[str]:
    """List the filter names reported by ``ffmpeg -filters``."""
    filters = []
    in_list = False
    for line in _query(ffmpeg_path, "-filters"):
        if "------" in line:
            in_list = True
            continue
        if not in_list:
            continue
        m = _FILTER_RE.match(line)
        if m is not None:
            filters.append(m[1])
    return filters


def parse_hwaccels(ffmpeg_path: str) -> list[str]:
    """List the hardware accelerators reported by ``ffmpeg -hwaccels``."""
    accels = []
    in_list = False
    for raw in _query(ffmpeg_path, "-hwaccels"):
        line = raw.strip()
        if line == _HWACCEL_HEADER:
            in_list = True
            continue
        if in_list and line:
            accels.append(line)
    return accels


def config_dir() -> Path:
    return Path.home() / ".config" / "nano-ffmpeg"


def cache_path() -> Path:
    return config_dir() / "capabilities.json"


def load_cached_capabilities(current_version: str) -> Capabilities | None:
    """Read the cache; return None when it was written for another version.

    Raises OSError when the cache cannot be read and ValueError when it is
    not valid.
    """
    caps = capabilities_from_dict(json.loads(cache_path().read_text(encoding="utf-8")))
    if caps.version != current_version:
        return None
    return caps


def cache_capabilities(caps: Capabilities) -> None:
    """Write ``caps`` to the cache file."""
    config_dir().mkdir(parents=True, exist_ok=True)
    cache_path().write_text(json.dumps(caps.to_dict(), indent=2), encoding="utf-8")


def _collect(parser: Callable[[str], list[Any]], ffmpeg_path: str) -> list[Any]:
    try:
        return parser(ffmpeg_path)
    except (OSError, subprocess.CalledProcessError):
        return []


def probe_capabilities(info: FFmpegInfo) -> Capabilities:
    """Return the capabilities of ``info``'s ffmpeg, using the cache when valid."""
    try:
        cached = load_cached_capabilities(info.version)
    except (OSError, ValueError):
        cached = None
    if cached is not None:
        return cached

    caps = Capabilities(
        codecs=_collect(parse_codecs, info.ffmpeg_path),
        formats=_collect(parse_formats, info.ffmpeg_path),
        filters=_collect(parse_filters, info.ffmpeg_path),
        hwaccels=_collect(parse_hwaccels, info.ffmpeg_path),
        version=info.version,
    )
    with contextlib.suppress(OSError):
        cache_capabilities(caps)
    return caps