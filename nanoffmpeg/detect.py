"""Locating the ffmpeg and ffprobe programs."""

from __future__ import annotations

import os
import re
import shutil
import subprocess
import sys
from dataclasses import dataclass

_VERSION_RE = re.compile(r"ffmpeg version (\S+)", re.ASCII)


class DetectError(Exception):
    """Raised when ffmpeg or ffprobe cannot be found or queried."""


@dataclass
class FFmpegInfo:
    """Details of the detected ffmpeg installation."""

    ffmpeg_path: str
    ffprobe_path: str
    version: str = ""
    build_config: str = ""


def detect() -> FFmpegInfo:
    """Find ffmpeg and ffprobe and read the ffmpeg version."""
    try:
        ffmpeg_path = find_binary("ffmpeg")
    except DetectError as exc:
        raise DetectError(f"ffmpeg binary not found: {exc}") from exc
    try:
        ffprobe_path = find_binary("ffprobe")
    except DetectError as exc:
        raise DetectError(f"ffprobe binary not found: {exc}") from exc
    try:
        version, build_config = parse_version(ffmpeg_path)
    except DetectError as exc:
        raise DetectError(f"failed to parse ffmpeg version: {exc}") from exc
    return FFmpegInfo(
        ffmpeg_path=ffmpeg_path,
        ffprobe_path=ffprobe_path,
        version=version,
        build_config=build_config,
    )


def find_binary(name: str) -> str:
    """Return the path of program ``name``.

    Searches PATH, then the directory of the running executable, then the
    usual system and Homebrew locations.
    """
    found = shutil.which(name)
    if found:
        return found

    try:
        return find_next_to_executable(name)
    except DetectError:
        pass

    for candidate in fallback_binary_paths(name):
        if shutil.which(candidate):
            return candidate

    raise DetectError(f"{name} not found in PATH or common locations")


def fallback_binary_paths(name: str) -> list[str]:
    """Common install locations, including keg-only Homebrew ones."""
    return [
        f"/usr/bin/{name}",
        f"/usr/local/bin/{name}",
        f"/opt/homebrew/bin/{name}",
        f"/usr/local/opt/ffmpeg/bin/{name}",
        f"/opt/homebrew/opt/ffmpeg/bin/{name}",
        f"/usr/local/opt/ffmpeg-full/bin/{name}",
        f"/opt/homebrew/opt/ffmpeg-full/bin/{name}",
    ]


def parse_version(ffmpeg_path: str) -> tuple[str, str]:
    """Return ``(version, build_config)`` from ``ffmpeg -version``.

    The version is ``"unknown"`` when the output does not state one.
    """
    try:
        completed = subprocess.run([ffmpeg_path, "-version"], capture_output=True, check=True)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise DetectError(f"could not run {ffmpeg_path} -version: {exc}") from exc

    output = completed.stdout.decode("utf-8", "replace")
    m = _VERSION_RE.search(output)
    version = m[1] if m else "unknown"

    build_config = next(
        (
            line.strip().removeprefix("configuration: ")
            for line in output.split("\n")
            if line.strip().startswith("configuration:")
        ),
        "",
    )
    return version, build_config


def find_next_to_executable(name: str) -> str:
    """Return ``name`` from the directory holding the running executable."""
    exe = sys.executable
    if not exe:
        raise DetectError("could not determine executable path")

    directory = os.path.dirname(os.path.realpath(exe))
    candidate = os.path.join(directory, name + (".exe" if os.name == "nt" else ""))
    if os.path.isfile(candidate):
        return candidate
    raise DetectError(f"{name} not found next to executable (tried {candidate})")