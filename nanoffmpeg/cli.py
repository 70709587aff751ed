"""Command-line options for starting the application."""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass

THEME_DARK = "dark"
THEME_LIGHT = "light"

_VERSION = "dev"


@dataclass(frozen=True)
class StartupTarget:
    """Where to start: a directory, and optionally a file already chosen in it."""

    start_dir: str = ""
    file_path: str = ""


def parse_theme_override(raw: str) -> str:
    """Normalise a ``--theme`` value; an empty value means no override.

    Raises ValueError for anything other than dark or light.
    """
    value = raw.strip().lower()
    if not value:
        return ""
    if value not in (THEME_DARK, THEME_LIGHT):
        raise ValueError(f'invalid value for --theme: {raw!r} (expected "dark" or "light")')
    return value


def parse_startup_path(raw: str) -> StartupTarget:
    """Resolve a ``--dir`` value to an absolute directory and optional file.

    Raises ValueError when the path does not exist.
    """
    value = raw.strip()
    if not value:
        return StartupTarget()

    abs_path = os.path.abspath(value)
    try:
        is_dir = os.path.isdir(abs_path)
        os.stat(abs_path)
    except OSError as exc:
        raise ValueError(f"invalid value for --dir: {raw!r}: {exc}") from exc

    if is_dir:
        return StartupTarget(start_dir=abs_path)
    return StartupTarget(start_dir=os.path.dirname(abs_path), file_path=abs_path)


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser for the ``nano-ffmpeg`` command."""
    parser = argparse.ArgumentParser(
        prog="nano-ffmpeg",
        description=(
            "nano-ffmpeg exposes every ffmpeg feature through a "
            "beginner-friendly terminal UI."
        ),
    )
    parser.add_argument(
        "-t", "--theme", default="", help="Theme override for this run: dark|light"
    )
    parser.add_argument(
        "-d", "--dir", default="", help="Startup directory or input file path"
    )
    parser.add_argument("--version", action="version", version=_VERSION)
    return parser