"""Persistent user configuration."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_MAX_RECENT = 10


def config_dir_path() -> Path:
    """Directory holding the configuration file."""
    return Path.home() / ".config" / "nano-ffmpeg"


def config_file_path() -> Path:
    return config_dir_path() / "config.json"


@dataclass
class Config:
    """User settings kept between runs."""

    default_output_dir: str = ""
    theme: str = "dark"
    recent_files: list[str] = field(default_factory=list)
    favorite_presets: list[str] = field(default_factory=list)
    hw_accel: str = "auto"
    ffmpeg_path: str = ""

    def add_recent_file(self, path: str) -> None:
        """Put ``path`` first in the recent files, without duplicates, keeping at most 10."""
        others = [f for f in self.recent_files if f != path]
        self.recent_files = [path, *others][:_MAX_RECENT]

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form written to disk; empty optional fields are left out."""
        data: dict[str, Any] = {}
        if self.default_output_dir:
            data["default_output_dir"] = self.default_output_dir
        data["theme"] = self.theme
        data["recent_files"] = list(self.recent_files)
        if self.favorite_presets:
            data["favorite_presets"] = list(self.favorite_presets)
        data["hw_accel"] = self.hw_accel
        if self.ffmpeg_path:
            data["ffmpeg_path"] = self.ffmpeg_path
        return data

    def save(self) -> None:
        """Write the configuration file, creating its directory if needed."""
        config_dir_path().mkdir(parents=True, exist_ok=True)
        config_file_path().write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")


def default_config() -> Config:
    return Config()


_STRING_FIELDS = ("default_output_dir", "theme", "hw_accel", "ffmpeg_path")
_LIST_FIELDS = ("recent_files", "favorite_presets")


def _apply(cfg: Config, data: Any) -> None:
    if not isinstance(data, dict):
        raise ValueError("configuration must be a JSON object")
    for name in _STRING_FIELDS:
        value = data.get(name)
        if value is None:
            continue
        if not isinstance(value, str):
            raise ValueError(f"{name} must be a string")
        setattr(cfg, name, value)
    for name in _LIST_FIELDS:
        if name not in data:
            continue
        value = data[name]
        if value is None:
            setattr(cfg, name, [])
            continue
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ValueError(f"{name} must be a list of strings")
        setattr(cfg, name, list(value))


def load_config() -> Config:
    """Read the configuration file, falling back to defaults if it is missing or invalid."""
    try:
        text = config_file_path().read_text(encoding="utf-8")
        data = json.loads(text)
        cfg = default_config()
        _apply(cfg, data)
    except (OSError, ValueError):
        return default_config()
    return cfg