"""Tools for building, probing, running and monitoring ffmpeg jobs, with presets and settings."""

__version__ = "0.1.0"