"""Builder for ffmpeg command lines."""

from __future__ import annotations

from dataclasses import dataclass, field

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
}


def _quote(text: str) -> str:
    """Return ``text`` as a double-quoted, escaped literal."""
    pieces = []
    for ch in text:
        if ch in _ESCAPES:
            pieces.append(_ESCAPES[ch])
        elif ch.isprintable():
            pieces.append(ch)
        elif ord(ch) < 0x100:
            pieces.append(f"\\x{ord(ch):02x}")
        elif ord(ch) < 0x10000:
            pieces.append(f"\\u{ord(ch):04x}")
        else:
            pieces.append(f"\\U{ord(ch):08x}")
    return '"' + "".join(pieces) + '"'


@dataclass
class Command:
    """An ffmpeg invocation assembled from structured options.

    Every builder method appends to ``args`` and returns the command itself,
    so calls can be chained.
    """

    ffmpeg_path: str
    input_path: str
    output_path: str
    args: list[str] = field(default_factory=list)
    overwrite: bool = True

    def add_arg(self, arg: str) -> Command:
        """Append a single argument."""
        self.args.append(arg)
        return self

    def add_args(self, flag: str, value: str) -> Command:
        """Append a flag followed by its value."""
        self.args.extend((flag, value))
        return self

    def set_video_codec(self, codec: str) -> Command:
        return self.add_args("-c:v", codec)

    def set_audio_codec(self, codec: str) -> Command:
        return self.add_args("-c:a", codec)

    def set_crf(self, crf: int) -> Command:
        """Set the constant rate factor."""
        return self.add_args("-crf", f"{crf:d}")

    def set_preset(self, preset: str) -> Command:
        """Set the encoding preset (ultrafast to veryslow)."""
        return self.add_args("-preset", preset)

    def set_bitrate(self, bitrate: str) -> Command:
        return self.add_args("-b:v", bitrate)

    def set_audio_bitrate(self, bitrate: str) -> Command:
        return self.add_args("-b:a", bitrate)

    def set_resolution(self, width: int, height: int) -> Command:
        return self.add_args("-vf", f"scale={width:d}:{height:d}")

    def set_scale_height(self, height: int) -> Command:
        """Scale to ``height`` while keeping the aspect ratio."""
        return self.add_args("-vf", f"scale=-2:{height:d}")

    def set_start_time(self, t: str) -> Command:
        return self.add_args("-ss", t)

    def set_end_time(self, t: str) -> Command:
        return self.add_args("-to", t)

    def set_duration(self, d: str) -> Command:
        return self.add_args("-t", d)

    def stream_copy(self) -> Command:
        """Copy all streams without re-encoding."""
        return self.add_args("-c", "copy")

    def no_video(self) -> Command:
        return self.add_arg("-vn")

    def no_audio(self) -> Command:
        return self.add_arg("-an")

    def add_video_filter(self, filter: str) -> Command:  # noqa: A002
        return self.add_args("-vf", filter)

    def add_audio_filter(self, filter: str) -> Command:  # noqa: A002
        return self.add_args("-af", filter)

    def set_frame_rate(self, fps: int) -> Command:
        return self.add_args("-r", f"{fps:d}")

    def set_pixel_format(self, pix_fmt: str) -> Command:
        return self.add_args("-pix_fmt", pix_fmt)

    def set_hwaccel(self, accel: str) -> Command:
        return self.add_args("-hwaccel", accel)

    def set_video_encoder(self, encoder: str) -> Command:
        return self.add_args("-c:v", encoder)

    def build(self) -> list[str]:
        """Return the argument list, without the program path."""
        args = ["-y"] if self.overwrite else []
        args += ["-i", self.input_path, *self.args, self.output_path]
        return args

    def argv(self) -> list[str]:
        """Return the full argument vector ready for ``subprocess``."""
        return [self.ffmpeg_path, *self.build()]

    def __str__(self) -> str:
        return " ".join(_quote(part) if " " in part else part for part in self.argv())