# nanoffmpeg

A small, dependency-free toolkit for driving `ffmpeg` and `ffprobe` from
Python: building command lines, reading media metadata, following encoding
progress, running and cancelling jobs, finding out what the installed ffmpeg
supports, and keeping a few user settings.

ffmpeg and ffprobe must be installed separately. They are looked for on
`PATH`, next to the running Python executable, and in the usual system and
Homebrew locations.

Python 3.10 or newer is required. There are no third-party runtime
dependencies; the `test` extra pulls in pytest.

## Modules

| Module | What it holds |
| --- | --- |
| `nanoffmpeg.command` | `Command`, a chainable builder for ffmpeg arguments |
| `nanoffmpeg.probe` | `probe()`, `parse_probe_output()`, `parse_fps()`, `ProbeResult`, `ProbeFormat`, `ProbeStream`, `ProbeError` |
| `nanoffmpeg.progress` | `ProgressParser`, `Progress`, `format_duration()`, `format_size()` |
| `nanoffmpeg.runner` | `Runner`, `split_lines_or_cr()` |
| `nanoffmpeg.detect` | `detect()`, `find_binary()`, `parse_version()`, `FFmpegInfo`, `DetectError` |
| `nanoffmpeg.capabilities` | `probe_capabilities()`, `Capabilities`, `Codec`, `Format` and the `-codecs`/`-formats`/`-filters`/`-hwaccels` parsers |
| `nanoffmpeg.errors` | `translate_error()` |
| `nanoffmpeg.presets` | quality, bitrate, resolution, compression and GIF presets; output formats |
| `nanoffmpeg.config` | `Config`, `load_config()`, `default_config()` |
| `nanoffmpeg.cli` | `build_parser()`, `parse_theme_override()`, `parse_startup_path()`, `StartupTarget` |

## Building a command

```python
from nanoffmpeg.command import Command

cmd = Command("/usr/bin/ffmpeg", "in.mkv", "out.mp4")
cmd.set_video_codec("libx264").set_crf(23).set_preset("medium").set_audio_codec("aac")

cmd.build()
# ['-y', '-i', 'in.mkv', '-c:v', 'libx264', '-crf', '23',
#  '-preset', 'medium', '-c:a', 'aac', 'out.mp4']

cmd.argv()  # ['/usr/bin/ffmpeg', *cmd.build()], ready for subprocess
str(cmd)    # the whole command line, parts containing spaces double-quoted
```

`-y` (overwrite the output) is added by default; set `cmd.overwrite = False`
to leave it out. Other builders include `set_bitrate`, `set_audio_bitrate`,
`set_resolution`, `set_scale_height`, `set_start_time`, `set_end_time`,
`set_duration`, `stream_copy`, `no_video`, `no_audio`, `add_video_filter`,
`add_audio_filter`, `set_frame_rate`, `set_pixel_format`, `set_hwaccel`,
`set_video_encoder`, `add_arg` and `add_args`.

## Probing a file

```python
from nanoffmpeg.probe import probe

result = probe("ffprobe", "clip.mp4")
result.format.duration    # seconds, as a float
result.video_stream()     # first video stream, or None
result.audio_stream()     # first audio stream, or None
result.subtitle_streams() # all subtitle streams, in order
result.duration_string()  # e.g. "1m05s" or "2h05m10s"
result.size_string()      # e.g. "1.5 MB"
result.status_line()      # e.g. "clip.mp4 | h264 1920x1080 30fps | aac stereo 48kHz | 1m05s | 2.0 KB"
```

A failing `ffprobe` or output that is not valid JSON raises `ProbeError`.
`parse_probe_output()` parses ffprobe's JSON that you already have.

## Running with progress

```python
from nanoffmpeg.command import Command
from nanoffmpeg.probe import probe
from nanoffmpeg.progress import ProgressParser, format_duration, format_size
from nanoffmpeg.runner import Runner

result = probe("ffprobe", "in.mkv")
cmd = Command("ffmpeg", "in.mkv", "out.mp4").set_video_codec("libx264")
runner = Runner(cmd)
parser = ProgressParser(result.format.duration)

runner.start()
for line in runner.iter_stderr():
    progress = parser.parse(line)
    if progress is not None:
        print(f"{progress.percent:5.1f}%  ETA {format_duration(progress.eta)}  "
              f"{format_size(progress.size)}")
runner.wait()  # raises subprocess.CalledProcessError on a non-zero exit
```

`iter_stderr()` splits on both `\n` and `\r`, since ffmpeg ends progress
lines with a bare carriage return. `ProgressParser.parse()` returns `None`
for lines that are not progress lines; the ETA is a rolling average of the
last five estimates.

`runner.cancel()` sends SIGINT to ffmpeg's process group on POSIX (the
process is started in its own session) and terminates it on Windows; it does
nothing if the process was never started or has exited.
`runner.cleanup_output()` removes the output file unless the output is empty
or `-`.

## Friendly error messages

```python
from nanoffmpeg.errors import translate_error

translate_error("Unknown encoder 'libx265'")
# 'The selected encoder is not available in your ffmpeg build. Try a different codec.'
```

Matching is case-insensitive. Unrecognised messages are returned unchanged;
"Discarding ID3 tags" notices come back as an empty string.

## Detection and capabilities

```python
from nanoffmpeg.detect import detect
from nanoffmpeg.capabilities import probe_capabilities

info = detect()                 # raises DetectError when ffmpeg or ffprobe is missing
info.version, info.build_config
caps = probe_capabilities(info) # cached in ~/.config/nano-ffmpeg/capabilities.json
caps.has_encoder("libx264")
caps.has_filter("loudnorm")
caps.has_hwaccel("videotoolbox")
```

The cache is reused only when it was written for the same ffmpeg version.
Queries that fail leave the matching list empty.

## Presets

```python
from nanoffmpeg.presets import video_presets, audio_formats, resolution_presets

[p.name for p in video_presets()]
# ['High Quality', 'Balanced', 'Small File', 'Web Optimized']
```

Also `audio_bitrate_presets()`, `compress_presets()`, `gif_presets()` and
`video_formats()`. Presets are frozen dataclasses; `Quality` is an `IntEnum`
ordered `HIGH < BALANCED < SMALL < WEB`.

## Configuration

```python
from nanoffmpeg.config import load_config

config = load_config()      # defaults when the file is missing or invalid
config.add_recent_file("/videos/clip.mp4")  # newest first, no duplicates, at most 10
config.save()               # ~/.config/nano-ffmpeg/config.json
```

Defaults are theme `dark` and hardware acceleration `auto`.

## Option parsing

`nanoffmpeg.cli.build_parser()` returns an `argparse` parser with
`-t/--theme`, `-d/--dir` and `--version`. `parse_theme_override()` accepts
`dark` or `light` (trimmed, case-insensitive, empty meaning no override) and
raises `ValueError` otherwise. `parse_startup_path()` turns a directory or
file path into an absolute `StartupTarget(start_dir, file_path)` and raises
`ValueError` when the path does not exist.

## What it does not do

There is no interactive terminal interface and no installed command: the
option parsing above validates startup options, but nothing in the package
starts an application with them. Screens, navigation, help overlays and
themes are not part of this package; it is a library for building such a
front end on top of ffmpeg.