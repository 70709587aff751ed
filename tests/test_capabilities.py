import json
import subprocess

import pytest

from nanoffmpeg.capabilities import (
    Capabilities,
    Codec,
    Format,
    cache_capabilities,
    cache_path,
    capabilities_from_dict,
    config_dir,
    load_cached_capabilities,
    parse_codecs,
    parse_filters,
    parse_formats,
    parse_hwaccels,
    probe_capabilities,
)
from nanoffmpeg.detect import FFmpegInfo


def write_script(tmp_path, body, name="fake"):
    path = tmp_path / name
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(0o755)
    return str(path)


def write_fake_binary(tmp_path, stdout, name="fake"):
    return write_script(tmp_path, "cat <<'__END__'\n" + stdout + "\n__END__\n", name)


@pytest.fixture
def home(tmp_path, monkeypatch):
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


def test_has_encoder():
    caps = Capabilities(
        codecs=[
            Codec(name="libx264", encoding=True, type="video"),
            Codec(name="h264", decoding=True, encoding=False, type="video"),
            Codec(name="aac", encoding=True, type="audio"),
        ]
    )
    assert caps.has_encoder("libx264")
    assert not caps.has_encoder("h264")
    assert caps.has_encoder("aac")
    assert not caps.has_encoder("libx265")


def test_has_filter():
    caps = Capabilities(filters=["scale", "crop", "vidstabdetect", "loudnorm"])
    assert caps.has_filter("scale")
    assert caps.has_filter("vidstabdetect")
    assert not caps.has_filter("nonexistent")


def test_has_hwaccel():
    caps = Capabilities(hwaccels=["videotoolbox", "cuda"])
    assert caps.has_hwaccel("videotoolbox")
    assert not caps.has_hwaccel("vaapi")


def test_parse_codecs_from_fake_ffmpeg(tmp_path):
    output = (
        " D.V.L. h264                 H.264 / AVC / MPEG-4 AVC / MPEG-4 part 10\n"
        " DEV.L. libx264              libx264 H.264 / AVC (encoders: libx264 libx264rgb )\n"
        " DEA.L. aac                  AAC (Advanced Audio Coding)\n"
        " DES..S mov_text             MOV text"
    )
    codecs = {c.name: c for c in parse_codecs(write_fake_binary(tmp_path, output))}

    assert codecs["h264"] == Codec(
        name="h264", decoding=True, encoding=False, type="video", lossy=True, lossless=False
    )
    assert codecs["libx264"].decoding and codecs["libx264"].encoding
    assert codecs["aac"].type == "audio"
    assert codecs["mov_text"].type == "subtitle"
    assert codecs["mov_text"].lossless
    assert not codecs["mov_text"].lossy


def test_parse_formats_skips_header(tmp_path):
    output = (
        "File formats:\n"
        " D. = Demuxing supported\n"
        " .E = Muxing supported\n"
        " ---\n"
        " DE mov              QuickTime / MOV\n"
        " D  mpeg             MPEG-1 Systems\n"
        "  E md5              MD5 testing"
    )
    formats = parse_formats(write_fake_binary(tmp_path, output))
    assert formats == [
        Format(name="mov", demux=True, mux=True),
        Format(name="mpeg", demux=True, mux=False),
        Format(name="md5", demux=False, mux=True),
    ]


def test_parse_filters_strips_header(tmp_path):
    output = (
        "Filters:\n"
        " T.. = Timeline support\n"
        " .S. = Slice threading\n"
        " ..C = Command support\n"
        " A = Audio input/output\n"
        " V = Video input/output\n"
        " N = Dynamic number and/or type of input/output\n"
        " | = Source or sink filter\n"
        "------\n"
        " T.. scale            V->V       Scale the input video size.\n"
        " ... vidstabdetect    V->V       Analyze for stabilization.\n"
        " ... loudnorm         A->A       EBU R128 loudness normalization."
    )
    filters = parse_filters(write_fake_binary(tmp_path, output))
    assert filters == ["scale", "vidstabdetect", "loudnorm"]


def test_parse_hwaccels_ignores_blank_lines(tmp_path):
    output = "Hardware acceleration methods:\nvideotoolbox\ncuda\n\n"
    assert parse_hwaccels(write_fake_binary(tmp_path, output)) == ["videotoolbox", "cuda"]


def test_parse_codecs_missing_binary_raises(tmp_path):
    with pytest.raises(OSError):
        parse_codecs(str(tmp_path / "no-such-ffmpeg"))


def test_parse_formats_failing_binary_raises(tmp_path):
    with pytest.raises(subprocess.CalledProcessError):
        parse_formats(write_script(tmp_path, "exit 1\n"))


def test_cache_round_trip(home):
    original = Capabilities(
        version="6.1",
        codecs=[Codec(name="libx264", encoding=True, type="video")],
        formats=[Format(name="mp4", mux=True, demux=True)],
        filters=["scale"],
        hwaccels=["videotoolbox"],
    )
    cache_capabilities(original)
    loaded = load_cached_capabilities("6.1")
    assert loaded == original
    assert loaded.codecs[0].name == "libx264"


def test_cache_file_uses_json_keys(home):
    cache_capabilities(Capabilities(version="6.1", codecs=[Codec(name="aac", lossy=True)]))
    data = json.loads(cache_path().read_text())
    assert data["version"] == "6.1"
    assert data["codecs"][0]["lossy"] is True
    assert set(data) == {"codecs", "formats", "filters", "hwaccels", "version"}


def test_load_cached_stale_version(home):
    cache_capabilities(Capabilities(version="6.1"))
    assert load_cached_capabilities("6.2") is None


def test_load_cached_missing_file(home):
    with pytest.raises(FileNotFoundError):
        load_cached_capabilities("6.1")


def test_load_cached_invalid_json(home):
    config_dir().mkdir(parents=True)
    cache_path().write_text("not json")
    with pytest.raises(ValueError):
        load_cached_capabilities("6.1")


def test_config_and_cache_path_use_home(home):
    assert str(config_dir()).startswith(str(home))
    assert cache_path().name == "capabilities.json"


def test_dict_round_trip():
    caps = Capabilities(
        codecs=[Codec(name="flac", decoding=True, encoding=True, type="audio", lossless=True)],
        formats=[Format(name="mkv", demux=True, mux=True)],
        filters=["crop"],
        hwaccels=["cuda"],
        version="7.0",
    )
    assert capabilities_from_dict(caps.to_dict()) == caps


def test_from_dict_rejects_non_object():
    with pytest.raises(ValueError):
        capabilities_from_dict(["not", "an", "object"])


def test_probe_capabilities_uses_cache(home, tmp_path):
    cached = Capabilities(version="6.1", filters=["scale"])
    cache_capabilities(cached)
    info = FFmpegInfo(
        ffmpeg_path=str(tmp_path / "missing"), ffprobe_path="", version="6.1", build_config=""
    )
    assert probe_capabilities(info) == cached


def test_probe_capabilities_queries_and_caches(home, tmp_path):
    script = write_script(
        tmp_path,
        'case "$1" in\n'
        "  -codecs) echo ' DEV.L. libx264              libx264 H.264' ;;\n"
        "  -formats) printf '%s\\n' ' ---' ' DE mp4              MP4' ;;\n"
        "  -filters) printf '%s\\n' '------' ' T.. scale            V->V       Scale.' ;;\n"
        "  -hwaccels) printf '%s\\n' 'Hardware acceleration methods:' 'cuda' ;;\n"
        "esac\n",
    )
    info = FFmpegInfo(ffmpeg_path=script, ffprobe_path="", version="7.1", build_config="")
    caps = probe_capabilities(info)

    assert caps.version == "7.1"
    assert caps.has_encoder("libx264")
    assert caps.formats == [Format(name="mp4", demux=True, mux=True)]
    assert caps.filters == ["scale"]
    assert caps.hwaccels == ["cuda"]
    assert load_cached_capabilities("7.1") == caps


def test_probe_capabilities_missing_binary_gives_empty(home, tmp_path):
    info = FFmpegInfo(
        ffmpeg_path=str(tmp_path / "missing"), ffprobe_path="", version="5.0", build_config=""
    )
    caps = probe_capabilities(info)
    assert caps == Capabilities(version="5.0")