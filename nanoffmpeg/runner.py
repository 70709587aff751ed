"""Running an ffmpeg process and following its stderr."""

from __future__ import annotations

import contextlib
import os
import re
import signal
import subprocess
from collections.abc import Iterator
from typing import BinaryIO

from nanoffmpeg.command import Command

_CHUNK = 4096
_LINE_BREAK = re.compile(rb"[\r\n]")


def split_lines_or_cr(stream: BinaryIO) -> Iterator[str]:
    """Yield the pieces of ``stream`` separated by ``\\n`` or ``\\r``.

    ffmpeg ends progress lines with a bare carriage return, so both count
    as line ends. A trailing piece without a terminator is yielded too.
    """
    read = getattr(stream, "read1", stream.read)
    pending = b""
    while chunk := read(_CHUNK):
        pending += chunk
        *lines, pending = _LINE_BREAK.split(pending)
        for line in lines:
            yield line.decode("utf-8", "replace")
    if pending:
        yield pending.decode("utf-8", "replace")


class Runner:
    """One ffmpeg process built from a :class:`Command`."""

    def __init__(self, command: Command) -> None:
        self._argv = command.argv()
        self._output_path = command.output_path
        self._process: subprocess.Popen[bytes] | None = None

    def _started(self) -> subprocess.Popen[bytes]:
        if self._process is None:
            raise RuntimeError("process has not been started")
        return self._process

    def start(self) -> None:
        """Launch the process in its own process group (on POSIX)."""
        if self._process is not None:
            raise RuntimeError("process already started")
        self._process = subprocess.Popen(
            self._argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.PIPE,
            start_new_session=os.name != "nt",
        )

    def output_path(self) -> str:
        return self._output_path

    def iter_stderr(self) -> Iterator[str]:
        """Yield the process's stderr line by line."""
        process = self._started()
        if process.stderr is None:
            return
        yield from split_lines_or_cr(process.stderr)

    def wait(self) -> None:
        """Wait for the process to exit.

        Raises CalledProcessError when it exits with a non-zero status.
        """
        process = self._started()
        returncode = process.wait()
        if process.stderr is not None:
            process.stderr.close()
        if returncode != 0:
            raise subprocess.CalledProcessError(returncode, self._argv)

    def cancel(self) -> None:
        """Ask the process and its group to stop with an interrupt.

        Does nothing if the process was never started or has already exited.
        """
        process = self._process
        if process is None or process.poll() is not None:
            return
        if os.name == "nt":
            # No process groups or SIGINT delivery to other consoles here.
            process.terminate()
            return
        try:
            os.killpg(process.pid, signal.SIGINT)
        except OSError:
            process.send_signal(signal.SIGINT)

    def cleanup_output(self) -> None:
        """Remove a partially written output file, if there is one."""
        if self._output_path in ("", "-"):
            return
        with contextlib.suppress(OSError):
            os.remove(self._output_path)