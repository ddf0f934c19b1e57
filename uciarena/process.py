"""Child processes that speak a line-based protocol over pipes."""

from __future__ import annotations

import codecs
import logging
import os
import queue
import re
import shlex
import signal
import subprocess
import threading
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .globals import (
    ProcessInformation,
    register_process,
    stop_requested,
    unregister_process,
)

__all__ = ["Stream", "Status", "Line", "Process"]

_log = logging.getLogger(__name__)

_READ_SIZE = 4096
_POLL_SLICE = 0.05
_NEWLINE = re.compile(r"[\r\n]")

_Chunk = tuple["Stream", Optional[str]]


class Stream(Enum):
    """Which standard stream a line travelled on."""

    INPUT = "input"
    OUTPUT = "output"
    ERR = "err"


class Status(Enum):
    """Outcome of an operation on a process."""

    OK = "ok"
    ERR = "err"
    TIMEOUT = "timeout"
    NONE = "none"


@dataclass
class Line:
    """One non-empty line read from a process, with the time it arrived."""

    line: str
    time: str
    stream: Stream = Stream.OUTPUT


def _timestamp() -> str:
    return datetime.now().isoformat(sep=" ", timespec="microseconds")


def _describe_exit(code: int) -> str:
    if code >= 0:
        return str(code)
    try:
        description = signal.strsignal(-code)
    except ValueError:
        description = None
    return description or "Unknown child status"


def _pump(fd: int, stream: Stream, sink: "queue.Queue[_Chunk]") -> None:
    """Forward decoded text from ``fd`` to ``sink``; ``None`` marks the end."""
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    try:
        while True:
            try:
                chunk = os.read(fd, _READ_SIZE)
            except OSError:
                break
            if not chunk:
                break
            text = decoder.decode(chunk)
            if text:
                sink.put((stream, text))
    finally:
        tail = decoder.decode(b"", final=True)
        if tail:
            sink.put((stream, tail))
        sink.put((stream, None))
        try:
            os.close(fd)
        except OSError:
            pass


class Process:
    """A spawned program whose stdout and stderr are read line by line.

    The parent keeps its own copy of the write end of the child's stdout
    pipe and registers it, so that a null byte written there wakes a
    blocked reader when a stop is requested.
    """

    def __init__(self, realtime_logging: bool = True) -> None:
        self.realtime_logging = realtime_logging
        self._popen: Optional[subprocess.Popen] = None
        self._stdout_write: Optional[int] = None
        self._chunks: "queue.Queue[_Chunk]" = queue.Queue()
        self._backlog: deque[_Chunk] = deque()
        self._output_eof = False
        self._writer_lock = threading.Lock()
        self._wd = ""
        self._command = ""
        self._args = ""
        self._log_name = ""
        self._initialized = False
        self._startup_error = False

    def __enter__(self) -> "Process":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.kill()

    @property
    def pid(self) -> Optional[int]:
        """The child's process id, or None if it never started."""
        return self._popen.pid if self._popen is not None else None

    def start(self, wd: str, command: str, args: str, log_name: str) -> Status:
        """Spawn ``command`` with the shell-style argument string ``args``."""
        if self._initialized:
            raise RuntimeError(f"process {log_name!r} already started")

        self._wd, self._command, self._args, self._log_name = wd, command, args, log_name
        self._initialized = True
        self._startup_error = False
        self._chunks = queue.Queue()
        self._backlog.clear()
        self._output_eof = False

        out_read, out_write = os.pipe()
        err_read, err_write = os.pipe()
        try:
            argv = [command, *shlex.split(args)]
            popen = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE,
                stdout=out_write,
                stderr=err_write,
                close_fds=True,
                creationflags=getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0),
            )
        except (OSError, ValueError) as error:
            _log.debug("Cannot start %s: %s", log_name, error)
            for fd in (out_read, out_write, err_read):
                os.close(fd)
            self._startup_error = True
            return Status.ERR
        finally:
            os.close(err_write)

        self._popen = popen
        self._stdout_write = out_write

        for fd, stream in ((out_read, Stream.OUTPUT), (err_read, Stream.ERR)):
            threading.Thread(
                target=_pump,
                args=(fd, stream, self._chunks),
                name=f"{log_name}-{stream.value}",
                daemon=True,
            ).start()

        register_process(ProcessInformation(popen.pid, out_write))
        return Status.OK

    def alive(self) -> Status:
        """OK while the child is running, ERR otherwise."""
        if self._popen is None or self._popen.poll() is not None:
            return Status.ERR
        return Status.OK

    def read_until(self, search_word: str, timeout: Optional[float] = None) -> tuple[Status, list[Line]]:
        """Read lines until a stdout line starts with ``search_word``.

        Returns the status and the lines read. ``timeout`` is the number of
        seconds to wait for further output; None or a value <= 0 waits
        indefinitely. An empty ``search_word`` never matches. Lines on
        stderr are collected but never matched.
        """
        self._require_started()

        lines: list[Line] = []
        partial = {Stream.OUTPUT: "", Stream.ERR: ""}
        limit = timeout if timeout is not None and timeout > 0 else None
        last_activity = time.monotonic()

        while True:
            if self._output_eof and not self._backlog and self._chunks.empty():
                return Status.ERR, lines

            item: Optional[_Chunk]
            if self._backlog:
                item = self._backlog.popleft()
            else:
                wait = _POLL_SLICE
                if limit is not None:
                    wait = min(wait, max(0.0, limit - (time.monotonic() - last_activity)))
                try:
                    item = self._chunks.get(timeout=wait)
                except queue.Empty:
                    item = None

            if stop_requested():
                return Status.ERR, lines

            if item is None:
                if limit is not None and time.monotonic() - last_activity >= limit:
                    pending = partial[Stream.OUTPUT]
                    if pending:
                        lines.append(self._record(pending, Stream.OUTPUT))
                    return Status.TIMEOUT, lines
                self._release_if_exited()
                continue

            last_activity = time.monotonic()
            stream, text = item
            if text is None:
                if stream is Stream.OUTPUT:
                    self._output_eof = True
                    return Status.ERR, lines
                continue

            buffer = partial[stream] + text
            start = 0
            for newline in _NEWLINE.finditer(buffer):
                content = buffer[start:newline.start()]
                start = newline.end()
                if not content:
                    continue
                lines.append(self._record(content, stream))
                if stream is Stream.OUTPUT and search_word and content.startswith(search_word):
                    rest = buffer[start:]
                    if rest:
                        self._backlog.appendleft((stream, rest))
                    return Status.OK, lines
            partial[stream] = buffer[start:]

    def write(self, data: str) -> Status:
        """Write ``data`` to the child's stdin."""
        self._require_started()
        if self.alive() is not Status.OK:
            return Status.ERR
        stdin = self._popen.stdin if self._popen is not None else None
        if stdin is None:
            return Status.ERR
        try:
            stdin.write(data.encode("utf-8"))
            stdin.flush()
        except (OSError, ValueError):
            return Status.ERR
        return Status.OK

    def kill(self) -> None:
        """Stop the child if it is still running and release its pipes."""
        if self._startup_error:
            self._initialized = False
            return
        if not self._initialized or self._popen is None:
            return

        popen = self._popen
        unregister_process(popen.pid)

        code = popen.poll()
        if code is None:
            popen.kill()
            popen.wait()
        else:
            _log.debug("[%s] exited with status %s", self._log_name, _describe_exit(code))

        if popen.stdin is not None:
            try:
                popen.stdin.close()
            except OSError:
                pass
        self._close_output_writer()
        self._initialized = False

    def restart(self) -> None:
        """Kill the child and start it again with the same settings."""
        _log.debug("Restarting %s", self._log_name)
        self.kill()
        self._initialized = False
        self._startup_error = False
        self.start(self._wd, self._command, self._args, self._log_name)

    def _require_started(self) -> None:
        if not self._initialized:
            raise RuntimeError("process has not been started")

    def _record(self, content: str, stream: Stream) -> Line:
        line = Line(content, _timestamp(), stream)
        if self.realtime_logging:
            _log.debug("[%s] %s %s", self._log_name, "<stderr>" if stream is Stream.ERR else "<---", content)
        return line

    def _release_if_exited(self) -> None:
        """Once the child is gone, close our stdout copy so the reader sees EOF."""
        if self._popen is not None and self._popen.poll() is not None:
            self._close_output_writer()

    def _close_output_writer(self) -> None:
        with self._writer_lock:
            if self._stdout_write is None:
                return
            if self._popen is not None:
                unregister_process(self._popen.pid)
            try:
                os.close(self._stdout_write)
            except OSError:
                pass
            self._stdout_write = None