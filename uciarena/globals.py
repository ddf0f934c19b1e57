"""Process-wide stop flag and the registry of spawned engine processes.

On an interrupt the stop flag is raised; writing a null byte to each
engine's output pipe wakes any reader blocked on it so that it can notice
the flag, and as a last resort every registered process is killed.
"""

from __future__ import annotations

import logging
import os
import signal
import threading
from dataclasses import dataclass
from typing import Any, Optional

__all__ = [
    "ProcessInformation",
    "request_stop",
    "stop_requested",
    "reset_stop",
    "register_process",
    "unregister_process",
    "registered_processes",
    "write_to_open_pipes",
    "stop_processes",
    "install_interrupt_handler",
]

_log = logging.getLogger(__name__)

_stop = threading.Event()
_processes: list["ProcessInformation"] = []
_processes_lock = threading.Lock()


@dataclass(frozen=True)
class ProcessInformation:
    """A spawned engine: its pid and the write end of the pipe it is read from."""

    identifier: int
    fd_write: Optional[int] = None


def request_stop() -> None:
    """Raise the global stop flag."""
    _stop.set()


def stop_requested() -> bool:
    """Return True once a stop has been requested."""
    return _stop.is_set()


def reset_stop() -> None:
    """Lower the global stop flag."""
    _stop.clear()


def register_process(info: ProcessInformation) -> None:
    """Remember a spawned process so it can be cleaned up on exit."""
    with _processes_lock:
        _processes.append(info)


def unregister_process(pid: int) -> None:
    """Forget every registered process with the given pid."""
    with _processes_lock:
        _processes[:] = [info for info in _processes if info.identifier != pid]


def registered_processes() -> list[ProcessInformation]:
    """Return a snapshot of the registered processes."""
    with _processes_lock:
        return list(_processes)


def write_to_open_pipes() -> None:
    """Write a null byte to each registered pipe so blocked reads return."""
    with _processes_lock:
        for info in _processes:
            if info.fd_write is None:
                continue
            try:
                os.write(info.fd_write, b"\0")
            except OSError as error:
                _log.debug("Could not wake reader of process %s: %s", info.identifier, error)


def stop_processes() -> None:
    """Forcefully stop every registered process."""
    kill_signal = getattr(signal, "SIGKILL", signal.SIGTERM)
    with _processes_lock:
        for info in _processes:
            _log.debug("Cleaning up process with pid/handle: %s", info.identifier)
            for sig in (signal.SIGINT, kill_signal):
                try:
                    os.kill(info.identifier, sig)
                except OSError:
                    pass


def _handle_interrupt(signum: int, frame: Any) -> None:
    request_stop()


def install_interrupt_handler() -> Any:
    """Make SIGINT raise the stop flag; returns the previous handler."""
    return signal.signal(signal.SIGINT, _handle_interrupt)