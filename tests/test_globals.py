import os
import signal
import subprocess
import sys

import pytest

from uciarena.globals import (
    ProcessInformation,
    install_interrupt_handler,
    register_process,
    registered_processes,
    request_stop,
    reset_stop,
    stop_processes,
    stop_requested,
    unregister_process,
    write_to_open_pipes,
)


@pytest.fixture(autouse=True)
def clean_state():
    reset_stop()
    yield
    for info in registered_processes():
        unregister_process(info.identifier)
    reset_stop()


def test_stop_flag_cycle():
    assert stop_requested() is False
    request_stop()
    assert stop_requested() is True
    reset_stop()
    assert stop_requested() is False


def test_register_and_unregister():
    first = ProcessInformation(999_999_991, None)
    second = ProcessInformation(999_999_992, None)
    register_process(first)
    register_process(second)
    assert registered_processes() == [first, second]
    unregister_process(first.identifier)
    assert registered_processes() == [second]


def test_registered_processes_is_a_snapshot():
    register_process(ProcessInformation(999_999_993, None))
    snapshot = registered_processes()
    snapshot.clear()
    assert len(registered_processes()) == 1


def test_write_to_open_pipes_sends_null_byte():
    read_fd, write_fd = os.pipe()
    try:
        register_process(ProcessInformation(999_999_994, write_fd))
        write_to_open_pipes()
        assert os.read(read_fd, 16) == b"\0"
    finally:
        os.close(read_fd)
        os.close(write_fd)


def test_stop_processes_kills_registered_process():
    proc = subprocess.Popen([sys.executable, "-c", "import time; time.sleep(30)"])
    try:
        register_process(ProcessInformation(proc.pid, None))
        stop_processes()
        assert proc.wait(timeout=10) < 0
    finally:
        if proc.poll() is None:
            proc.kill()
            proc.wait()


def test_interrupt_handler_requests_stop():
    previous = install_interrupt_handler()
    try:
        signal.raise_signal(signal.SIGINT)
        assert stop_requested() is True
    finally:
        signal.signal(signal.SIGINT, previous)