"""Concurrent emission: every line reaches the file whole and exactly once."""

import logging
import threading

import pytest

from conftest import read_lines
from diaglog.severity import Severity

THREADS = 8
MESSAGES = 250


def _emit_all(barrier, index):
    log = logging.getLogger("worker")
    barrier.wait()
    for n in range(MESSAGES):
        log.warning("thread %d message %d payload %s", index, n, "x" * (n % 40))


@pytest.mark.parametrize("flush_level", [Severity.DEBUG, Severity.FATAL])
def test_lines_are_complete_and_not_interleaved(context, settings, tmp_path, flush_level):
    context.initialize(tmp_path, Severity.WARNING, flush_level, settings=settings)
    barrier = threading.Barrier(THREADS)
    threads = [
        threading.Thread(target=_emit_all, args=(barrier, i), name=f"Worker-{i}")
        for i in range(THREADS)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    context.shutdown()

    lines = read_lines(tmp_path / "test.log")
    assert len(lines) == THREADS * MESSAGES
    expected = {
        f"Warning [Worker-{i}] worker: thread {i} message {n} payload {'x' * (n % 40)}\n"
        for i in range(THREADS)
        for n in range(MESSAGES)
    }
    assert set(lines) == expected


def test_shutdown_while_writing_is_safe(context, settings, tmp_path):
    context.initialize(tmp_path, settings=settings)
    stop = threading.Event()

    def spam():
        while not stop.is_set():
            context.warning("spam")

    threads = [threading.Thread(target=spam) for _ in range(4)]
    for t in threads:
        t.start()
    context.shutdown()
    stop.set()
    for t in threads:
        t.join()

    lines = read_lines(tmp_path / "test.log")
    assert all(line.endswith("]: spam\n") for line in lines)
