"""Tests for the reader/writer lock."""

import threading
import time

import pytest

from ledger_server.core.rwlock import ReadWriteLock

# Generous bound for "this should have happened by now" waits.
_WAIT = 2.0


@pytest.mark.unit
class TestReadWriteLock:
    """Shared reads, exclusive writes."""

    def test_readers_overlap(self) -> None:
        lock = ReadWriteLock()
        inside = threading.Barrier(3, timeout=_WAIT)

        def reader() -> None:
            with lock.read():
                # All three must be inside at once to pass the barrier.
                inside.wait()

        threads = [threading.Thread(target=reader) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(_WAIT)

        assert not inside.broken

    def test_writer_excludes_readers(self) -> None:
        lock = ReadWriteLock()
        writer_inside = threading.Event()
        release_writer = threading.Event()
        reader_done = threading.Event()

        def writer() -> None:
            with lock.write():
                writer_inside.set()
                release_writer.wait(_WAIT)

        def reader() -> None:
            with lock.read():
                reader_done.set()

        w = threading.Thread(target=writer)
        w.start()
        assert writer_inside.wait(_WAIT)

        r = threading.Thread(target=reader)
        r.start()
        assert not reader_done.wait(0.1)

        release_writer.set()
        assert reader_done.wait(_WAIT)
        w.join(_WAIT)
        r.join(_WAIT)

    def test_writers_are_mutually_exclusive(self) -> None:
        lock = ReadWriteLock()
        active = 0
        peak = 0
        counter_lock = threading.Lock()

        def writer() -> None:
            nonlocal active, peak
            with lock.write():
                with counter_lock:
                    active += 1
                    peak = max(peak, active)
                time.sleep(0.001)
                with counter_lock:
                    active -= 1

        threads = [threading.Thread(target=writer) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(_WAIT)

        assert peak == 1

    def test_waiting_writer_blocks_new_readers(self) -> None:
        lock = ReadWriteLock()
        first_reader_inside = threading.Event()
        release_first_reader = threading.Event()
        order: list[str] = []

        def first_reader() -> None:
            with lock.read():
                first_reader_inside.set()
                release_first_reader.wait(_WAIT)

        def writer() -> None:
            with lock.write():
                order.append("writer")

        def late_reader() -> None:
            with lock.read():
                order.append("reader")

        t1 = threading.Thread(target=first_reader)
        t1.start()
        assert first_reader_inside.wait(_WAIT)

        tw = threading.Thread(target=writer)
        tw.start()
        time.sleep(0.05)  # let the writer queue up
        tr = threading.Thread(target=late_reader)
        tr.start()
        time.sleep(0.05)

        release_first_reader.set()
        for thread in (t1, tw, tr):
            thread.join(_WAIT)

        assert order == ["writer", "reader"]

    def test_lock_released_after_exception(self) -> None:
        lock = ReadWriteLock()

        with pytest.raises(RuntimeError):
            with lock.write():
                raise RuntimeError("boom")
        with pytest.raises(RuntimeError):
            with lock.read():
                raise RuntimeError("boom")

        # Both modes are usable again.
        with lock.write():
            pass
        with lock.read():
            pass
