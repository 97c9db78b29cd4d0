"""Tests for the entry queue."""

import threading

from cloudwatch_hook.entry_queue import EntryQueue, shared_queue
from cloudwatch_hook.levels import Level
from cloudwatch_hook.models import LogEntry


def _make_entry(i: int) -> LogEntry:
    return LogEntry(level=Level.INFO, logger_name="test", message=f"msg-{i}")


class TestFifo:
    def test_pop_order_matches_push_order(self):
        queue = EntryQueue()
        entries = [_make_entry(i) for i in range(10)]
        for entry in entries:
            queue.push(entry)

        popped = [queue.pop() for _ in range(10)]
        assert popped == entries
        assert queue.pop() is None

    def test_empty_queue_pops_none(self):
        assert EntryQueue().pop() is None

    def test_len(self):
        queue = EntryQueue()
        queue.push(_make_entry(0))
        queue.push(_make_entry(1))
        assert len(queue) == 2
        queue.pop()
        assert len(queue) == 1

    def test_interleaved(self):
        queue = EntryQueue()
        a, b, c = _make_entry(0), _make_entry(1), _make_entry(2)
        queue.push(a)
        queue.push(b)
        assert queue.pop() is a
        queue.push(c)
        assert queue.pop() is b
        assert queue.pop() is c
        assert queue.pop() is None

    def test_clear(self):
        queue = EntryQueue()
        queue.push(_make_entry(0))
        queue.clear()
        assert queue.pop() is None


class TestTake:
    def test_take_matching_id(self):
        queue = EntryQueue()
        first, second = _make_entry(0), _make_entry(1)
        queue.push(first)
        queue.push(second)

        assert queue.take(second.entry_id) is second
        assert len(queue) == 1
        assert queue.pop() is first

    def test_take_missing_id(self):
        queue = EntryQueue()
        queue.push(_make_entry(0))
        assert queue.take("nope") is None
        assert len(queue) == 1

    def test_take_follows_enrichment(self):
        queue = EntryQueue()
        raw = _make_entry(0)
        queue.push(raw.with_message("msg-0 {}"))
        taken = queue.take(raw.entry_id)
        assert taken is not None
        assert taken.message == "msg-0 {}"


class TestConcurrency:
    def test_concurrent_pushes_lose_nothing(self):
        queue = EntryQueue()
        per_thread = 500

        def producer(n):
            for i in range(per_thread):
                queue.push(_make_entry(n * per_thread + i))

        threads = [threading.Thread(target=producer, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(queue) == 8 * per_thread

    def test_concurrent_pops_never_duplicate(self):
        queue = EntryQueue()
        for i in range(2000):
            queue.push(_make_entry(i))
        seen: list[str] = []
        lock = threading.Lock()

        def consumer():
            while True:
                entry = queue.pop()
                if entry is None:
                    return
                with lock:
                    seen.append(entry.entry_id)

        threads = [threading.Thread(target=consumer) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(seen) == 2000
        assert len(set(seen)) == 2000


class TestSharedQueue:
    def test_is_an_entry_queue(self):
        assert isinstance(shared_queue, EntryQueue)
