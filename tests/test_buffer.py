import threading
import unittest

from tersehtml import BufferPool, CharBuffer


class TestCharBuffer(unittest.TestCase):
    def test_append_and_read(self):
        buffer = CharBuffer()
        assert not buffer
        buffer.append("var a;")
        buffer.append("")
        buffer.append("\nvar b;")
        assert buffer
        assert len(buffer) == 13
        assert buffer.getvalue() == "var a;\nvar b;"
        assert buffer.reader().read() == "var a;\nvar b;"

    def test_clear(self):
        buffer = CharBuffer()
        buffer.append("x")
        buffer.clear()
        assert len(buffer) == 0
        assert buffer.getvalue() == ""


class TestBufferPool(unittest.TestCase):
    def test_released_buffer_is_reused_and_cleared(self):
        pool = BufferPool()
        buffer = pool.acquire()
        buffer.append("abc")
        pool.release(buffer)
        again = pool.acquire()
        assert again is buffer
        assert again.getvalue() == ""

    def test_live_buffers_are_distinct(self):
        pool = BufferPool()
        first = pool.acquire()
        second = pool.acquire()
        assert first is not second

    def test_max_size(self):
        pool = BufferPool(max_size=2)
        buffers = [pool.acquire() for _ in range(4)]
        for buffer in buffers:
            pool.release(buffer)
        assert len(pool) == 2

    def test_double_release_is_not_pooled_twice(self):
        pool = BufferPool()
        buffer = pool.acquire()
        pool.release(buffer)
        pool.release(buffer)
        assert len(pool) == 1
        assert pool.acquire() is buffer
        assert pool.acquire() is not buffer

    def test_buffers_are_never_shared_across_threads(self):
        pool = BufferPool()
        in_use = set()
        lock = threading.Lock()
        failures = []

        def worker():
            for _ in range(200):
                buffer = pool.acquire()
                with lock:
                    if id(buffer) in in_use:
                        failures.append(buffer)
                    in_use.add(id(buffer))
                buffer.append("x")
                with lock:
                    in_use.discard(id(buffer))
                pool.release(buffer)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert failures == []
