"""Reusable character buffers for script accumulation.

A script region's text arrives as any number of text tokens and has to be
handed to the script minifier as one unit. Rather than allocating a fresh
buffer per region, passes borrow a :class:`CharBuffer` from a
:class:`BufferPool` and hand it back when the region closes (or when the
consumer abandons the pass).
"""

import io
import threading
from collections import deque


class CharBuffer:
    __slots__ = ("_chunks", "_length")

    def __init__(self):
        self._chunks = []
        self._length = 0

    def append(self, text):
        if text:
            self._chunks.append(text)
            self._length += len(text)

    def __len__(self):
        return self._length

    def __bool__(self):
        return self._length > 0

    def getvalue(self):
        chunks = self._chunks
        if len(chunks) > 1:
            # Collapse so repeated reads don't re-join.
            chunks[:] = ["".join(chunks)]
        return chunks[0] if chunks else ""

    def reader(self):
        """Readable text stream over the current contents."""
        return io.StringIO(self.getvalue())

    def clear(self):
        self._chunks.clear()
        self._length = 0


class BufferPool:
    """Thread-safe free list of :class:`CharBuffer` objects.

    A buffer handed out by :meth:`acquire` belongs to the caller until it is
    given back with :meth:`release`; the pool never hands the same live
    buffer to two callers.
    """

    __slots__ = ("_free", "_lock", "max_size")

    def __init__(self, max_size=8):
        self.max_size = max_size
        self._free = deque()
        self._lock = threading.Lock()

    def acquire(self):
        with self._lock:
            if self._free:
                return self._free.pop()
        return CharBuffer()

    def release(self, buffer):
        buffer.clear()
        with self._lock:
            if len(self._free) < self.max_size and not any(b is buffer for b in self._free):
                self._free.append(buffer)

    def __len__(self):
        with self._lock:
            return len(self._free)


DEFAULT_BUFFER_POOL = BufferPool()
