from __future__ import annotations

import itertools
from typing import Callable, Optional

ProgressCallback = Callable[[int, int], None]   # processed, total


class ProgressCounter:
    """
    Monotonic per-run counter with a one-way notification sink.

    next() on itertools.count is atomic under the GIL, so the worker thread
    can advance it while another thread reads `value` without locking.
    Reads are advisory; every advance is pushed to the sink.
    """

    def __init__(self, total: int, sink: Optional[ProgressCallback] = None):
        self.total = total
        self._sink = sink
        self._counter = itertools.count(1)
        self._value = 0

    @property
    def value(self) -> int:
        return self._value

    def advance(self) -> int:
        n = next(self._counter)
        self._value = n
        if self._sink:
            self._sink(n, self.total)
        return n
