"""
Execution timing for backends.

Backends time each test family as a named section so the pairwise
comparison cost is visible in Result.timing. GPU backends ask for CUDA
synchronisation so that queued kernels are included in the measurement.
"""

import time
from contextlib import contextmanager
from typing import Iterator


class Timer:
    """
    Accumulating section timer.

    Usage:
        timer = Timer()
        timer.start()
        with timer.section('kendall'):
            ...
        timer.stop()
        timer.result()
        # {'total_seconds': 0.004, 'kendall': 0.0038}
    """

    def __init__(self, sync_cuda: bool = False):
        self._sync_cuda = sync_cuda
        self._sections: dict[str, float] = {}
        self._start_time: float | None = None
        self._total: float | None = None

    def _sync(self) -> None:
        if not self._sync_cuda:
            return
        import torch
        if torch.cuda.is_available():
            torch.cuda.synchronize()

    def start(self) -> None:
        self._sync()
        self._start_time = time.perf_counter()

    def stop(self) -> None:
        self._sync()
        if self._start_time is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = time.perf_counter() - self._start_time

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Time a named section; repeated sections accumulate."""
        self._sync()
        start = time.perf_counter()
        try:
            yield
        finally:
            self._sync()
            elapsed = time.perf_counter() - start
            self._sections[name] = self._sections.get(name, 0.0) + elapsed

    def result(self) -> dict[str, float]:
        """
        Get timing results.

        Raises:
            RuntimeError: If called before stop()
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")
        result = {'total_seconds': self._total}
        result.update(self._sections)
        return result
