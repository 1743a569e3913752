from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, TypeVar

T = TypeVar('T')
R = TypeVar('R')


class WorkerPool:
    """
    Bounded pool for chunked data-parallel work over read-only sequences.

    Results are always combined in chunk order, so the outcome of every
    helper is the same as a sequential left-to-right pass.
    """

    def __init__(self, workers: int = 4, chunk_size: int = 1024):
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self.workers = workers
        self.chunk_size = chunk_size
        self._executor: Optional[ThreadPoolExecutor] = None

    def _bounds(self, start: int, stop: int) -> List[range]:
        return [range(lo, min(lo + self.chunk_size, stop))
                for lo in range(start, stop, self.chunk_size)]

    def _run(self, fn: Callable[[range], R], chunks: List[range]) -> List[R]:
        if self.workers == 1 or len(chunks) <= 1:
            return [fn(chunk) for chunk in chunks]
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self.workers,
                                                thread_name_prefix='placement')
        return list(self._executor.map(fn, chunks))

    def map_chunks(self, fn: Callable[[range], R], n: int) -> List[R]:
        """apply fn to every index chunk of range(n), results in chunk order."""
        return self._run(fn, self._bounds(0, n))

    def max_reduce(self, fn: Callable[[range], Optional[T]], n: int,
                   key: Callable[[T], object]) -> Optional[T]:
        # fn returns the best item of its chunk (or None); ties go to the
        # earliest chunk since max() keeps the first maximal element
        found = [r for r in self.map_chunks(fn, n) if r is not None]
        if not found:
            return None
        return max(found, key=key)

    def find_first(self, predicate: Callable[[int], bool], n: int,
                   start: int = 0) -> Optional[int]:
        """lowest index i >= start with predicate(i), or None."""
        def scan(chunk: range) -> Optional[int]:
            for i in chunk:
                if predicate(i):
                    return i
            return None

        window = self.chunk_size * self.workers
        for lo in range(start, n, window):
            hits = [i for i in self._run(scan, self._bounds(lo, min(lo + window, n)))
                    if i is not None]
            if hits:
                return min(hits)
        return None

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> 'WorkerPool':
        return self

    def __exit__(self, *exc):
        self.close()

    def __repr__(self) -> str:
        return f"WorkerPool(workers={self.workers}, chunk_size={self.chunk_size})"
