from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Generic, TypeVar

from enrollment_ingest.logging.logger import Log

T = TypeVar("T")
R = TypeVar("R")


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class WorkerPool(Generic[T, R]):
    """Runs a task over items with at most ``concurrency`` tasks in flight.

    Items are split into consecutive chunks of ``concurrency`` items. All
    tasks of a chunk are submitted before any is awaited, and the next chunk
    starts only once the whole chunk has finished. ``concurrency=1`` is
    strictly sequential; ``concurrency=None`` puts every item in a single
    chunk.

    The task is expected to handle its own errors. An exception escaping a
    task is treated as a bug and re-raised after the chunk finishes.
    """

    def __init__(self, concurrency: int | None) -> None:
        if concurrency is not None and concurrency < 1:
            raise ValueError("concurrency must be a positive integer or None")
        self._concurrency = concurrency

    @property
    def concurrency(self) -> int | None:
        return self._concurrency

    def map(self, task: Callable[[int, T], R], items: Sequence[T]) -> list[R]:
        """Run ``task(index, item)`` for every item; results come back in input order."""
        if not items:
            return []
        size = self._concurrency or len(items)
        results: list[R] = []
        for chunk_number, (offset, chunk) in enumerate(self._chunks(items, size), start=1):
            if size == 1:
                results.append(task(offset, chunk[0]))
                continue
            results.extend(self._run_chunk(task, offset, chunk))
            Log.debug(f"Chunk {chunk_number} completed: {len(chunk)} items")
        return results

    @staticmethod
    def _chunks(items: Sequence[T], size: int) -> Iterator[tuple[int, Sequence[T]]]:
        for number, chunk in enumerate(chunked(items, size)):
            yield number * size, chunk

    @staticmethod
    def _run_chunk(task: Callable[[int, T], R], offset: int, chunk: Sequence[T]) -> list[R]:
        with ThreadPoolExecutor(
            max_workers=len(chunk), thread_name_prefix="doc-worker"
        ) as executor:
            futures = [
                executor.submit(task, offset + position, item)
                for position, item in enumerate(chunk)
            ]
            wait(futures)
        return [future.result() for future in futures]
