import time
from collections.abc import Sequence

from enrollment_ingest.logging.logger import Log
from enrollment_ingest.processor.models import ProcessingResult, RawDocument
from enrollment_ingest.processor.processor import DocumentProcessor
from enrollment_ingest.scheduler.metrics import diff, take_snapshot
from enrollment_ingest.scheduler.models import ProcessMode, StressTestReport
from enrollment_ingest.scheduler.worker_pool import WorkerPool

DEFAULT_BATCH_SIZE = 10


def concurrency_for(mode: ProcessMode, batch_size: int = DEFAULT_BATCH_SIZE) -> int | None:
    """Map a process mode to a worker pool concurrency limit."""
    if mode is ProcessMode.SEQUENTIAL:
        return 1
    if mode is ProcessMode.BATCH:
        if batch_size < 1:
            raise ValueError("batch_size must be a positive integer")
        return batch_size
    return None


class BatchScheduler:
    """Drives many documents through the processor and aggregates a report.

    No locking happens across documents: two receipts of the same student
    processed concurrently can both pass the quota and pending-document
    checks before either is persisted.
    """

    def __init__(self, processor: DocumentProcessor) -> None:
        self._processor = processor

    def run(
        self,
        documents: Sequence[RawDocument],
        mode: ProcessMode = ProcessMode.PARALLEL,
        skip_persist: bool = True,
        detailed_metrics: bool = True,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> StressTestReport:
        Log.info(
            f"Starting stress test: {len(documents)} files, mode: {mode.value}, "
            f"skip_persist: {skip_persist}"
        )
        pool: WorkerPool[RawDocument, ProcessingResult] = WorkerPool(
            concurrency_for(mode, batch_size)
        )

        def task(index: int, document: RawDocument) -> ProcessingResult:
            return self._processor.process(
                document,
                index=index,
                skip_persist=skip_persist,
                detailed_metrics=detailed_metrics,
            )

        before = take_snapshot()
        start = time.perf_counter()
        results = pool.map(task, documents)
        total_ms = (time.perf_counter() - start) * 1000
        system_metrics = diff(before, take_snapshot())

        report = self._aggregate(documents, results, total_ms, mode, detailed_metrics)
        report.system_metrics = system_metrics
        Log.info(
            f"Stress test completed: {report.successful_files}/{report.total_files} successful, "
            f"{report.throughput:.2f} files/sec, {report.total_duration_ms:.0f}ms total"
        )
        return report

    @staticmethod
    def _aggregate(
        documents: Sequence[RawDocument],
        results: list[ProcessingResult],
        total_ms: float,
        mode: ProcessMode,
        detailed_metrics: bool,
    ) -> StressTestReport:
        ordered = sorted(results, key=lambda r: r.index)
        durations = [r.duration_ms for r in ordered]
        successful = sum(1 for r in ordered if r.success)
        throughput = len(documents) / (total_ms / 1000) if total_ms > 0 else 0.0
        return StressTestReport(
            total_files=len(documents),
            processed_files=len(ordered),
            successful_files=successful,
            failed_files=len(ordered) - successful,
            total_duration_ms=round(total_ms, 3),
            average_duration_ms=round(sum(durations) / len(durations), 3) if durations else 0.0,
            min_duration_ms=min(durations, default=0.0),
            max_duration_ms=max(durations, default=0.0),
            throughput=round(throughput, 2),
            mode=mode,
            results=ordered if detailed_metrics else [],
        )
