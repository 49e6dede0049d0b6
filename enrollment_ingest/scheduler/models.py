from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from enrollment_ingest.processor.models import ProcessingResult


class ProcessMode(str, Enum):
    SEQUENTIAL = "sequential"
    PARALLEL = "parallel"
    BATCH = "batch"


@dataclass(frozen=True)
class ResourceSnapshot:
    rss_bytes: int
    vms_bytes: int
    cpu_seconds: float


@dataclass
class SystemMetrics:
    """Resource deltas between the start and the end of a run."""

    rss_delta_bytes: int = 0
    vms_delta_bytes: int = 0
    cpu_time_ms: float = 0.0


@dataclass
class StressTestReport:
    total_files: int
    processed_files: int
    successful_files: int
    failed_files: int
    total_duration_ms: float
    average_duration_ms: float
    min_duration_ms: float
    max_duration_ms: float
    throughput: float
    mode: ProcessMode
    results: list[ProcessingResult] = field(default_factory=list)
    system_metrics: SystemMetrics | None = None


def report_to_dict(report: StressTestReport) -> dict[str, Any]:
    """Plain-JSON view of a report; the mode is emitted as its string value."""
    data = asdict(report)
    data["mode"] = report.mode.value
    return data
