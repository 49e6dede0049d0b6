import os
import platform
import time

import psutil

from enrollment_ingest.scheduler.models import ResourceSnapshot, SystemMetrics

_MB = 1024 * 1024


def take_snapshot() -> ResourceSnapshot:
    process = psutil.Process(os.getpid())
    memory = process.memory_info()
    cpu = process.cpu_times()
    return ResourceSnapshot(
        rss_bytes=memory.rss,
        vms_bytes=memory.vms,
        cpu_seconds=cpu.user + cpu.system,
    )


def diff(before: ResourceSnapshot, after: ResourceSnapshot) -> SystemMetrics:
    return SystemMetrics(
        rss_delta_bytes=after.rss_bytes - before.rss_bytes,
        vms_delta_bytes=after.vms_bytes - before.vms_bytes,
        cpu_time_ms=round((after.cpu_seconds - before.cpu_seconds) * 1000, 3),
    )


def system_stats() -> dict[str, str]:
    """Human-readable memory, uptime and platform figures for this process."""
    process = psutil.Process(os.getpid())
    memory = process.memory_info()
    uptime_minutes = int((time.time() - process.create_time()) // 60)
    return {
        "rss": f"{memory.rss / _MB:.2f} MB",
        "vms": f"{memory.vms / _MB:.2f} MB",
        "system_memory_used": f"{psutil.virtual_memory().percent:.1f}%",
        "cpu_count": str(psutil.cpu_count() or 0),
        "uptime": f"{uptime_minutes} minutes",
        "platform": platform.platform(),
        "python_version": platform.python_version(),
    }
