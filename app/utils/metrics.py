"""Métricas en memoria de los jobs de Todo Reminders."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.domain.entities.dispatch import DispatchReport

logger = logging.getLogger(__name__)


# ==================== DATA CLASSES ====================

@dataclass
class JobMetrics:
    """Métricas acumuladas de un job."""

    job_name: str
    run_count: int = 0
    failed_runs: int = 0
    processed_total: int = 0
    sent_total: int = 0
    error_total: int = 0
    total_time_ms: float = 0
    min_time_ms: float = float("inf")
    max_time_ms: float = 0
    last_run: datetime | None = None
    last_report: dict[str, Any] | None = None
    recent_times: list[float] = field(default_factory=list)

    @property
    def avg_time_ms(self) -> float:
        if self.run_count == 0:
            return 0
        return self.total_time_ms / self.run_count

    @property
    def p95_time_ms(self) -> float:
        if not self.recent_times:
            return 0
        sorted_times = sorted(self.recent_times)
        idx = int(len(sorted_times) * 0.95)
        return sorted_times[min(idx, len(sorted_times) - 1)]

    def record(self, report: DispatchReport, time_ms: float) -> None:
        """Registra una corrida."""
        self.run_count += 1
        self.total_time_ms += time_ms
        self.min_time_ms = min(self.min_time_ms, time_ms)
        self.max_time_ms = max(self.max_time_ms, time_ms)
        self.last_run = datetime.now()
        self.last_report = report.to_dict()

        if not report.success:
            self.failed_runs += 1
        self.processed_total += report.processed_count
        self.sent_total += report.sent_count
        self.error_total += report.error_count

        # Mantener últimas 100 corridas para percentiles
        self.recent_times.append(time_ms)
        if len(self.recent_times) > 100:
            self.recent_times.pop(0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_name": self.job_name,
            "run_count": self.run_count,
            "failed_runs": self.failed_runs,
            "processed_total": self.processed_total,
            "sent_total": self.sent_total,
            "error_total": self.error_total,
            "avg_time_ms": round(self.avg_time_ms, 2),
            "min_time_ms": round(self.min_time_ms, 2) if self.min_time_ms != float("inf") else 0,
            "max_time_ms": round(self.max_time_ms, 2),
            "p95_time_ms": round(self.p95_time_ms, 2),
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "last_report": self.last_report,
        }


# ==================== METRICS COLLECTOR ====================

class MetricsCollector:
    """Colector centralizado de métricas."""

    def __init__(self):
        self._jobs: dict[str, JobMetrics] = {}
        self._start_time = datetime.now()
        self._lock = asyncio.Lock()

    async def record_job(self, job_name: str, report: DispatchReport, time_ms: float) -> None:
        """Registra el resultado de una corrida de un job."""
        async with self._lock:
            if job_name not in self._jobs:
                self._jobs[job_name] = JobMetrics(job_name=job_name)
            self._jobs[job_name].record(report, time_ms)

    def get_job_metrics(self, job_name: str | None = None) -> list[dict]:
        """Obtiene métricas de jobs."""
        if job_name:
            if job_name in self._jobs:
                return [self._jobs[job_name].to_dict()]
            return []

        return [m.to_dict() for m in self._jobs.values()]

    def get_summary(self) -> dict[str, Any]:
        """Obtiene resumen de todas las métricas."""
        uptime = datetime.now() - self._start_time

        return {
            "uptime_seconds": int(uptime.total_seconds()),
            "uptime_human": str(uptime).split(".")[0],
            "jobs": {
                "total_runs": sum(j.run_count for j in self._jobs.values()),
                "failed_runs": sum(j.failed_runs for j in self._jobs.values()),
                "sent_total": sum(j.sent_total for j in self._jobs.values()),
                "error_total": sum(j.error_total for j in self._jobs.values()),
                "details": self.get_job_metrics(),
            },
        }

    def reset(self) -> None:
        """Reinicia todas las métricas."""
        self._jobs.clear()
        self._start_time = datetime.now()


# ==================== SINGLETON ====================

_metrics_collector: MetricsCollector | None = None


def get_metrics_collector() -> MetricsCollector:
    """Obtiene el colector de métricas singleton."""
    global _metrics_collector
    if _metrics_collector is None:
        _metrics_collector = MetricsCollector()
    return _metrics_collector
