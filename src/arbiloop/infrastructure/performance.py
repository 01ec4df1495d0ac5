"""Stage timing and process metrics for arbitrage scans."""
import time
import psutil
from typing import Dict, Any, List, Optional
from dataclasses import dataclass, field
from threading import Lock
from loguru import logger

MB = 1024 * 1024


@dataclass
class StageMetrics:
    """Timings collected for one named pipeline stage."""

    durations: List[float] = field(default_factory=list)
    failures: int = 0
    # resident memory change across the last run
    memory_delta_mb: float = 0.0

    def add(self, duration: float, success: bool = True, memory_delta_mb: float = 0.0):
        self.durations.append(duration)
        self.memory_delta_mb = memory_delta_mb
        if not success:
            self.failures += 1

    @property
    def runs(self) -> int:
        return len(self.durations)

    @property
    def total_seconds(self) -> float:
        return sum(self.durations)

    @property
    def mean_seconds(self) -> float:
        if not self.durations:
            return 0.0
        return self.total_seconds / self.runs

    @property
    def last_seconds(self) -> float:
        return self.durations[-1] if self.durations else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'runs': self.runs,
            'failures': self.failures,
            'total_seconds': self.total_seconds,
            'mean_seconds': self.mean_seconds,
            'last_seconds': self.last_seconds,
            'max_seconds': max(self.durations, default=0.0),
            'memory_delta_mb': self.memory_delta_mb,
        }


class PerformanceMonitor:
    """Collects wall-clock time and memory growth per pipeline stage."""

    def __init__(self):
        self.stages: Dict[str, StageMetrics] = {}
        self.lock = Lock()
        self.start_time = time.time()
        self.process = psutil.Process()

    def measure(self, stage: str) -> "StageTimer":
        """Time a block and record it under stage, e.g.

            with monitor.measure("cycle_detection"):
                ...
        """
        return StageTimer(self, stage)

    def record(self, stage: str, duration: float, success: bool = True, memory_delta_mb: float = 0.0):
        with self.lock:
            self.stages.setdefault(stage, StageMetrics()).add(duration, success, memory_delta_mb)

    def rss_mb(self) -> float:
        return self.process.memory_info().rss / MB

    def get_metrics(self, stage: Optional[str] = None) -> Dict[str, Any]:
        """Metrics for one stage, or every stage keyed by name.

        An unknown stage gives an empty dict.
        """
        with self.lock:
            if stage is not None:
                metrics = self.stages.get(stage)
                return metrics.to_dict() if metrics else {}
            return {name: m.to_dict() for name, m in self.stages.items()}

    def slowest_stage(self) -> Optional[str]:
        with self.lock:
            if not self.stages:
                return None
            return max(self.stages, key=lambda name: self.stages[name].total_seconds)

    def get_system_metrics(self) -> Dict[str, Any]:
        return {
            'memory_mb': self.rss_mb(),
            'num_threads': self.process.num_threads(),
            'uptime_seconds': time.time() - self.start_time,
        }

    def log_summary(self):
        """Log one line per stage plus process memory."""
        system = self.get_system_metrics()
        logger.info(
            f"Scan finished in {system['uptime_seconds']:.2f}s, "
            f"memory {system['memory_mb']:.1f} MB"
        )
        for name, metrics in self.get_metrics().items():
            logger.info(
                f"  {name}: {metrics['last_seconds'] * 1000:.2f}ms "
                f"({metrics['memory_delta_mb']:+.1f} MB)"
            )
        slowest = self.slowest_stage()
        if slowest:
            logger.debug(f"Slowest stage: {slowest}")


class StageTimer:
    """Context manager returned by PerformanceMonitor.measure."""

    def __init__(self, monitor: PerformanceMonitor, stage: str):
        self.monitor = monitor
        self.stage = stage
        self.duration = 0.0
        self._start = 0.0
        self._rss_start = 0.0

    def __enter__(self):
        self._rss_start = self.monitor.rss_mb()
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self._start
        self.monitor.record(
            self.stage,
            self.duration,
            success=exc_type is None,
            memory_delta_mb=self.monitor.rss_mb() - self._rss_start,
        )
        return False
