"""Infrastructure components for error handling and performance monitoring."""

from .error_handling import (
    ArbitrageError,
    DataFormatError,
    PairNotFoundError,
    BrokenCycleError,
    SubgraphError,
    async_retry_with_backoff,
    ErrorHandler,
)
from .performance import PerformanceMonitor, StageMetrics, StageTimer

__all__ = [
    "ArbitrageError",
    "DataFormatError",
    "PairNotFoundError",
    "BrokenCycleError",
    "SubgraphError",
    "async_retry_with_backoff",
    "ErrorHandler",
    "PerformanceMonitor",
    "StageMetrics",
    "StageTimer",
]
